# backend/collaborators.py
"""
Outbound calls to services this app does not own: the signature recording endpoint
and the PDF renderer. One attempt each, no retry; failures come back as CollaboratorError.
"""
import logging
from typing import Optional

import requests

import config

logger = logging.getLogger(__name__)


class CollaboratorError(RuntimeError):
    def __init__(self, message: str, status_code: Optional[int] = None, configured: bool = True):
        super().__init__(message)
        self.status_code = status_code
        self.configured = configured


def _post(name: str, url: Optional[str], payload: dict) -> dict:
    if not url:
        raise CollaboratorError(f"{name} is not configured", configured=False)
    try:
        response = requests.post(url, json=payload, timeout=config.COLLABORATOR_TIMEOUT)
    except requests.RequestException as e:
        logger.error("%s request to %s failed: %s", name, url, e)
        raise CollaboratorError(f"{name} is unreachable. Please try again.") from e

    if not response.ok:
        detail = ""
        try:
            body = response.json()
            if isinstance(body, dict):
                detail = str(body.get("error") or body.get("detail") or "")
        except ValueError:
            detail = response.text[:200]
        logger.error("%s returned %s: %s", name, response.status_code, detail)
        raise CollaboratorError(f"{name} failed: {detail or response.reason}", status_code=response.status_code)

    try:
        return response.json()
    except ValueError:
        return {}


def submit_signature(payload: dict) -> dict:
    """
    payload keys: documentId, signerName, signerEmail, signerType, signatureData,
    signatureCoordinates, deviceInfo, signingSessionId
    """
    return _post("Signature service", config.SIGNATURE_ENDPOINT_URL, payload)


def request_pdf(document_id: str) -> dict:
    """Ask the PDF service to render a document. Returns its JSON, ideally with `pdf_url`."""
    return _post("PDF service", config.PDF_SERVICE_URL, {"documentId": document_id})
