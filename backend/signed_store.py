# backend/signed_store.py
"""
Signed documents kept in a local JSON file, outside the database.

Quota mirrors a browser storage budget: 5 MB total. When less than 500 KB is left the
store is trimmed to the 10 most recent documents before saving; if a save would still
overflow, only the 5 most recent survive next to the new one.
"""
import base64
import io
import json
import logging
import os
import time
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from config import DATA_DIR

logger = logging.getLogger(__name__)

MAX_DOCUMENTS = 10
MAX_CONTENT_LENGTH = 50000
QUOTA_BYTES = 5 * 1024 * 1024
LOW_SPACE_BYTES = 500000
TRUNCATION_NOTE = "\n\n[Content truncated due to size limitations...]"


class SignedDocumentStoreError(RuntimeError):
    pass


class StorageFull(SignedDocumentStoreError):
    pass


def compress_image_data(data_url: str, max_width: int = 200, max_height: int = 80,
                        quality: int = 60) -> str:
    """Shrink a raster data URL to a JPEG thumbnail on white; anything else comes back as-is."""
    if not data_url or not data_url.startswith("data:image/") or ";base64," not in data_url:
        return data_url
    try:
        raw = base64.b64decode(data_url.split(",", 1)[1])
        img = Image.open(io.BytesIO(raw))
        img.load()
    except (ValueError, UnidentifiedImageError, OSError):
        # svg and friends
        return data_url
    img.thumbnail((max_width, max_height))
    rgba = img.convert("RGBA")
    canvas = Image.new("RGB", rgba.size, "white")
    canvas.paste(rgba, mask=rgba)
    buf = io.BytesIO()
    canvas.save(buf, format="JPEG", quality=quality)
    return "data:image/jpeg;base64," + base64.b64encode(buf.getvalue()).decode("ascii")


def compress_signatures(serialized: str) -> str:
    try:
        signatures = json.loads(serialized)
    except (TypeError, ValueError) as e:
        logger.warning("Failed to compress signature data: %s", e)
        return serialized
    if not isinstance(signatures, dict):
        return serialized
    out = {}
    for key, sig in signatures.items():
        if isinstance(sig, dict) and isinstance(sig.get("data"), str):
            out[key] = {**sig, "data": compress_image_data(sig["data"])}
        elif sig:
            out[key] = sig
    return json.dumps(out)


def compress_content(content: str) -> str:
    if len(content) <= MAX_CONTENT_LENGTH:
        return content
    return content[:MAX_CONTENT_LENGTH - 100] + TRUNCATION_NOTE


def _most_recent(docs: list[dict], n: int) -> list[dict]:
    return sorted(docs, key=lambda d: d.get("signed_at") or "", reverse=True)[:n]


class SignedDocumentStore:
    def __init__(self, path: Optional[str] = None, quota: int = QUOTA_BYTES):
        self.path = Path(path or os.path.join(DATA_DIR, "signed_documents.json"))
        self.quota = quota

    # ---------- raw io ----------
    def _read(self) -> list[dict]:
        if not self.path.exists():
            return []
        try:
            docs = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.error("Error loading signed documents: %s", e)
            return []
        return docs if isinstance(docs, list) else []

    def _write(self, docs: list[dict]):
        payload = json.dumps(docs)
        if len(payload) > self.quota:
            raise StorageFull(f"{len(payload)} bytes exceeds the {self.quota} byte quota")
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(payload, encoding="utf-8")

    def _used(self) -> int:
        try:
            return self.path.stat().st_size
        except OSError:
            return 0

    # ---------- api ----------
    def all(self) -> list[dict]:
        return self._read()

    def get(self, doc_id: str) -> Optional[dict]:
        return next((d for d in self._read() if d.get("id") == doc_id), None)

    def save(self, doc: dict) -> dict:
        """
        doc: title, content, signed_by, signed_at, signature (JSON string), signing_date, template_name.
        Returns the stored record with its new id.
        """
        try:
            if self.quota - self._used() < LOW_SPACE_BYTES:
                logger.warning("Low storage space, cleaning up old documents")
                self.cleanup()

            existing = self._read()
            taken = {d.get("id") for d in existing}
            stamp = int(time.time() * 1000)
            while f"signed-{stamp}" in taken:
                stamp += 1
            signed = {
                **doc,
                "id": f"signed-{stamp}",
                "signature": compress_signatures(doc.get("signature") or "{}"),
                "content": compress_content(doc.get("content") or ""),
            }
            try:
                self._write([signed] + existing)
            except StorageFull:
                logger.warning("Storage quota exceeded, performing aggressive cleanup")
                self._write([signed] + _most_recent(existing, 5))
                logger.info("Successfully saved after cleanup")
            return signed
        except (OSError, SignedDocumentStoreError) as e:
            logger.error("Error saving signed document: %s", e)
            raise SignedDocumentStoreError("Failed to save signed document. Storage may be full.") from e

    def delete(self, doc_id: str) -> bool:
        docs = self._read()
        kept = [d for d in docs if d.get("id") != doc_id]
        if len(kept) == len(docs):
            return False
        self._write(kept)
        return True

    def clear(self):
        if self.path.exists():
            self.path.unlink()
        logger.info("All signed documents cleared from storage")

    def cleanup(self) -> int:
        docs = self._read()
        if len(docs) <= MAX_DOCUMENTS:
            return 0
        trimmed = _most_recent(docs, MAX_DOCUMENTS)
        self._write(trimmed)
        logger.info("Cleaned up %d old signed documents", len(docs) - len(trimmed))
        return len(docs) - len(trimmed)

    def usage(self) -> dict:
        used = self._used()
        return {
            "documents_count": len(self._read()),
            "storage_size": f"{used / (1024 * 1024):.2f} MB",
            "used": used,
            "available": self.quota - used,
            "total": self.quota,
        }

    def optimize(self) -> dict:
        before = self._used()
        cleaned = self.cleanup()
        return {"cleaned": cleaned, "size_before": before, "size_after": self._used()}
