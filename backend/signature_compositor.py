# backend/signature_compositor.py
"""
Splices captured signatures into rendered document HTML.

Two placements, chosen once per signing session:

  embedded  a signature block goes immediately before the first mention of the
            signer's role ("seller"/"landlord", "broker"/"agent"). No mention, no block.
  end       the template carries {{SELLER_SIGNATURE_COMPONENT}} / {{BROKER_SIGNATURE_COMPONENT}}
            markers; on finalize a structural signatures section (or an
            "AGREED AND ACCEPTED" heading) is rebuilt as a two-column container.

compose() is the live preview. finalize() commits: in embedded mode it is compose()
plus marker cleanup, in end mode the commit runs on the unsigned document directly so
no preview block is ever left beside the container. Both expect the pristine
(unsigned) document as input; callers keep the unsigned HTML around.

Signer name, date and image src are HTML-escaped in every block. This deliberately
differs from a raw splice: a name such as "O'Neil & Sons" comes out as entities, so
output for values with markup characters is not byte-identical to unescaped output.
"""
import html
import logging
import re
from enum import Enum
from typing import Mapping, NamedTuple, Optional

from placeholder_engine import BROKER_MARKER, SELLER_MARKER, token
from signature_capture import SignatureData

logger = logging.getLogger(__name__)


class SignaturePosition(str, Enum):
    EMBEDDED = "embedded"
    END = "end"


class Role(NamedTuple):
    key: str
    label: str
    alt: str
    marker: str
    anchor: re.Pattern


SELLER = Role("seller", "Seller/Landlord", "Seller Signature", SELLER_MARKER,
              re.compile(r"seller|landlord", re.IGNORECASE))
BROKER = Role("broker", "Broker", "Broker Signature", BROKER_MARKER,
              re.compile(r"broker|agent", re.IGNORECASE))
ROLES = (SELLER, BROKER)

SIGNATURES_SECTION_RE = re.compile(r'<div class="signatures-section">[\s\S]*?</div>\s*</div>')
AGREED_SECTION_RE = re.compile(r"<h2>AGREED AND ACCEPTED</h2>[\s\S]*?(?=</div>\s*</div>|\Z)")
MARKERS_RE = re.compile("|".join(re.escape(token(m)) for m in (SELLER_MARKER, BROKER_MARKER)))

IMG_STYLE = "max-width: 200px; max-height: 60px; border: 2px solid #000; padding: 5px; background: white; margin: 10px 0;"
FRAME_STYLE = "padding: 20px; border: 2px solid #000; background-color: #f9f9f9; border-radius: 8px;"

Signatures = Mapping[str, Optional[SignatureData]]


def can_finalize(signatures: Signatures) -> bool:
    return any(signatures.get(r.key) is not None for r in ROLES)


# ---------- blocks ----------
def _details(sig: SignatureData, p_style: str = "") -> str:
    attr = f' style="{p_style}"' if p_style else ""
    name = html.escape(sig.signer_name or "Not provided")
    day = html.escape(sig.signer_date or "Not provided")
    return (f"<p{attr}><strong>Name:</strong> {name}</p>\n"
            f"<p{attr}><strong>Date:</strong> {day}</p>")


def _img(role: Role, sig: SignatureData, extra: str = "") -> str:
    src = html.escape(sig.data or "", quote=True)
    return f'<img src="{src}" alt="{role.alt}" style="{IMG_STYLE}{extra}"/>'


def embedded_block(role: Role, sig: SignatureData) -> str:
    return (f'\n<div class="embedded-signature-signed">\n'
            f"<h4>{role.label} Signature:</h4>\n"
            f"{_img(role, sig)}\n"
            f"{_details(sig)}\n"
            f"</div>")


def end_block(role: Role, sig: SignatureData) -> str:
    return (f'\n<div class="end-signature-signed">\n'
            f"<h4>{role.label}:</h4>\n"
            f"{_img(role, sig)}\n"
            f"{_details(sig)}\n"
            f"</div>\n")


def final_embedded_block(role: Role, sig: SignatureData) -> str:
    return (f'\n<div style="margin: 20px 0; padding: 15px; border: 2px solid #000; '
            f'background-color: #f9f9f9; border-radius: 8px;">\n'
            f'<h4 style="margin: 0 0 10px 0; font-weight: bold; color: #000;">{role.label}:</h4>\n'
            f'{_img(role, sig, " display: block;")}\n'
            f'{_details(sig, "margin: 5px 0; font-size: 0.9rem;")}\n'
            f"</div>\n")


def final_end_block(role: Role, sig: SignatureData, last: bool) -> str:
    gutter = "0" if last else "5%"
    style = (f"display: inline-block !important; width: 45% !important; vertical-align: top !important; "
             f"margin-right: {gutter} !important; {FRAME_STYLE}")
    return (f'\n<div class="end-signature-signed" style="{style}">\n'
            f"<h4>{role.label}:</h4>\n"
            f"{_img(role, sig)}\n"
            f"{_details(sig)}\n"
            f"</div>\n")


def signature_container(signatures: Signatures) -> str:
    seller, broker = signatures.get("seller"), signatures.get("broker")
    blocks = []
    if seller:
        blocks.append(final_end_block(SELLER, seller, last=False))
    if broker:
        blocks.append(final_end_block(BROKER, broker, last=True))
    style = ("display: block !important; width: 100% !important; margin: 20px 0 !important; "
             "padding: 0 !important; text-align: left !important;")
    return f'\n<div class="signature-container" style="{style}">\n{"".join(blocks)}\n</div>\n'


# ---------- passes ----------
def _embed(content: str, signatures: Signatures) -> tuple[str, list[str]]:
    # first match only; the broker search runs on the already-updated text
    out, missing = content, []
    for role in ROLES:
        sig = signatures.get(role.key)
        if not sig:
            continue
        m = role.anchor.search(out)
        if m is None:
            missing.append(role.key)
            continue
        out = out[:m.start()] + embedded_block(role, sig) + out[m.start():]
    return out, missing


def compose(content: str, signatures: Signatures, position: SignaturePosition) -> str:
    """Live preview: splice blocks for every signed role into `content`."""
    if not content:
        return ""
    position = SignaturePosition(position)
    out = content

    if position == SignaturePosition.EMBEDDED:
        out, missing = _embed(out, signatures)
        for key in missing:
            logger.warning("No anchor found for %s; signature not attached", key)
    else:
        for role in ROLES:
            sig = signatures.get(role.key)
            if sig:
                out = out.replace(token(role.marker), end_block(role, sig))
    return out


def _commit(content: str, signatures: Signatures, position: SignaturePosition) -> str:
    if position == SignaturePosition.EMBEDDED:
        out = content
        for role in ROLES:
            sig = signatures.get(role.key)
            out = out.replace(token(role.marker), final_embedded_block(role, sig) if sig else "")
        return out

    # end mode: `content` is the unsigned document, markers still in place
    container = signature_container(signatures)
    # section override first, then the heading, then plain marker substitution
    if SIGNATURES_SECTION_RE.search(content):
        section = ('\n<div class="signatures-section">\n<h2>AGREED AND ACCEPTED</h2>\n'
                   f"{container}\n</div>\n</div>")
        out = SIGNATURES_SECTION_RE.sub(lambda m: section, content)
    elif AGREED_SECTION_RE.search(content):
        heading = f"\n<h2>AGREED AND ACCEPTED</h2>\n{container}\n"
        out = AGREED_SECTION_RE.sub(lambda m: heading, content)
    else:
        out = MARKERS_RE.sub(lambda m: container, content, count=1)
    # the container is the only place signatures land; stray markers go
    return MARKERS_RE.sub("", out)


def finalize(content: str, signatures: Signatures, position: SignaturePosition) -> Optional[str]:
    """
    Final signed HTML, or None when nobody has signed (finalize is a no-op then).
    """
    if not can_finalize(signatures):
        return None
    position = SignaturePosition(position)
    if position == SignaturePosition.EMBEDDED:
        return _commit(compose(content, signatures, position), signatures, position)
    return _commit(content, signatures, position)


def unanchored_roles(content: str, signatures: Signatures, position: SignaturePosition) -> list[str]:
    """Signed roles whose block would not land anywhere in the live preview of `content`."""
    position = SignaturePosition(position)
    missing = []
    if position == SignaturePosition.EMBEDDED:
        return _embed(content or "", signatures)[1]

    structural = bool(SIGNATURES_SECTION_RE.search(content or "") or AGREED_SECTION_RE.search(content or ""))
    for role in ROLES:
        if signatures.get(role.key) and not structural and token(role.marker) not in (content or ""):
            missing.append(role.key)
    return missing
