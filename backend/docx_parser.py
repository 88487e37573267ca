# backend/docx_parser.py
from zipfile import BadZipFile

from docx import Document
from docx.opc.exceptions import PackageNotFoundError

from placeholder_engine import PLACEHOLDER_RE, SIGNATURE_MARKERS

def _paragraphs(doc):
    for p in doc.paragraphs:
        yield p
    for table in doc.tables:
        for row in table.rows:
            for cell in row.cells:
                for p in cell.paragraphs:
                    yield p

def find_placeholders(docx_path: str, include_markers: bool = True) -> list[str]:
    """
    Load DOCX and return unique {{token}} names in reading order (body paragraphs, then tables).
    Paragraph text is read whole, so tokens split across runs are still found.
    """
    doc = Document(docx_path)
    unique, seen = [], set()
    for p in _paragraphs(doc):
        text = p.text
        if "{{" not in text:
            continue
        for m in PLACEHOLDER_RE.finditer(text):
            k = m.group(1)
            if k in seen or (not include_markers and k in SIGNATURE_MARKERS):
                continue
            seen.add(k)
            unique.append(k)
    return unique

def is_docx(path: str) -> bool:
    try:
        Document(path)
    except (PackageNotFoundError, BadZipFile, KeyError):
        return False
    return True
