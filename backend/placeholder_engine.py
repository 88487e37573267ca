# backend/placeholder_engine.py
import re
from enum import Enum

# {{identifier}} with no braces inside; whitespace is part of the name, so
# "{{ name }}" never matches a field called "name".
PLACEHOLDER_RE = re.compile(r"\{\{([^{}]+)\}\}")

SELLER_MARKER = "SELLER_SIGNATURE_COMPONENT"
BROKER_MARKER = "BROKER_SIGNATURE_COMPONENT"
SIGNATURE_MARKERS = (SELLER_MARKER, BROKER_MARKER)


class RenderMode(str, Enum):
    FINAL = "final"
    PREVIEW = "preview"


def token(name: str) -> str:
    return "{{" + name + "}}"


def render(template: str, values: dict, mode: RenderMode = RenderMode.FINAL) -> str:
    """
    Replace every {{name}} whose name is a key of `values` with the value as a string.

    - None / "" resolve to the empty string.
    - Unknown names are left verbatim so missing data stays visible.
    - Single pass: substituted text is never scanned again.
    - PREVIEW wraps non-empty values in <strong> for visual feedback.
    """
    if not template:
        return ""
    values = values or {}

    def repl(m):
        name = m.group(1)
        if name not in values:
            return m.group(0)
        v = values[name]
        text = "" if v is None else str(v)
        if mode == RenderMode.PREVIEW and text:
            return f"<strong>{text}</strong>"
        return text

    return PLACEHOLDER_RE.sub(repl, template)


def find_placeholders(template: str, include_markers: bool = False) -> list[str]:
    """Unique placeholder names in order of first appearance."""
    seen, out = set(), []
    for m in PLACEHOLDER_RE.finditer(template or ""):
        name = m.group(1)
        if name in seen:
            continue
        if not include_markers and name in SIGNATURE_MARKERS:
            continue
        seen.add(name)
        out.append(name)
    return out


def unresolved(template: str, values: dict) -> list[str]:
    """Placeholders that would survive render() because no value key exists."""
    values = values or {}
    return [k for k in find_placeholders(template) if k not in values]
