# backend/placeholder_hints.py
import re

def guess_field_type(name: str) -> str:
    """
    Heuristic field type from a placeholder name such as `listing_price` or `closing_date`.
    Keep this deterministic and conservative: anything unclear is plain text.
    """
    k = name.strip().lower()

    if "email" in k:
        return "email"
    if any(w in k for w in ["phone", "mobile", "fax"]):
        return "phone"
    if "date" in k or k.endswith("_on") or k in ("dob", "expiration", "expiry"):
        return "date"
    if any(w in k for w in ["price", "amount", "deposit", "fee", "rent", "commission_amount"]):
        return "currency"
    if any(w in k for w in ["percent", "rate", "number", "count", "term_months", "bedrooms", "bathrooms", "sqft", "square_feet"]):
        return "number"
    if any(w in k for w in ["notes", "description", "terms", "conditions", "remarks"]):
        return "textarea"
    return "text"


def label_for(name: str) -> str:
    """`client_name` -> `Client Name`, `mlsNumber` -> `Mls Number`."""
    spaced = re.sub(r"(?<=[a-z0-9])(?=[A-Z])", " ", name.strip())
    words = [w for w in re.split(r"[_\-\s]+", spaced) if w]
    return " ".join(w.capitalize() for w in words) or name


def infer_field(name: str) -> dict:
    return {
        "name": name,
        "label": label_for(name),
        "type": guess_field_type(name),
        "required": False,
        "default": "",
        "options": None,
    }
