# backend/field_collector.py
"""
Binds user input (or client/property data) to a template's field descriptors.
"""
from typing import Any, Iterable, Optional

from placeholder_engine import find_placeholders
from placeholder_hints import infer_field
from schemas import ClientInfo, PropertyInfo, TemplateField


class FieldValidationError(ValueError):
    def __init__(self, missing: list[str]):
        self.missing = missing
        super().__init__("Missing required fields: " + ", ".join(missing))


def parse_fields(raw: Optional[Iterable[Any]]) -> list[TemplateField]:
    return [f if isinstance(f, TemplateField) else TemplateField.model_validate(f) for f in (raw or [])]


def infer_fields(template_content: str) -> list[TemplateField]:
    """One text-ish descriptor per placeholder; signature markers are not fields."""
    return [TemplateField.model_validate(infer_field(name)) for name in find_placeholders(template_content)]


def _empty(v: Any) -> bool:
    return v is None or (isinstance(v, str) and not v.strip())


def initial_values(fields: Iterable[TemplateField]) -> dict:
    return {f.name: ("" if f.default is None else f.default) for f in fields}


def auto_populate(fields: Iterable[TemplateField], current: dict,
                  client: Optional[ClientInfo] = None,
                  listing: Optional[PropertyInfo] = None) -> dict:
    """
    Values taken from the client/property records for template fields that exist
    and are still empty. Never overwrites what the user already typed.
    """
    auto = {}
    if client:
        full_name = f"{client.first_name} {client.last_name}".strip()
        for prefix in ("client", "seller", "owner"):
            auto[f"{prefix}_name"] = full_name
            auto[f"{prefix}_email"] = client.email
            auto[f"{prefix}_phone"] = client.phone
            auto[f"{prefix}_address"] = client.address
    if listing:
        auto.update({
            "property_address": listing.address,
            "city": listing.city,
            "state": listing.state,
            "zip_code": listing.zip_code,
            "listing_price": listing.price,
            "sale_price": listing.price,
            "mls_number": listing.mls_number,
        })

    current = current or {}
    return {f.name: auto[f.name] for f in fields
            if not _empty(auto.get(f.name)) and _empty(current.get(f.name))}


def missing_required(fields: Iterable[TemplateField], values: dict) -> list[str]:
    values = values or {}
    return [f.name for f in fields if f.required and _empty(values.get(f.name))]


def completion(fields: Iterable[TemplateField], values: dict) -> tuple[int, int]:
    """(filled, total), e.g. for a "Fields completed: 3 / 7" counter."""
    fields = list(fields)
    values = values or {}
    return sum(1 for f in fields if not _empty(values.get(f.name))), len(fields)


def collect(fields: Iterable[TemplateField], submitted: dict,
            client: Optional[ClientInfo] = None,
            listing: Optional[PropertyInfo] = None) -> dict:
    """
    Defaults, then what was submitted, then auto-filled gaps.
    Raises FieldValidationError listing every empty required field.
    """
    fields = list(fields)
    values = initial_values(fields)
    values.update({k: v for k, v in (submitted or {}).items()})
    values.update(auto_populate(fields, values, client, listing))
    missing = missing_required(fields, values)
    if missing:
        raise FieldValidationError(missing)
    return values
