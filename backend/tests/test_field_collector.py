import pytest

from field_collector import (
    FieldValidationError, auto_populate, collect, completion, infer_fields, parse_fields,
)
from schemas import ClientInfo, PropertyInfo

FIELDS = parse_fields([
    {"name": "seller_name", "label": "Seller Name", "required": True},
    {"name": "seller_email", "type": "email"},
    {"name": "property_address", "required": True},
    {"name": "listing_price", "type": "currency", "default": "0"},
])

def test_infer_fields_from_content():
    fields = infer_fields("<p>{{client_email}} {{closing_date}} {{notes}} {{BROKER_SIGNATURE_COMPONENT}}</p>")
    assert [(f.name, f.type) for f in fields] == [
        ("client_email", "email"), ("closing_date", "date"), ("notes", "textarea"),
    ]
    assert fields[0].label == "Client Email"

def test_collect_reports_every_missing_required():
    with pytest.raises(FieldValidationError) as e:
        collect(FIELDS, {"seller_name": "  "})
    assert e.value.missing == ["seller_name", "property_address"]

def test_collect_fills_from_client_and_listing():
    values = collect(FIELDS, {}, ClientInfo(first_name="Jane", last_name="Doe", email="j@x.com"),
                     PropertyInfo(address="1 Main St", price=450000))
    assert values["seller_name"] == "Jane Doe"
    assert values["seller_email"] == "j@x.com"
    assert values["property_address"] == "1 Main St"
    # defaults are "filled", auto-populate leaves them
    assert values["listing_price"] == "0"

def test_auto_populate_never_overwrites():
    auto = auto_populate(FIELDS, {"seller_name": "Typed"}, ClientInfo(first_name="Jane", last_name="Doe"))
    assert "seller_name" not in auto

def test_auto_populate_only_template_fields():
    auto = auto_populate(FIELDS, {}, ClientInfo(first_name="A", last_name="B"), PropertyInfo(city="Austin"))
    assert auto == {"seller_name": "A B"}

def test_completion():
    assert completion(FIELDS, {"seller_name": "x", "listing_price": ""}) == (1, 4)
