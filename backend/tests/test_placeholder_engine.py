from placeholder_engine import RenderMode, render, find_placeholders, unresolved

def test_render_scenario():
    t = "<p>Dear {{client_name}},</p><p>Price: {{price}}</p>"
    out = render(t, {"client_name": "Jane Doe", "price": "500000"})
    assert out == "<p>Dear Jane Doe,</p><p>Price: 500000</p>"

def test_unknown_tokens_left_verbatim():
    t = "Hello {{name}}, see {{missing}} and {{ name }}"
    assert render(t, {"name": "Ann"}) == "Hello Ann, see {{missing}} and {{ name }}"

def test_substituted_values_are_not_rescanned():
    out = render("Hi {{name}}", {"name": "{{other}}", "other": "X"})
    assert out == "Hi {{other}}"
    # a second call on the output is a different call
    assert render(out, {"other": "X"}) == "Hi X"

def test_none_and_numbers():
    assert render("{{a}}|{{b}}|{{c}}", {"a": None, "b": 0, "c": 12.5}) == "|0|12.5"

def test_preview_emphasizes_non_empty_only():
    out = render("{{a}}-{{b}}", {"a": "x", "b": ""}, RenderMode.PREVIEW)
    assert out == "<strong>x</strong>-"

def test_every_occurrence_replaced():
    assert render("{{a}} and {{a}}", {"a": "1"}) == "1 and 1"

def test_find_placeholders_skips_markers_and_dupes():
    t = "{{b}} {{a}} {{b}} {{SELLER_SIGNATURE_COMPONENT}}"
    assert find_placeholders(t) == ["b", "a"]
    assert find_placeholders(t, include_markers=True) == ["b", "a", "SELLER_SIGNATURE_COMPONENT"]

def test_unresolved():
    assert unresolved("{{a}} {{b}}", {"a": ""}) == ["b"]
