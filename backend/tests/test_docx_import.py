from docx import Document

from docx_parser import find_placeholders, is_docx
from render_service import docx_to_html

def make_docx(path):
    d = Document()
    d.add_heading("Listing Agreement", level=0)
    d.add_paragraph("Seller: {{seller_name}}")
    p = d.add_paragraph("Price: {{")
    p.add_run("listing_price}} and again {{seller_name}}")
    table = d.add_table(rows=1, cols=2)
    table.rows[0].cells[0].text = "MLS {{mls_number}}"
    table.rows[0].cells[1].text = "{{SELLER_SIGNATURE_COMPONENT}}"
    d.save(path)

def test_finds_placeholders_in_body_and_tables(tmp_path):
    path = str(tmp_path / "t.docx")
    make_docx(path)
    assert find_placeholders(path, include_markers=False) == ["seller_name", "listing_price", "mls_number"]
    assert "SELLER_SIGNATURE_COMPONENT" in find_placeholders(path)

def test_is_docx(tmp_path):
    path = tmp_path / "t.docx"
    make_docx(str(path))
    bogus = tmp_path / "x.docx"
    bogus.write_bytes(b"not a zip")
    assert is_docx(str(path))
    assert not is_docx(str(bogus))

def test_html_keeps_tokens(tmp_path):
    path = str(tmp_path / "t.docx")
    make_docx(path)
    html = docx_to_html(path)
    assert html.startswith('<div class="document">')
    assert "{{seller_name}}" in html
    assert "{{mls_number}}" in html
