# backend/render_service.py
import mammoth

def docx_to_html(docx_path: str) -> str:
    """Word template -> HTML template. {{tokens}} pass through mammoth untouched."""
    with open(docx_path, "rb") as f:
        result = mammoth.convert_to_html(f, style_map=_style_map())
    html = result.value

    wrapped = f"""<div class="document">
{html}
</div>"""
    return wrapped

def _style_map():
    return """
    p[style-name='Normal'] => p:fresh
    p[style-name='Title'] => h1:fresh
    table => table.table
    """
