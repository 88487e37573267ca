# backend/print_renderer.py
"""
Print-ready output.

build_print_html() wraps final document HTML in a standalone page whose stylesheet fights
whatever styling the template carries: the two signature blocks are forced into 45% inline
columns with a 5% gutter by container class, by element class and by position, all !important.
The page prints itself on load and closes afterwards.

print_document() opens that page in a new browsing context. When that is refused the fallback
writes the plain page (no stylesheet) and hands it to webbrowser.open: another browser
context, not in-place printing.
"""
import html
import logging
import tempfile
import webbrowser
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

logger = logging.getLogger(__name__)

PRINT_STYLESHEET = """
@page {
  margin: 20mm;
  size: A4;
  @top-left { content: ""; }
  @top-center { content: ""; }
  @top-right { content: ""; }
  @bottom-left { content: ""; }
  @bottom-center { content: ""; }
  @bottom-right { content: ""; }
}
body {
  font-family: 'Times New Roman', serif;
  line-height: 1.6;
  color: #000;
  font-size: 12pt;
  margin: 0;
  padding: 0;
  -webkit-print-color-adjust: exact;
  print-color-adjust: exact;
}
* {
  -webkit-print-color-adjust: exact;
  print-color-adjust: exact;
}
h1 {
  text-align: center;
  font-size: 18pt;
  font-weight: bold;
  margin-bottom: 20pt;
  text-transform: uppercase;
  border-bottom: 2pt solid #000;
  padding-bottom: 10pt;
}
h2 {
  font-size: 14pt;
  font-weight: bold;
  margin-top: 20pt;
  margin-bottom: 10pt;
  text-transform: uppercase;
  border-bottom: 1pt solid #333;
  padding-bottom: 5pt;
}
h3 {
  font-size: 12pt;
  font-weight: bold;
  margin-top: 15pt;
  margin-bottom: 8pt;
  text-decoration: underline;
}
p {
  margin-bottom: 8pt;
  text-align: justify;
}
table {
  border-collapse: collapse;
  width: 100%;
  margin: 15pt 0;
}
td, th {
  border: 1pt solid #000;
  padding: 8pt;
  text-align: left;
}

/* signature blocks side by side: by container */
.signature-container .end-signature-signed {
  display: inline-block !important;
  width: 45% !important;
  vertical-align: top !important;
  margin-right: 5% !important;
}
.signature-container .end-signature-signed:last-child {
  margin-right: 0 !important;
}

/* by element */
.end-signature-signed {
  display: inline-block !important;
  width: 45% !important;
  vertical-align: top !important;
  margin-right: 5% !important;
  box-sizing: border-box !important;
  page-break-inside: avoid !important;
}

/* by position */
.end-signature-signed:last-of-type,
.end-signature-signed:nth-child(2) {
  margin-right: 0 !important;
}

.signature-container,
.signatures-section {
  display: block !important;
  width: 100% !important;
  clear: both !important;
}
"""

AUTO_PRINT_SCRIPT = """
window.addEventListener('load', function () {
  setTimeout(function () {
    window.print();
    window.close();
  }, 250);
});
"""

PAGE = """<!DOCTYPE html>
<html>
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{title}</title>
<style>{style}</style>
</head>
<body>
{content}
{script}
</body>
</html>
"""


class PrintOutcome(str, Enum):
    PRINTED = "printed"
    FALLBACK = "fallback"


class PopupBlockedError(RuntimeError):
    """The new browsing context could not be opened."""


def build_print_html(content: str, title: str = "", auto_print: bool = True) -> str:
    script = f"<script>{AUTO_PRINT_SCRIPT}</script>" if auto_print else ""
    return PAGE.format(title=html.escape(title or ""), style=PRINT_STYLESHEET,
                       content=content or "", script=script)


def build_plain_html(content: str, title: str = "") -> str:
    """The current page as-is: no print stylesheet, prints on load."""
    return PAGE.format(title=html.escape(title or ""), style="",
                       content=content or "", script=f"<script>{AUTO_PRINT_SCRIPT}</script>")


def _write_temp(page: str, prefix: str) -> Path:
    with tempfile.NamedTemporaryFile("w", suffix=".html", prefix=prefix, delete=False,
                                     encoding="utf-8") as f:
        f.write(page)
    return Path(f.name)


def open_browser_window(page: str) -> None:
    path = _write_temp(page, "print_")
    if not webbrowser.open_new(path.as_uri()):
        raise PopupBlockedError(f"Could not open a browser window for {path}")


def print_current_page(content: str, title: str = "") -> None:
    """
    Fallback print: the plain page, no print stylesheet.

    This is not in-place printing. It goes through webbrowser.open, the same mechanism
    whose new window was just refused, and raises RuntimeError if that fails too.
    """
    path = _write_temp(build_plain_html(content, title), "page_")
    if not webbrowser.open(path.as_uri()):
        raise RuntimeError(f"Could not open {path} for printing")


def print_document(content: str, title: str = "",
                   open_window: Optional[Callable[[str], None]] = None,
                   fallback: Optional[Callable[[str, str], None]] = None) -> PrintOutcome:
    """
    Open the print page in a new browsing context.
    PopupBlockedError -> print_current_page (degraded: no stylesheet, and it opens another browser context).
    """
    open_window = open_window or open_browser_window
    fallback = fallback or print_current_page
    try:
        open_window(build_print_html(content, title))
        return PrintOutcome.PRINTED
    except PopupBlockedError as e:
        logger.error("Print failed: %s; falling back to direct page print", e)
        fallback(content, title)
        return PrintOutcome.FALLBACK
