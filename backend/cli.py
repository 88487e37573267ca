"""
backend/cli.py
Command-line access to the document pipeline: render templates, splice signatures, print.
"""

import sys
import json
import argparse
import logging
from pathlib import Path

import config
from placeholder_engine import RenderMode, render, unresolved
from signature_capture import SignatureData
from signature_compositor import SignaturePosition, compose, finalize
from print_renderer import PrintOutcome, print_document


def print_error(message: str, details: str = None):
    """Print error message"""
    print(f"ERROR: {message}", file=sys.stderr)
    if details:
        print(f"Details: {details}", file=sys.stderr)


def _write_output(text: str, output):
    if output:
        Path(output).write_text(text, encoding="utf-8")
        print(f"  Output: {output}")
    else:
        print(text)


def _load_signatures(path: str) -> dict:
    with open(path, "r") as f:
        raw = json.load(f)
    return {key: SignatureData(**raw[key]) if raw.get(key) else None for key in ("seller", "broker")}


def cmd_render(args):
    """Fill a template's placeholders from a JSON object of values"""
    try:
        template = Path(args.template).read_text(encoding="utf-8")
        with open(args.values, "r") as f:
            values = json.load(f)

        _write_output(render(template, values, RenderMode(args.mode)), args.output)

        left = unresolved(template, values)
        if left:
            print(f"  Unresolved: {', '.join(left)}", file=sys.stderr)
        return 0

    except FileNotFoundError as e:
        print_error(f"File not found: {e}")
        return 1
    except json.JSONDecodeError as e:
        print_error("Invalid JSON in values file", str(e))
        return 1


def cmd_compose(args):
    """Splice seller/broker signatures into rendered HTML"""
    try:
        content = Path(args.input).read_text(encoding="utf-8")
        signatures = _load_signatures(args.signatures)
        position = SignaturePosition(args.position)

        if args.final:
            html = finalize(content, signatures, position)
            if html is None:
                print_error("Please complete at least one signature to create the signed document.")
                return 1
        else:
            html = compose(content, signatures, position)

        _write_output(html, args.output)
        return 0

    except FileNotFoundError as e:
        print_error(f"File not found: {e}")
        return 1
    except json.JSONDecodeError as e:
        print_error("Invalid JSON in signatures file", str(e))
        return 1
    except TypeError as e:
        print_error("Malformed signature entry", str(e))
        return 1


def cmd_print(args):
    """Open an HTML document in a print-styled browser window"""
    try:
        content = Path(args.input).read_text(encoding="utf-8")
    except FileNotFoundError as e:
        print_error(f"File not found: {e}")
        return 1

    outcome = print_document(content, args.title or Path(args.input).stem)
    if outcome == PrintOutcome.FALLBACK:
        print("! Popup blocked, printed the page directly without the print stylesheet")
    else:
        print("✓ Print window opened")
    return 0


def main(argv=None):
    """Main CLI entry point"""
    parser = argparse.ArgumentParser(
        description="Brokerage document pipeline",
        prog="doc-pipeline"
    )
    parser.add_argument('--log-level', default=config.LOG_LEVEL, help='Logging level')

    subparsers = parser.add_subparsers(dest='command', help='Command to execute')

    # Render command
    render_parser = subparsers.add_parser('render', help='Fill template placeholders')
    render_parser.add_argument('template', help='HTML template file')
    render_parser.add_argument('values', help='JSON file of field values')
    render_parser.add_argument('--mode', choices=[m.value for m in RenderMode], default='final')
    render_parser.add_argument('-o', '--output', help='Output HTML file (stdout if omitted)')

    # Compose command
    compose_parser = subparsers.add_parser('compose', help='Place signatures into a document')
    compose_parser.add_argument('input', help='Rendered HTML file')
    compose_parser.add_argument('signatures', help='JSON file with "seller" and/or "broker" entries')
    compose_parser.add_argument('--position', choices=[p.value for p in SignaturePosition], default='end')
    compose_parser.add_argument('--final', action='store_true', help='Produce the committed signed HTML')
    compose_parser.add_argument('-o', '--output', help='Output HTML file (stdout if omitted)')

    # Print command
    print_parser = subparsers.add_parser('print', help='Print an HTML document')
    print_parser.add_argument('input', help='HTML file')
    print_parser.add_argument('--title', help='Document title')

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper())

    if not args.command:
        parser.print_help()
        return 0

    if args.command == 'render':
        return cmd_render(args)
    elif args.command == 'compose':
        return cmd_compose(args)
    elif args.command == 'print':
        return cmd_print(args)
    else:
        parser.print_help()
        return 1


if __name__ == '__main__':
    sys.exit(main())
