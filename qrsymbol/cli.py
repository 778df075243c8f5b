"""
Command-line entry point: encode text and write a PNG, a data URI or a
text rendering of the symbol.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from typing import Optional, Sequence

from .image import QRCodeImage, box_size_for_width, make_qr


logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = "qrcode.png"
DEFAULT_WIDTH = 256
DEFAULT_BORDER = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="qrsymbol",
        description="Encode text as a QR Code symbol",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s https://example.com                 Write a 256 px qrcode.png
  %(prog)s https://example.com -e H -o out.png Use level H, custom file
  %(prog)s HELLO --mode alphanumeric --text    Print the symbol as text
  %(prog)s https://example.com --box-size 10 --border 4 --data-uri
        """,
    )
    parser.add_argument("data", metavar="TEXT", help="Text to encode")
    parser.add_argument("-e", "--ecc", default="M", type=str.upper,
                        choices=["L", "M", "Q", "H"],
                        help="Error-correction level (default: M)")
    parser.add_argument("--min-version", type=int, default=1,
                        help="Smallest symbol version, 1-40 (default: 1)")
    parser.add_argument("--mode", choices=["numeric", "alphanumeric", "byte", "kanji"],
                        help="Force one encoding mode (default: automatic)")
    parser.add_argument("--encoding", default="utf-8",
                        help="Codec for byte-mode data (default: utf-8)")
    size = parser.add_mutually_exclusive_group()
    size.add_argument("--box-size", type=int,
                      help="Pixels per module instead of fitting --width")
    size.add_argument("--width", type=int,
                      help=f"Target image width in pixels (default: {DEFAULT_WIDTH})")
    parser.add_argument("--border", type=int, default=DEFAULT_BORDER,
                        help=f"Quiet-zone width in modules (default: {DEFAULT_BORDER})")
    output = parser.add_mutually_exclusive_group()
    output.add_argument("-o", "--output", default=DEFAULT_OUTPUT,
                        help=f"PNG file to write (default: {DEFAULT_OUTPUT})")
    output.add_argument("--data-uri", action="store_true",
                        help="Print a data:image/png;base64 URI instead of writing a file")
    output.add_argument("--text", dest="as_text", action="store_true",
                        help="Print the symbol as text instead of writing a file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        qr = make_qr(
            args.data,
            box_size=1 if args.box_size is None else args.box_size,
            border=args.border,
            ecc=args.ecc,
            min_version=args.min_version,
            mode=args.mode,
            encoding=args.encoding,
        )
        if args.box_size is None:
            width = DEFAULT_WIDTH if args.width is None else args.width
            box_size = box_size_for_width(qr.module_shape[0], args.border, width)
            qr = QRCodeImage(replace(qr.spec, box_size=box_size))
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        return 2

    symbol = qr.symbol
    logger.info("version %d-%s, mask %d", symbol.version, symbol.ec_level.name, symbol.mask)

    if args.as_text:
        print(symbol.to_text(border=args.border))
    elif args.data_uri:
        print(qr.to_data_uri())
    else:
        qr.save_png(args.output)
        print(f"Saved version {symbol.version}-{symbol.ec_level.name} QR code to {args.output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
