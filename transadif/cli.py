"""Command-line entry point: ``transadif [INPUT] [-o OUTPUT] [-e ENCODING] ...``."""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .convert import convert_adif
from .debug import dump_records
from .errors import TransAdifError
from .models import EncodePolicy
from .rules import DEFAULT_OUTPUT_ENCODING, DEFAULT_REPLACEMENT

log = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CONVERSION_ERROR = 1
EXIT_IO_ERROR = 2


def _replacement(value: str) -> str:
    if len(value) > 1:
        raise argparse.ArgumentTypeError("replacement must be a single character (or empty to escape)")
    return value


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="transadif",
        description="Process ADIF files with encoding detection, mojibake and field length correction.",
    )
    parser.add_argument("input", nargs="?", type=Path, help="Input ADIF file (default: stdin).")
    parser.add_argument("-o", "--output", type=Path, help="Output file (default: stdout).")
    parser.add_argument("-i", "--input-encoding", help="Suggested encoding of the input file.")
    parser.add_argument(
        "-e",
        "--encoding",
        default=DEFAULT_OUTPUT_ENCODING,
        help=f"Output encoding: utf-8, iso-8859-1, windows-1252, ascii (default: {DEFAULT_OUTPUT_ENCODING}).",
    )
    parser.add_argument(
        "-r",
        "--replace",
        type=_replacement,
        default=DEFAULT_REPLACEMENT,
        help="Replacement for incompatible characters; an empty value escapes them as &0xNN;.",
    )
    parser.add_argument("--delete", action="store_true", help="Delete incompatible characters.")
    parser.add_argument("-a", "--ascii", action="store_true", help="Transliterate to characters without diacritics.")
    parser.add_argument(
        "-s", "--strict", action="store_true", help="Report invalid data instead of correcting it."
    )
    parser.add_argument(
        "-d", "--debug", help="Print details of the given records to stderr (comma-separated numbers or 'all')."
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log detection and correction decisions.")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        raw = args.input.read_bytes() if args.input else sys.stdin.buffer.read()
    except OSError as exc:
        print(f"transadif: cannot read {args.input}: {exc}", file=sys.stderr)
        return EXIT_IO_ERROR

    policy = EncodePolicy(
        replacement=args.replace,
        delete=args.delete,
        transliterate=args.ascii,
        strict=args.strict,
    )

    def dump(doc):
        print(dump_records(doc, args.debug.split(",")), file=sys.stderr)

    try:
        output, _, _, warnings = convert_adif(
            raw,
            input_encoding=args.input_encoding,
            output_encoding=args.encoding,
            policy=policy,
            on_parsed=dump if args.debug else None,
        )
    except TransAdifError as exc:
        print(f"transadif: {exc}", file=sys.stderr)
        return EXIT_CONVERSION_ERROR

    try:
        if args.output:
            args.output.write_bytes(output)
        else:
            sys.stdout.buffer.write(output)
            sys.stdout.buffer.flush()
    except OSError as exc:
        print(f"transadif: cannot write output: {exc}", file=sys.stderr)
        return EXIT_IO_ERROR

    for item in warnings:
        where = f"record {item.record}" if item.record is not None else "header"
        print(f"warning: {where}, {item.field}: {item.issue} ({item.value}) -> {item.action}", file=sys.stderr)
    log.debug("%d warnings", len(warnings))
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
