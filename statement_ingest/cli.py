"""Command-line interface: parse a statement file into JSON or Excel.

Usage:
    statement-ingest statement.csv --output out.json
    statement-ingest statement.pdf --output out.xlsx --password "pwd"
    statement-ingest statement.xlsx --header-row 3 --mapping '{"date": 0, "description": 1, "amount": 2}'
"""
import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from . import exporters
from .errors import IncorrectPassword, PasswordRequired, StatementIngestError, UnsupportedSourceFormat
from .extractor import parse_source, parse_with_mapping, read_matrix
from .log_setup import setup_logging
from .models import HeaderDetectionFailed, ParseSuccess, mapping_from_dict
from .settings import load_settings

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_NOT_FOUND = 2
EXIT_NO_TRANSACTIONS = 3
EXIT_PASSWORD = 4
EXIT_UNSUPPORTED = 5


def parse_args(argv: List[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Convert a bank statement (PDF, Excel or CSV) into normalized transactions")
    p.add_argument("input", help="Statement file")
    p.add_argument("-o", "--output", help="Output file (.json or .xlsx); JSON goes to stdout if omitted", default=None)
    p.add_argument("-p", "--password", help="PDF password (if known)", default=None)
    p.add_argument("--mapping", help='Manual column mapping as JSON, e.g. \'{"date": 0, "description": 1, "amount": 2}\'',
                   default=None)
    p.add_argument("--header-row", type=int, default=None, help="Header row index used with --mapping")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    args = p.parse_args(argv)
    if args.mapping is not None and args.header_row is None:
        p.error("--header-row is required with --mapping")
    return args


def _run(args: argparse.Namespace):
    with open(args.input, 'rb') as f:
        data = f.read()

    if args.mapping is not None:
        mapping = mapping_from_dict(json.loads(args.mapping))
        matrix = read_matrix(data, args.input)
        return parse_with_mapping(matrix, args.header_row, mapping, debug=args.debug)
    return parse_source(data, filename=args.input, password=args.password, debug=args.debug)


def main_cli(argv: Optional[List[str]] = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    settings = load_settings()
    setup_logging(settings.log_dir, 'DEBUG' if args.debug else settings.log_level)

    if not os.path.exists(args.input):
        print(f"Input file not found: {args.input}", file=sys.stderr)
        return EXIT_NOT_FOUND

    try:
        result = _run(args)
    except (PasswordRequired, IncorrectPassword) as e:
        print(f"Error: {e}. Use the --password option.", file=sys.stderr)
        return EXIT_PASSWORD
    except UnsupportedSourceFormat as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_UNSUPPORTED
    except (StatementIngestError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_NO_TRANSACTIONS

    if isinstance(result, HeaderDetectionFailed):
        print("Could not detect the header row. First rows of the statement:", file=sys.stderr)
        for idx, row in enumerate(result.preview_rows):
            print(f"  {idx}: {row}", file=sys.stderr)
        print("Re-run with --header-row and --mapping.", file=sys.stderr)
        return EXIT_NO_TRANSACTIONS
    if not isinstance(result, ParseSuccess):
        print(f"Error: {result.reason}", file=sys.stderr)
        return EXIT_NO_TRANSACTIONS

    if args.output and args.output.lower().endswith('.xlsx'):
        exporters.export_excel(result, args.output)
    elif args.output:
        exporters.export_json(result, args.output)
    else:
        json.dump(exporters.result_to_dict(result), sys.stdout, ensure_ascii=False, indent=2)
        sys.stdout.write('\n')

    logger.info(f"Parsed {len(result.transactions)} transactions from {args.input}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main_cli())
