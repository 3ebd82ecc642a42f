"""Command-line interface for the OFX viewer."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from ofx_viewer import __version__ as pkg_version
from ofx_viewer.config import ViewerSettings, load_settings
from ofx_viewer.detect import gather_jobs
from ofx_viewer.errors import OfxError
from ofx_viewer.loader import process_job
from ofx_viewer.models import ProcessingResult, Transaction
from ofx_viewer.output import build_csv_payload, format_statement_header, format_transaction_table, write_output

LOGGER = logging.getLogger('ofx_viewer.cli')
if not LOGGER.handlers:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter('%(levelname)s: %(message)s'))
    LOGGER.addHandler(handler)
LOGGER.setLevel(logging.INFO)
LOGGER.propagate = False


def _emit(message: str, args: argparse.Namespace, *, verbose_only: bool = False, error: bool = False) -> None:
    """Print ``message`` honoring ``--quiet``/``--verbose`` flags."""

    if verbose_only and not args.verbose:
        return
    if args.quiet and not error:
        return
    level = logging.ERROR if error else logging.INFO
    LOGGER.log(level, message)


def _show_document(result: ProcessingResult, args: argparse.Namespace, settings: ViewerSettings) -> None:
    """Print every statement of ``result`` with its transaction table."""

    document = result.document
    if document is None:
        return
    signon = document.signon
    institution = f' from {signon.fi.org}' if signon.fi else ''
    print(f'{result.job.name}: statement generated {signon.dtserver.isoformat()}{institution}')
    limit = args.limit if args.limit is not None else settings.preview_limit
    for response in document.bank_msgs:
        print()
        for line in format_statement_header(response, date_format=settings.date_format):
            print(line)
        for line in format_transaction_table(
            response.stmtrs.transactions,
            date_format=settings.date_format,
            limit=limit,
        ):
            print(line)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description='OFX 1.02 statement viewer')
    parser.add_argument('targets', nargs='+', help='Input files, directories or http(s) URLs')
    parser.add_argument('-c', '--config', type=Path, help='Path to configuration TOML')
    parser.add_argument('-l', '--limit', type=int, help='Show at most this many transactions per statement')
    parser.add_argument('--csv', action='store_true', help='Emit transactions as CSV instead of tables')
    parser.add_argument('-o', '--output', type=Path, help='Path to write the CSV output (implies --csv)')
    parser.add_argument('-V', '--version', action='version', version=f'%(prog)s {pkg_version}')
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument('-q', '--quiet', action='store_true', help='Suppress informational output')
    verbosity.add_argument('-v', '--verbose', action='store_true', help='Print verbose progress details')
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.output:
        args.csv = True
    settings = load_settings(args.config)
    jobs = gather_jobs(args.targets)
    combined_transactions: list[Transaction] = []
    failures = 0
    for job in jobs:
        try:
            result = process_job(job, settings)
        except OfxError as exc:
            _emit(f'Error processing {job.source}: {exc}', args, error=True)
            failures += 1
            continue
        _emit(result.summary(), args)
        for warning in result.warnings:
            _emit(f'Warning: {warning}', args, error=True)
        for entry in result.diagnostics:
            _emit(f'Diagnostic: {entry}', args, verbose_only=True)
        if args.csv:
            if result.document is not None:
                combined_transactions.extend(result.document.transactions)
            continue
        _show_document(result, args, settings)
    if args.csv:
        payload = build_csv_payload(combined_transactions, date_format=settings.date_format)
        write_output(payload, output_path=args.output)
        if not args.output:
            sys.stdout.write(payload)
    return 1 if failures else 0


if __name__ == '__main__':  # pragma: no cover
    raise SystemExit(main())
