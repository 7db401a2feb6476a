#!/usr/bin/env python3

"""
Payments Hub / Sales Totals reconciliation

Compares a Payments Hub transaction export with a Sales Totals export and
writes a 'Results' workbook: the hub rows without a matching sales record,
followed by hub vs sales totals per card brand.

Usage:
    python reconcile_reports.py hub.xlsx sales.xlsx --output Comparison_Results.xlsx
    python reconcile_reports.py hub.xlsx --client legacy-columns

Settings can also come from a .env file (RECON_CLIENT, RECON_TOLERANCE,
RECON_OUTPUT, RECON_LOG_LEVEL); command line flags win.
"""

import argparse
import logging
import sys

from hubrecon.config import ReconSettings
from hubrecon.matching_engine import FilterMode
from hubrecon.orchestrator import run_matching_process
from hubrecon.profiles import available_clients, get_profile

logger = logging.getLogger(__name__)


def positive_float(value):
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value!r}")
    return number


def build_parser():
    parser = argparse.ArgumentParser(description='Reconcile a Payments Hub export against a Sales Totals export.')
    parser.add_argument('hub_file', nargs='?', help='Path to the Payments Hub Excel file')
    parser.add_argument('sales_file', nargs='?', help='Path to the Sales Totals Excel file (optional)')
    parser.add_argument('--output', '-o', help='Output Excel file name')
    parser.add_argument('--client', '-c', help='Client profile id')
    parser.add_argument('--tolerance', type=positive_float, help='Amount tolerance for a match')
    parser.add_argument('--filter', choices=[mode.value for mode in FilterMode],
                        help='Report unmatched (count = 0) or matched (count > 0) hub rows')
    parser.add_argument('--strict', action='store_true', default=None,
                        help='Require mutual match counts between the two files')
    parser.add_argument('--list-clients', action='store_true', help='List registered client profiles and exit')
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging')
    return parser


def main(argv=None):
    settings = ReconSettings()
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else getattr(logging, settings.log_level, logging.INFO),
        format='%(message)s'
    )

    if args.list_clients:
        for client in available_clients():
            print(client)
        return 0

    if not args.hub_file:
        logger.error("A Payments Hub file is required")
        return 2

    profile = get_profile(args.client or settings.client).with_overrides(
        tolerance=args.tolerance if args.tolerance is not None else settings.tolerance,
        filter_mode=args.filter,
        strict_counts=args.strict,
    )

    logger.info("=== Payments Hub Reconciliation ===")
    try:
        results = run_matching_process(
            hub_file=args.hub_file,
            sales_file=args.sales_file,
            output_file=args.output or settings.output_file,
            profile=profile,
        )
    except Exception as e:
        logger.error(f"Error during processing: {str(e)}")
        raise

    logger.info("\n=== Processing Complete ===")
    logger.info(f"Output saved to: {results['output_file']}")
    if results['error']:
        logger.error(f"Reconciliation failed: {results['error']}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
