"""Command-line entry point: build a closing report from a JSON snapshot.

The snapshot is a JSON object mapping table names (activations, stores,
inventory, operation_models, customers, sales_targets, home_activations) to
lists of rows, as exported from the spreadsheet data source.

Examples:
    Print the report for a date:
        closing-report snapshot.json --date 2025-03-15

    Write it to a file with config overrides:
        closing-report snapshot.json --date 2025-03-15 \\
            --config closing.json -o report.json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence
from datetime import date
from pathlib import Path

from closing_core.api import SourceTables, build_closing_report
from closing_core.config import ReportConfig
from closing_core.exceptions import ClosingReportError

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="closing-report",
        description="Build the daily closing report from a JSON snapshot of the source tables.",
    )
    p.add_argument("snapshot", help="JSON file mapping table names to lists of rows.")
    p.add_argument(
        "--date",
        default=None,
        help="Target date YYYY-MM-DD (default: today).",
    )
    p.add_argument(
        "--as-of",
        default=None,
        help="Reference date for the month-end projection (default: --date).",
    )
    p.add_argument("--config", default=None, help="JSON file with ReportConfig overrides.")
    p.add_argument(
        "--exclude-agent",
        action="append",
        default=None,
        dest="excluded_agents",
        help="Agent to exclude (repeatable). Overrides the sales-target flags.",
    )
    p.add_argument(
        "--exclude-store",
        action="append",
        default=None,
        dest="excluded_stores",
        help="Inventory store to exclude (repeatable). Overrides the inventory labels.",
    )
    p.add_argument("-o", "--output", default=None, help="Output JSON path (default: stdout).")
    p.add_argument("--quiet", action="store_true", help="Less logging output.")
    p.add_argument(
        "--verbose",
        "--debug",
        action="store_true",
        dest="verbose",
        help="Verbose/debug logging output, including per-rule filter counts.",
    )
    return p


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    log_level = logging.DEBUG if args.verbose else (logging.WARNING if args.quiet else logging.INFO)
    logging.basicConfig(level=log_level, format="%(levelname)s: %(message)s")

    target_date = args.date or date.today().isoformat()

    try:
        config = ReportConfig.from_json(args.config) if args.config else ReportConfig()
        snapshot = json.loads(Path(args.snapshot).read_text(encoding="utf-8"))
        tables = SourceTables.from_mapping(snapshot)
        report = build_closing_report(
            tables,
            target_date,
            excluded_agents=args.excluded_agents,
            excluded_stores=args.excluded_stores,
            config=config,
            as_of=args.as_of,
        )
    except (ClosingReportError, ValueError, OSError) as e:
        logger.error(f"Error: {e}", exc_info=True)
        print(f"ERROR: {e}", file=sys.stderr)
        return 2

    payload = json.dumps(report.to_dict(), ensure_ascii=False, indent=2)
    if args.output:
        Path(args.output).write_text(payload + "\n", encoding="utf-8")
        logger.info("Wrote closing report to %s", args.output)
    else:
        print(payload)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
