"""Dump stored weather reports as CSV."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from weather_intel.db.session import init_db
from weather_intel.services.export import export_reports_csv
from weather_intel.services.reports import ReportService


def main() -> None:
    parser = argparse.ArgumentParser(description="Export weather reports to CSV.")
    parser.add_argument("--email", type=str, default=None, help="Only reports submitted by this address.")
    parser.add_argument("--limit", type=int, default=1000, help="Maximum number of reports (newest first).")
    parser.add_argument("--output", type=str, default=None, help="Write to this file instead of stdout.")
    args = parser.parse_args()

    init_db()
    records = ReportService().list_reports(email=args.email, limit=args.limit)
    if not records:
        print("No reports found.", file=sys.stderr)
        return

    content = export_reports_csv(records)
    if args.output:
        Path(args.output).write_text(content, encoding="utf-8")
        print(f"Wrote {len(records)} reports to {args.output}", file=sys.stderr)
    else:
        sys.stdout.write(content)


if __name__ == "__main__":
    main()
