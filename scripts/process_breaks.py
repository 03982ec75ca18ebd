#!/usr/bin/env python
"""Run one automatic break pass outside the web process.

Defaults to yesterday; pass ``--date YYYY-MM-DD`` to backfill a missed day.
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import date

from worktrack.cron_jobs import get_break_scheduler


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--date", type=date.fromisoformat, default=None, help="target date (default: yesterday)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(levelname)s - %(message)s")
    args = _parse_args(argv)
    try:
        summary = get_break_scheduler().run_now(args.date)
    except Exception as exc:
        print(f"[process_breaks] failure: {exc}", file=sys.stderr)
        return 1
    print(
        f"[process_breaks] {summary.date.isoformat()}: {summary.processed_users} break(s) inserted, "
        f"{len(summary.skipped)} skipped, {len(summary.failures)} failed",
        flush=True,
    )
    return 1 if summary.failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
