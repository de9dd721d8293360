"""
Repair job: recompute daily summaries and live stock from the ledger.

Usage:
    stockpilot-reconcile                      # last 7 days, live quantities as of today
    stockpilot-reconcile --start 2026-10-01 --end 2026-10-18
    stockpilot-reconcile --skip-stock
"""

import argparse
import asyncio
import sys
from datetime import date

from stockpilot.core.db import AsyncSessionLocal
from stockpilot.core.logging import get_logger
from stockpilot.services import ledger
from stockpilot.services import summary as summary_service
from stockpilot.utils.datetime import date_range, today_local

logger = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Recompute summaries and live stock levels")
    parser.add_argument("--start", type=date.fromisoformat, help="First day (YYYY-MM-DD)")
    parser.add_argument("--end", type=date.fromisoformat, help="Last day (YYYY-MM-DD)")
    parser.add_argument(
        "--skip-stock",
        action="store_true",
        help="Only recompute summaries, leave live quantities alone",
    )
    return parser.parse_args(argv)


async def reconcile(start: date, end: date, skip_stock: bool = False) -> None:
    summary_service.validate_range(start, end)

    async with AsyncSessionLocal() as db:
        for day in date_range(start, end):
            summary = await summary_service.recompute(db, day)
            print(f"✅ {day.isoformat()}  gross={summary.total_gross_sales}  net={summary.total_net_sales}")

        if not skip_stock:
            changed = await ledger.repair_live_quantities(db, end)
            print(f"✅ Live quantities repaired: {changed['products']} products, {changed['materials']} materials")

    logger.info("reconcile.completed", start=start.isoformat(), end=end.isoformat())


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    default_start, default_end = summary_service.default_range(today_local())

    try:
        asyncio.run(reconcile(args.start or default_start, args.end or default_end, args.skip_stock))
    except KeyboardInterrupt:
        print("\n\n❌ Cancelled\n")
        sys.exit(1)
    except Exception as e:
        logger.error("reconcile_error", error=str(e))
        print(f"\n❌ Error: {e}\n")
        sys.exit(1)


if __name__ == "__main__":
    main()
