"""
One-shot schedule reconciliation

Usage:
    python -m schedule_sync                                  # use GUIDE_URL and DATABASE_URL
    python -m schedule_sync --source ./guide.xml             # reconcile a local feed file
    python -m schedule_sync --database-url sqlite+aiosqlite:///./data/schedule.db
"""
import argparse
import asyncio
import json
import sys

from schedule_sync.config import setup_logging
from schedule_sync.database import close_db, init_db
from schedule_sync.services import run_sync


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="schedule_sync",
        description="Reconcile the stored broadcast schedule against an XMLTV feed",
    )
    parser.add_argument("--source", help="Feed URL or local path (defaults to GUIDE_URL)")
    parser.add_argument("--database-url", help="SQLAlchemy async URL (defaults to DATABASE_URL)")
    return parser.parse_args(argv)


async def _main(args: argparse.Namespace) -> int:
    await init_db(args.database_url)
    try:
        result = await run_sync(args.source)
    finally:
        await close_db()

    print(json.dumps(result, indent=2))
    return 0 if result.get("status") == "success" else 1


def main(argv: list[str] | None = None) -> int:
    setup_logging()
    return asyncio.run(_main(parse_args(argv)))


if __name__ == "__main__":
    sys.exit(main())
