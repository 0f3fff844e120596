"""
Report, and optionally delete, cascaded item companions whose trip membership is gone.

    python -m tripshare.scripts.verify_companions [--repair]
"""

import argparse
import asyncio
import sys

import structlog

from tripshare.core.config import get_settings
from tripshare.core.database import get_session_context
from tripshare.core.logging_setup import configure_logging
from tripshare.services.integrity import (
    find_orphaned_inherited_rows,
    repair_orphaned_inherited_rows,
)

log = structlog.get_logger()


async def verify(repair: bool) -> int:
    async with get_session_context() as session:
        orphans = await find_orphaned_inherited_rows(session)
        for row in orphans:
            log.warning(
                "integrity.orphan",
                item_type=row.item_type,
                item_id=str(row.item_id),
                companion_id=str(row.companion_id),
            )
        if repair and orphans:
            await repair_orphaned_inherited_rows(session)
    return len(orphans)


def run() -> None:
    parser = argparse.ArgumentParser(description="Verify cascaded companion rows.")
    parser.add_argument("--repair", action="store_true", help="Delete orphaned inherited rows")
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)

    count = asyncio.run(verify(args.repair))
    log.info("integrity.verified", orphans=count, repaired=args.repair)
    if count and not args.repair:
        sys.exit(1)


if __name__ == "__main__":
    run()
