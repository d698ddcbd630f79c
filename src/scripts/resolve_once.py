"""Run a single resolution pass, e.g. after restoring the database from an incident.

    python -m src.scripts.resolve_once
"""
import asyncio
import json

from src.config import settings
from src.core.logging import setup_logging
from src.database import engine
from src.resolution.job import resolver_job


async def main():
    setup_logging(settings.LOG_LEVEL)
    try:
        report = await resolver_job.run_once()
    finally:
        await engine.dispose()
    print(json.dumps({
        "skipped": report.skipped,
        "reason": report.reason,
        "processed": report.processed,
        "failed": report.failed,
        "statuses": report.statuses,
    }, indent=2))

if __name__ == "__main__":
    asyncio.run(main())
