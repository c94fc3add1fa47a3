"""Periodic eviction of participants that stopped sending heartbeats."""
import asyncio
import logging
from typing import List, Optional

from pymongo.database import Database

import config
from chat import LEAVE_TEXT, clock, now_ms, status_message
from database import MESSAGES, PARTICIPANTS

logger = logging.getLogger(__name__)


def sweep_inactive(
    db: Database,
    now: Optional[int] = None,
    timeout_ms: int = config.INACTIVITY_TIMEOUT_MS,
) -> List[str]:
    """
    Remove participants whose lastStatus is older than `timeout_ms` and record a
    departure message for each of them.

    The delete re-runs the cutoff query instead of deleting the fetched
    snapshot, so a heartbeat landing between the two calls still loses the
    participant. Departure messages are written one by one; a failed insert is
    logged and the remaining ones are still attempted.

    Returns the names a departure message was recorded for.
    """
    now = now_ms() if now is None else now
    stale = {"lastStatus": {"$lt": now - timeout_ms}}

    gone = list(db[PARTICIPANTS].find(stale))
    if not gone:
        return []

    db[PARTICIPANTS].delete_many(stale)

    at = clock()
    notified = []
    for participant in gone:
        name = participant["name"]
        try:
            db[MESSAGES].insert_one(status_message(name, LEAVE_TEXT, at))
        except Exception:
            logger.exception("Could not record departure of %s", name)
            continue
        notified.append(name)

    logger.info("Swept %d inactive participant(s): %s", len(gone), ", ".join(notified))
    return notified


async def run_sweeper(
    db: Database,
    interval: float = config.SWEEP_INTERVAL_SECONDS,
    timeout_ms: int = config.INACTIVITY_TIMEOUT_MS,
) -> None:
    """Sweep forever, every `interval` seconds. Errors are logged, never raised."""
    logger.info("Presence sweeper started (every %ss, timeout %sms)", interval, timeout_ms)
    while True:
        await asyncio.sleep(interval)
        try:
            await asyncio.to_thread(sweep_inactive, db, None, timeout_ms)
        except Exception:
            logger.exception("Presence sweep failed")
