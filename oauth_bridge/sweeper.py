"""
Background TTL sweep. Flows abandoned before the poller consumed them would otherwise stay
in the store forever; the sweep runs on a fixed interval independent of request traffic.
"""
import asyncio
import logging

from oauth_bridge.result_store import ResultStore

logger = logging.getLogger(__name__)


async def run_sweeper(store: ResultStore, interval_seconds: float, *, sleep=asyncio.sleep) -> None:
    """Purge expired results every interval_seconds until cancelled."""
    while True:
        await sleep(interval_seconds)
        try:
            # Off the event loop; the SQL store does a blocking DELETE
            removed = await asyncio.to_thread(store.purge_expired)
        except Exception as e:
            logger.warning("Result sweep failed: %s", e)
            continue
        if removed:
            logger.info("Purged %s expired OAuth results", removed)
