"""
Background reaper for lapsed key leases
Runs a periodic sweep over the key store on the event loop
"""

import asyncio
import logging
import time
from typing import List, Optional

from .. import config
from .keystore import KeyStore
from .prometheus_metrics import prometheus_metrics

logger = logging.getLogger("token_orchestrator.reaper")


class Reaper:
    """Periodically evicts keys whose lease lapsed without a keep-alive"""

    def __init__(self, store: KeyStore, interval: Optional[float] = None):
        self.store = store
        self.interval = config.REAPER_INTERVAL_SECONDS if interval is None else interval
        self.task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self.task is not None and not self.task.done()

    def tick(self) -> List[str]:
        """Run one sweep and return the ids removed"""
        start_time = time.perf_counter()
        removed = self.store.reap()
        prometheus_metrics.observe_reaper_sweep(time.perf_counter() - start_time)

        if removed:
            prometheus_metrics.increment_keys_reaped(len(removed))
            logger.info("Reaped expired keys", extra={
                "component": "reaper",
                "reaped": len(removed),
                "key_ids": removed,
            })
        return removed

    async def start(self):
        """Start the sweep loop on the running event loop"""
        if self.running:
            return
        self.task = asyncio.create_task(self._loop())
        logger.info("Reaper started", extra={
            "component": "reaper",
            "interval_seconds": self.interval,
            "lease_seconds": self.store.lease_duration,
        })

    async def stop(self):
        """Cancel the sweep loop and wait for it to finish"""
        if self.task is None:
            return
        self.task.cancel()
        await asyncio.gather(self.task, return_exceptions=True)
        self.task = None
        logger.info("Reaper stopped", extra={"component": "reaper"})

    async def _loop(self):
        while True:
            try:
                await asyncio.sleep(self.interval)
                self.tick()
            except asyncio.CancelledError:
                break
            except Exception:
                logger.exception("Reaper sweep failed", extra={"component": "reaper"})
