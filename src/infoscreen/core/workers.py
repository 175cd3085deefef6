import threading
import time
from typing import Optional

from .content_sources import ContentSourceRegistry
from ..utils.log_utils import get_logger

logger = get_logger(__name__)


class ContentSyncWorker(threading.Thread):
    """
    Background thread that polls every registered content source on a fixed interval.

    Sources are polled one after another; each one only imports files when its
    directory changed since the previous cycle.
    """

    def __init__(
        self,
        registry: ContentSourceRegistry,
        interval: float = 60.0,
        stop_event: Optional[threading.Event] = None,
    ) -> None:
        super().__init__(name="content-sync", daemon=True)
        self.registry = registry
        self.interval = interval
        self.stop_event = stop_event or threading.Event()
        self.cycles = 0

    def sync_once(self) -> int:
        """Run one poll cycle and return the number of changed sources."""
        start_time = time.time()
        logger.debug("Syncing content...")
        changed = self.registry.update_all()
        self.cycles += 1
        logger.debug(f"Sync cycle {self.cycles} done in {time.time() - start_time:.2f}s, {changed} changed")
        return changed

    def run(self) -> None:
        logger.info(f"Content sync started, interval {self.interval}s")
        while not self.stop_event.is_set():
            self.sync_once()
            self.stop_event.wait(self.interval)
        logger.info("Content sync stopped")

    def stop(self, timeout: Optional[float] = None) -> None:
        self.stop_event.set()
        if self.is_alive():
            self.join(timeout)
