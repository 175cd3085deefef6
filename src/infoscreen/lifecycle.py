"""
Process lifecycle helpers: start the kiosk browser and stop the server at a
fixed time of day.
"""

import subprocess
import threading
from datetime import datetime
from typing import Callable, List, Optional

from .utils.log_utils import get_logger

logger = get_logger(__name__)

BROWSER_START_DELAY = 10.0
SHUTDOWN_GRACE_PERIOD = 70.0
SHUTDOWN_CHECK_INTERVAL = 10.0


class BrowserLauncher:
    """Starts the browser on the screen URL after a delay and kills it on stop."""

    def __init__(self, browser_path: str, url: str, delay: float = BROWSER_START_DELAY,
                 stop_event: Optional[threading.Event] = None):
        self.browser_path = browser_path
        self.url = url
        self.delay = delay
        self.stop_event = stop_event or threading.Event()
        self.process: Optional[subprocess.Popen] = None
        self._thread = threading.Thread(target=self._run, name="browser", daemon=True)

    @property
    def command(self) -> List[str]:
        return [self.browser_path, self.url]

    def start(self) -> None:
        if not self.browser_path:
            return
        self._thread.start()

    def _run(self) -> None:
        if self.stop_event.wait(self.delay):
            return
        try:
            self.process = subprocess.Popen(self.command)
            logger.info("Started browser: %s", " ".join(self.command))
        except OSError as e:
            logger.error("Failed to start browser: %s", e)
            self.process = None

    def stop(self) -> None:
        if self.process is None:
            return
        self.process.kill()
        self.process.wait()
        logger.info("Browser stopped")
        self.process = None


class ScheduledShutdown(threading.Thread):
    """
    Sets `stop_event` when the local time reaches `hour:minute`.

    The first check happens after a grace period so that a restart within the
    shutdown minute does not terminate again immediately.
    """

    def __init__(self, hour: int, minute: int, stop_event: threading.Event,
                 grace_period: float = SHUTDOWN_GRACE_PERIOD,
                 check_interval: float = SHUTDOWN_CHECK_INTERVAL,
                 now: Callable[[], datetime] = datetime.now):
        super().__init__(name="scheduled-shutdown", daemon=True)
        self.hour = hour
        self.minute = minute
        self.stop_event = stop_event
        self.grace_period = grace_period
        self.check_interval = check_interval
        self._now = now

    @property
    def enabled(self) -> bool:
        return self.hour >= 0

    def due(self) -> bool:
        now = self._now()
        return now.hour == self.hour and now.minute == self.minute

    def run(self) -> None:
        if self.stop_event.wait(self.grace_period):
            return
        while not self.stop_event.is_set():
            if self.due():
                logger.info("Scheduled shutdown at %02d:%02d", self.hour, self.minute)
                self.stop_event.set()
                return
            self.stop_event.wait(self.check_interval)
