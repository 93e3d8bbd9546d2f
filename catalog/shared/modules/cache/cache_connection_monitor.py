import logging
import threading
from typing import Callable

logger = logging.getLogger(__name__)


def backoff_delay(attempt: int, step: float = 0.05, cap: float = 2.0) -> float:
    """Linear-then-capped delay before reconnect attempt number `attempt` (1-based)."""
    return min(attempt * step, cap)


class CacheConnectionMonitor:
    """
    Background thread that keeps probing the cache server.
    While the server is down it retries with a capped backoff forever;
    once it is up it re-checks every `healthy_interval` seconds.
    """

    def __init__(self, probe: Callable[[], bool], healthy_interval: float = 5.0):
        self.probe = probe
        self.healthy_interval = healthy_interval
        self.available = False
        self.attempts = 0
        self._stop = threading.Event()
        self._thread = None

    @property
    def is_down(self) -> bool:
        """True once a probe has failed and no probe has succeeded since."""
        return not self.available and self.attempts > 0

    def start(self):
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self.run, name="cache-connection-monitor", daemon=True)
        self._thread.start()

    def stop(self):
        self._stop.set()

    def run(self):
        while not self._stop.is_set():
            self._stop.wait(self.check_once())

    def check_once(self) -> float:
        """
        Probe once, record availability and return the delay before the next probe.
        """
        try:
            ok = bool(self.probe())
        except Exception as e:
            logger.debug(f"Cache probe failed: {e}")
            ok = False

        if ok:
            if not self.available:
                logger.info("Cache connection established")
            self.available = True
            self.attempts = 0
            return self.healthy_interval

        if self.available or self.attempts == 0:
            logger.warning("Cache unreachable, retrying in background")
        self.available = False
        self.attempts += 1
        return backoff_delay(self.attempts)
