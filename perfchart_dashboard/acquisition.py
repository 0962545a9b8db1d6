import logging
import threading
import time
from collections import deque
from typing import Any, Deque, Dict, List, Optional

from .simulation import VitalSignsSimulator

logger = logging.getLogger(__name__)


class LiveFeed:
    """
    Background sampling loop for the live demo page.

    - Periodically calls VitalSignsSimulator.sample()
    - Keeps the most recent sample
    - Keeps a rolling history of at most `history_points` samples
    """

    def __init__(
        self,
        *,
        source: VitalSignsSimulator,
        sample_period_s: float,
        history_points: int,
    ) -> None:
        self.source = source
        self.sample_period_s = sample_period_s
        self.history_points = history_points

        self._latest: Optional[Dict[str, Any]] = None
        self._history: Deque[Dict[str, Any]] = deque(maxlen=history_points)
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._stop_event.clear()
        self._thread = threading.Thread(target=self._run_loop, daemon=True)
        self._thread.start()
        logger.info("Live feed started (every %.1f s)", self.sample_period_s)

    def stop(self) -> None:
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=2.0)

    def get_latest(self) -> Optional[Dict[str, Any]]:
        with self._lock:
            return dict(self._latest) if self._latest is not None else None

    def get_history(self, last_n: Optional[int] = None) -> List[Dict[str, Any]]:
        with self._lock:
            rows = [dict(row) for row in self._history]
        if last_n is not None:
            rows = rows[-last_n:] if last_n > 0 else []
        return rows

    def sample_once(self) -> Optional[Dict[str, Any]]:
        try:
            row = self.source.sample()
        except Exception:
            logger.exception("Live feed: error while sampling")
            return None

        with self._lock:
            self._latest = row
            self._history.append(row)
        return row

    def _run_loop(self) -> None:
        while not self._stop_event.is_set():
            start = time.time()
            self.sample_once()
            elapsed = time.time() - start
            self._stop_event.wait(max(0.0, self.sample_period_s - elapsed))
