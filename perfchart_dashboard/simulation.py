# perfchart_dashboard/simulation.py

"""
Simulated vital-sign monitor for the live demo page.

Every call to `sample()` moves each configured signal one random-walk
step, clamped to its bounds, and returns one row keyed like
config.DEMO_CHARTS plus timestamps and a tick label ("12s").
"""

import random
import time
from datetime import datetime, timezone
from typing import Any, Dict, List, Mapping, Optional

from . import config


def random_walk_step(prev: float, low: float, high: float, step: float, rng: random.Random) -> float:
    nxt = prev + (rng.random() - 0.5) * step
    return min(high, max(low, nxt))


class VitalSignsSimulator:
    def __init__(self, charts: Optional[List[Mapping[str, Any]]] = None, seed: Optional[int] = 42) -> None:
        self.charts = list(charts if charts is not None else config.DEMO_CHARTS)
        self._rng = random.Random(seed)
        self._tick = 0
        self._values: Dict[str, float] = {c["key"]: float(c["start"]) for c in self.charts}

    @property
    def tick(self) -> int:
        return self._tick

    def sample(self) -> Dict[str, Any]:
        """Return one synthetic sample row for all signals."""
        self._tick += 1

        row: Dict[str, Any] = {
            "timestamp_utc": datetime.now(timezone.utc).isoformat(),
            "timestamp_unix_s": time.time(),
            "t": f"{self._tick}s",
        }

        for chart in self.charts:
            key = chart["key"]
            low, high = chart["bounds"]
            value = random_walk_step(self._values[key], low, high, chart["step"], self._rng)
            self._values[key] = value
            row[key] = round(value, chart.get("decimals", 1))

        return row
