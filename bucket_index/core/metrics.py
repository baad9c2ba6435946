"""In-process sliding-window metrics for resolution outcomes and store calls."""
from __future__ import annotations

import time
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict


@dataclass
class MetricPoint:
    ok: bool
    duration_ms: int


@dataclass
class MetricWindow:
    points: Deque[MetricPoint]
    last_alert: float = 0.0
    total: int = field(default=0)

    def error_rate(self) -> float:
        if not self.points:
            return 0.0
        return sum(1 for p in self.points if not p.ok) / len(self.points)

    def avg_ms(self) -> int:
        if not self.points:
            return 0
        return int(sum(p.duration_ms for p in self.points) / len(self.points))


class MetricsCollector:
    """Keeps the last ``window_size`` points per metric name.

    Names used by the resolver: ``resolve.file``, ``resolve.directory``,
    ``resolve.miss`` for request outcomes and ``store.stat``, ``store.list``,
    ``store.transfer`` for store calls.
    """

    def __init__(self, window_size: int = 200) -> None:
        self._window_size = window_size
        self._windows: Dict[str, MetricWindow] = {}

    def _window(self, name: str) -> MetricWindow:
        window = self._windows.get(name)
        if window is None:
            window = MetricWindow(points=deque(maxlen=self._window_size))
            self._windows[name] = window
        return window

    def record(self, name: str, *, ok: bool, duration_ms: int = 0) -> None:
        window = self._window(name)
        window.points.append(MetricPoint(ok=ok, duration_ms=duration_ms))
        window.total += 1

    def snapshot(self) -> dict:
        payload: dict[str, dict] = {}
        for name, window in self._windows.items():
            if not window.points:
                continue
            payload[name] = {
                "count": len(window.points),
                "total": window.total,
                "error_rate": round(window.error_rate(), 3),
                "avg_ms": window.avg_ms(),
            }
        return payload

    def should_alert(
        self,
        name: str,
        *,
        error_rate: float = 0.2,
        avg_ms: int = 2000,
        min_points: int = 5,
        min_interval_s: int = 60,
    ) -> bool:
        window = self._windows.get(name)
        if window is None or len(window.points) < min_points:
            return False
        if window.error_rate() < error_rate and window.avg_ms() < avg_ms:
            return False
        now = time.time()
        if now - window.last_alert < min_interval_s:
            return False
        window.last_alert = now
        return True
