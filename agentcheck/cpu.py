"""
CPU idle sampler.

Takes two system-wide ``psutil.cpu_times()`` snapshots a short interval apart
and reports the share of that window the CPUs spent idle, as an integer
percentage. Each call blocks only the calling thread.
"""

import time
from typing import Any, Callable

import psutil

SAMPLE_INTERVAL_S = 0.1

# Already included in user/nice on Linux; psutil drops them the same way.
_GUEST_FIELDS = ("guest", "guest_nice")


def _idle_and_total(times: Any) -> tuple[float, float]:
    fields = times._asdict()
    total = sum(fields.values())
    for name in _GUEST_FIELDS:
        total -= fields.get(name, 0.0)
    return fields.get("idle", 0.0), total


def idle_percent_between(first: Any, second: Any) -> int:
    """Idle percentage over the window between two cpu_times snapshots."""

    idle1, total1 = _idle_and_total(first)
    idle2, total2 = _idle_and_total(second)
    total_delta = total2 - total1
    if total_delta <= 0:
        return 0
    pct = int((idle2 - idle1) / total_delta * 100)
    return max(0, min(100, pct))


class CpuSampler:
    """Blocking idle sampler with injectable clock and snapshot source."""

    def __init__(
        self,
        interval: float = SAMPLE_INTERVAL_S,
        *,
        snapshot: Callable[[], Any] = psutil.cpu_times,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.interval = interval
        self._snapshot = snapshot
        self._sleep = sleep

    def sample_idle_percent(self) -> int:
        first = self._snapshot()
        self._sleep(self.interval)
        second = self._snapshot()
        return idle_percent_between(first, second)
