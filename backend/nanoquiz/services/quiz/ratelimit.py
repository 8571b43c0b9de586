import threading
import time
from collections import deque
from typing import Callable, Deque, Dict, Hashable


class SlidingWindowRateLimiter:
    """Per-source sliding window admission control.

    Every checked event is recorded, admitted or not, so a flooding source
    stays throttled until it goes quiet for a full window. Sources whose
    newest event has left the window are swept at most once per window.
    """

    def __init__(self, window_sec: float = 10.0, max_events: int = 30,
                 clock: Callable[[], float] = time.monotonic):
        self.window_sec = float(window_sec)
        self.max_events = int(max_events)
        self._clock = clock
        self._events: Dict[Hashable, Deque[float]] = {}
        self._last_sweep = clock()
        self._lock = threading.Lock()

    def allow(self, key: Hashable) -> bool:
        now = self._clock()
        cutoff = now - self.window_sec
        with self._lock:
            if now - self._last_sweep >= self.window_sec:
                self._sweep(cutoff)
                self._last_sweep = now
            events = self._events.setdefault(key, deque())
            while events and events[0] < cutoff:
                events.popleft()
            events.append(now)
            return len(events) <= self.max_events

    def _sweep(self, cutoff: float) -> None:
        idle = [k for k, events in self._events.items() if not events or events[-1] < cutoff]
        for k in idle:
            del self._events[k]

    def tracked_sources(self) -> int:
        with self._lock:
            return len(self._events)
