"""Named timing measures recorded by compiler engines."""

from __future__ import annotations

import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager


class Performance:
    """Process-wide measure registry.

    Engines call `mark` / `measure` (or the `timed` context manager) while
    capture is enabled; everything is a no-op otherwise. Durations are kept
    in milliseconds, keyed by measure name in first-recorded order.
    """

    def __init__(self, clock: Callable[[], float] | None = None) -> None:
        self._clock = clock or time.perf_counter
        self._enabled = False
        self._profiler_start = 0.0
        self._marks: dict[str, float] = {}
        self._durations: dict[str, float] = {}
        self._counts: dict[str, int] = {}

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self) -> None:
        # Re-enabling keeps whatever has been recorded so far.
        if self._enabled:
            return
        self._enabled = True
        self._profiler_start = self._clock() * 1000.0
        self._marks.clear()
        self._durations.clear()
        self._counts.clear()

    def disable(self) -> None:
        self._enabled = False
        self._marks.clear()
        self._durations.clear()
        self._counts.clear()

    def mark(self, name: str) -> None:
        if not self._enabled:
            return
        self._marks[name] = self._clock() * 1000.0
        self._counts[name] = self._counts.get(name, 0) + 1

    def measure(
        self,
        name: str,
        start_mark: str | None = None,
        end_mark: str | None = None,
    ) -> None:
        """Add the time between two marks to measure `name`.

        A missing start mark means "since capture was enabled"; a missing end
        mark means "now".
        """
        if not self._enabled:
            return
        now = self._clock() * 1000.0
        end = self._marks.get(end_mark, now) if end_mark is not None else now
        start = (
            self._marks.get(start_mark, self._profiler_start)
            if start_mark is not None
            else self._profiler_start
        )
        self._durations[name] = self._durations.get(name, 0.0) + (end - start)

    def add_duration(self, name: str, milliseconds: float) -> None:
        if not self._enabled:
            return
        self._durations[name] = self._durations.get(name, 0.0) + milliseconds

    @contextmanager
    def timed(self, name: str) -> Iterator[None]:
        start = self._clock() * 1000.0
        try:
            yield
        finally:
            self.add_duration(name, self._clock() * 1000.0 - start)

    def get_count(self, mark_name: str) -> int:
        return self._counts.get(mark_name, 0)

    def get_duration(self, measure_name: str) -> float:
        return self._durations.get(measure_name, 0.0)

    def for_each_measure(self, callback: Callable[[str, float], None]) -> None:
        for name, duration in list(self._durations.items()):
            callback(name, duration)
