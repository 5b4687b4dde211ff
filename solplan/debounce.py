# solplan/debounce.py
from __future__ import annotations

import logging
import threading
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


class DebouncedRunner:
    """
    Debounce, then compute fully; the latest submission wins.

    submit() cancels any pending (not yet started) run and schedules a new
    one after `delay` seconds. A run that finishes after a newer submission
    has its result dropped, so `on_result` only ever sees the result of the
    most recent inputs.
    """

    def __init__(self, fn: Callable[..., Any], on_result: Callable[[Any], None], delay: float = 0.05):
        self.fn = fn
        self.on_result = on_result
        self.delay = delay
        self._lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._generation = 0

    @classmethod
    def from_settings(cls, settings, fn: Callable[..., Any], on_result: Callable[[Any], None]) -> "DebouncedRunner":
        return cls(fn, on_result, delay=settings.debounce_ms / 1000.0)

    def submit(self, *args, **kwargs) -> int:
        with self._lock:
            self._generation += 1
            generation = self._generation
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(self.delay, self._run, args=(generation, args, kwargs))
            self._timer.daemon = True
            self._timer.start()
        return generation

    def cancel(self) -> None:
        with self._lock:
            self._generation += 1
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def is_current(self, generation: int) -> bool:
        with self._lock:
            return generation == self._generation

    def _run(self, generation: int, args, kwargs) -> None:
        if not self.is_current(generation):
            return
        result = self.fn(*args, **kwargs)
        if self.is_current(generation):
            self.on_result(result)
        else:
            logger.debug("discarding stale result for generation %d", generation)
