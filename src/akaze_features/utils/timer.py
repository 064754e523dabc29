import time
from typing import Optional


class Timer:
    """
    Measures the wall time of the code inside a ``with`` block

    Uses ``time.perf_counter``, which is monotonic and has sub-microsecond
    resolution on every supported platform.

    Example:
        with Timer("detect_features") as timer:
            keypoints = session.detect_features()
        timings[timer.name] = timer.elapsed_ms
    """

    def __init__(self, name: str = ""):
        """
        Args:
            name: Label the caller files the measurement under
        """
        self.name = name
        self._start: Optional[float] = None
        self._stop: Optional[float] = None

    def __enter__(self) -> "Timer":
        self._stop = None
        self._start = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self._stop = time.perf_counter()

    @property
    def elapsed_ms(self) -> float:
        """Elapsed milliseconds; a running timer reports the time so far"""
        if self._start is None:
            return 0.0
        stop = self._stop if self._stop is not None else time.perf_counter()
        return 1000.0 * (stop - self._start)
