"""Rating anomaly detection against an author's own history."""

from __future__ import annotations

from numbers import Real
from statistics import fmean
from typing import Sequence

# Only reachable from extreme averages on a 1-5 scale (avg ~1 rating 5, or the
# reverse). Kept literal pending product review of the calibration.
DEFAULT_DEVIATION_THRESHOLD = 3.0


class AnomalyScorer:
    def __init__(self, *, threshold: float = DEFAULT_DEVIATION_THRESHOLD) -> None:
        self.threshold = threshold

    @staticmethod
    def score(candidate: int, history: Sequence[int]) -> float | None:
        """Absolute deviation from the author's mean, or None without history."""

        if not history:
            return None
        for value in history:
            if isinstance(value, bool) or not isinstance(value, Real):
                raise TypeError(f"rating history contains non-numeric value {value!r}")
        return abs(candidate - fmean(history))

    def is_suspicious(self, candidate: int, history: Sequence[int]) -> bool:
        deviation = self.score(candidate, history)
        if deviation is None:
            return False
        return deviation > self.threshold
