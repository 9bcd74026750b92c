"""
Frame time bookkeeping for variable-timestep Verlet integration.

Frames do not arrive at a constant rate, so the Verlet update needs the two
most recent deltas to correct both the acceleration term and the carried-over
displacement. See
https://en.wikipedia.org/wiki/Verlet_integration#Non-constant_time_differences
"""

from __future__ import annotations

import math
from collections import deque

from .numeric import FALLBACK_DELTA, clamp_range, divide, finite_or
from .validation import UninitializedTimeStepError


class TimeStepTracker:
    """
    Newest-first history of the last two frame deltas.

    The history is empty until the first update, which fills both slots with
    the same delta. Every stored delta is strictly positive.

    Example:
        tracker = TimeStepTracker()
        tracker.update(1 / 60)
        tracker.update(1 / 30)
        tracker.velocity_scale()  # 2.0
    """

    CAPACITY = 2

    def __init__(self, fallback_delta: float = FALLBACK_DELTA) -> None:
        self._deltas: deque[float] = deque(maxlen=self.CAPACITY)
        self._fallback_delta = float(fallback_delta)

    def __len__(self) -> int:
        return len(self._deltas)

    def __repr__(self) -> str:
        return f"TimeStepTracker(deltas={list(self._deltas)})"

    @property
    def ready(self) -> bool:
        """True once update() has been called at least once."""
        return bool(self._deltas)

    def reset(self) -> None:
        """Forget all recorded deltas."""
        self._deltas.clear()

    def update(self, delta: float) -> None:
        """
        Record the newest frame delta.

        Zero, negative and non-finite deltas are replaced by the fallback.
        """
        delta = float(delta)
        if not math.isfinite(delta) or delta <= 0.0:
            delta = self._fallback_delta

        if not self._deltas:
            self._deltas.extend([delta] * self.CAPACITY)
        else:
            # maxlen evicts the oldest entry from the right
            self._deltas.appendleft(delta)

    def _require_ready(self) -> None:
        if not self._deltas:
            raise UninitializedTimeStepError(
                "TimeStepTracker was read before the first update()"
            )

    def delta(self) -> float:
        """Most recent delta in seconds."""
        self._require_ready()
        return self._deltas[0]

    def average_delta(self, n: int = CAPACITY) -> float:
        """Mean of the newest n recorded deltas."""
        self._require_ready()
        count = max(1, min(n, len(self._deltas)))
        total = clamp_range(sum(list(self._deltas)[:count]))
        return clamp_range(total / count)

    def velocity_scale(self) -> float:
        """Ratio newest/previous delta, 1.0 if that ratio is not finite."""
        self._require_ready()
        return finite_or(divide(self._deltas[0], self._deltas[1]), 1.0)

    def delta_squared_effective(self) -> float:
        """
        Trapezoidal dt^2 for non-uniform steps: 0.5 * (dt0 + dt1) * dt0.

        Reduces to dt0^2 when both deltas are equal.
        """
        self._require_ready()
        dt0, dt1 = self._deltas[0], self._deltas[1]
        half_sum = clamp_range(0.5 * clamp_range(dt0 + dt1))
        return clamp_range(half_sum * dt0)


__all__ = ["TimeStepTracker"]
