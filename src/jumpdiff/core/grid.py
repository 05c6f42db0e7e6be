from __future__ import annotations

import bisect
import math
from dataclasses import dataclass
from typing import Iterable, Tuple

__all__ = [
    "TimeDiscretization",
]

# Relative tolerance used when matching a query time against the grid bounds.
_TIME_TOLERANCE = 1e-12


@dataclass(frozen=True)
class TimeDiscretization:
    """Immutable, strictly increasing sequence of simulation times.

    Times are held as Python floats so that the grid is hashable and exact
    lookups do not depend on the array compute dtype.
    """

    times: Tuple[float, ...]

    def __post_init__(self) -> None:
        times = tuple(float(t) for t in self.times)
        if len(times) < 2:
            raise ValueError("A time discretization requires at least 2 time points.")
        if not all(math.isfinite(t) for t in times):
            raise ValueError("Time points must be finite.")
        for left, right in zip(times[:-1], times[1:]):
            if not right > left:
                raise ValueError(
                    f"Time points must be strictly increasing; got {left} followed by {right}."
                )
        object.__setattr__(self, "times", times)

    @classmethod
    def from_times(cls, times: Iterable[float]) -> "TimeDiscretization":
        return cls(tuple(float(t) for t in times))

    @classmethod
    def uniform(cls, start: float, horizon: float, steps: int) -> "TimeDiscretization":
        """Equally spaced grid ``start, start + dt, ..., start + horizon``."""
        if steps <= 0:
            raise ValueError("steps must be > 0 for a time discretization.")
        if not horizon > 0.0:
            raise ValueError("horizon must be > 0 for a time discretization.")
        dt = horizon / steps
        return cls(tuple(start + i * dt for i in range(steps)) + (start + horizon,))

    @property
    def number_of_times(self) -> int:
        return len(self.times)

    @property
    def number_of_time_steps(self) -> int:
        return len(self.times) - 1

    @property
    def initial_time(self) -> float:
        return self.times[0]

    @property
    def final_time(self) -> float:
        return self.times[-1]

    def time(self, index: int) -> float:
        """Return ``t_index``; raises ``IndexError`` outside ``[0, n]``."""
        if not 0 <= index < len(self.times):
            raise IndexError(
                f"Time index {index} outside [0, {self.number_of_time_steps}]."
            )
        return self.times[index]

    def time_step(self, index: int) -> float:
        """Return ``t_{index+1} - t_index``; raises ``IndexError`` outside ``[0, n-1]``."""
        if not 0 <= index < self.number_of_time_steps:
            raise IndexError(
                f"Time step index {index} outside [0, {self.number_of_time_steps - 1}]."
            )
        return self.times[index + 1] - self.times[index]

    def time_steps(self) -> Tuple[float, ...]:
        return tuple(right - left for left, right in zip(self.times[:-1], self.times[1:]))

    def time_index(self, time: float) -> int:
        """Return the index of the grid point nearest to ``time``.

        Ties resolve to the earlier grid point.  Times outside
        ``[t_0, t_n]`` raise ``IndexError``.
        """
        time = float(time)
        span = self.final_time - self.initial_time
        tolerance = _TIME_TOLERANCE * max(1.0, abs(span), abs(self.final_time))
        if time < self.initial_time - tolerance or time > self.final_time + tolerance:
            raise IndexError(
                f"Time {time} outside the discretization range "
                f"[{self.initial_time}, {self.final_time}]."
            )
        upper = bisect.bisect_left(self.times, time)
        if upper == 0:
            return 0
        if upper >= len(self.times):
            return len(self.times) - 1
        lower = upper - 1
        if time - self.times[lower] <= self.times[upper] - time:
            return lower
        return upper

    def time_shifted(self, delta: float) -> "TimeDiscretization":
        """Return a new discretization with every point offset by ``delta``."""
        return TimeDiscretization(tuple(t + float(delta) for t in self.times))

    def __len__(self) -> int:
        return len(self.times)
