"""Min/max normalization of raw discovery metrics into [0, 1]."""

from __future__ import annotations

from typing import Iterable


def normalize(raw: float, minimum: float, maximum: float) -> float:
    """Linearly scale ``raw`` from ``[minimum, maximum]`` into ``[0, 1]``.

    A degenerate range (``minimum >= maximum``: empty or uniform population)
    yields 0.0 for every input.  Values outside the range are clamped.
    """
    if minimum >= maximum:
        return 0.0
    value = (raw - minimum) / (maximum - minimum)
    return min(1.0, max(0.0, value))


def observed_range(values: Iterable[float]) -> tuple[float, float]:
    """Return ``(min, max)`` seeded from the observed values.

    An empty population returns ``(0.0, 0.0)``, which ``normalize`` treats
    as degenerate.
    """
    values = list(values)
    if not values:
        return 0.0, 0.0
    return min(values), max(values)
