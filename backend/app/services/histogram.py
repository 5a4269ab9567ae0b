"""
Equal-width histogram binning for numeric columns.
"""
import math
from typing import List, Sequence

from app.core.schemas import HistogramBin

MAX_BINS = 10


def bin_count_for(n: int) -> int:
    """Number of bins for n values: ceil(sqrt(n)), capped at MAX_BINS, at least 1."""
    return max(1, min(MAX_BINS, math.ceil(math.sqrt(n))))


def format_range(start: float, end: float) -> str:
    return f"{start:.2f} - {end:.2f}"


def _position(value: float, lo: float, hi: float) -> float:
    """Relative position of value in [lo, hi], from 0.0 to 1.0."""
    spread = hi - lo
    if math.isinf(spread):
        # halve first so the spread of values near the float limits stays finite
        return (value / 2 - lo / 2) / (hi / 2 - lo / 2)
    return (value - lo) / spread


def _boundary(lo: float, hi: float, fraction: float) -> float:
    """Interpolated boundary; fraction 0 gives lo and fraction 1 gives exactly hi."""
    return lo * (1 - fraction) + hi * fraction


def build_histogram(values: Sequence[float]) -> List[HistogramBin]:
    """
    Bin values into equal-width bins spanning [min, max].

    Bin boundaries are synthetic (evenly spaced from min to max) rather than
    snapped to data, and the last bin always ends at max.
    A value equal to max lands in the last bin. When all values are identical
    a single bin holds everything.

    Raises:
        ValueError: If values is empty
    """
    if len(values) == 0:
        raise ValueError("Cannot build a histogram from an empty sequence")

    lo = min(values)
    hi = max(values)

    if lo == hi:
        return [HistogramBin(range=format_range(lo, hi), count=len(values), start=lo, end=hi)]

    bin_count = bin_count_for(len(values))

    counts = [0] * bin_count
    for value in values:
        idx = math.floor(_position(value, lo, hi) * bin_count)
        idx = min(max(idx, 0), bin_count - 1)
        counts[idx] += 1

    bins = []
    for i, count in enumerate(counts):
        start = _boundary(lo, hi, i / bin_count)
        end = _boundary(lo, hi, (i + 1) / bin_count)
        bins.append(HistogramBin(range=format_range(start, end), count=count, start=start, end=end))
    return bins
