"""
Per-column descriptive statistics.

Numeric columns get count/sum/mean/median/min/max/std, categorical columns get
a value frequency table.
"""
import logging
import math
import numpy as np
from typing import Iterable, List, Optional, Tuple

from app.core.schemas import CategoricalSummary, NumericSummary, PieSlice
from app.services.dataset import Cell, Dataset, Missing, Number

logger = logging.getLogger(__name__)

# Label used for empty / missing categorical values
UNKNOWN_LABEL = "unknown"


def numeric_values(dataset: Dataset, column: str) -> List[float]:
    """Return the parsed numbers of a column, skipping text and missing cells."""
    return [cell.value for cell in dataset.column(column) if isinstance(cell, Number)]


def _scaled(stat, arr: np.ndarray) -> float:
    """
    Apply a statistic, retrying on values scaled by a power of two when the
    intermediate sums overflow near the float limit.
    """
    with np.errstate(over="ignore", invalid="ignore"):
        result = float(stat(arr))
        if math.isfinite(result):
            return result
        scale = math.ldexp(1.0, math.frexp(float(np.abs(arr).max()))[1] - 1)
        return float(stat(arr / scale)) * scale


def summarize_numeric(values: Iterable[float]) -> Optional[NumericSummary]:
    """
    Compute summary statistics for numeric values.

    The standard deviation is the population one (divisor N). Mean, median and
    std stay finite for any finite input; the sum overflows to inf when it
    exceeds the float range.

    Returns:
        NumericSummary, or None when there are no values to summarize
    """
    arr = np.asarray(list(values), dtype=float)
    if arr.size == 0:
        return None

    with np.errstate(over="ignore"):
        total = float(arr.sum())

    return NumericSummary(
        count=int(arr.size),
        sum=total,
        mean=_scaled(np.mean, arr),
        median=_scaled(np.median, arr),
        min=float(arr.min()),
        max=float(arr.max()),
        std=_scaled(np.std, arr),
    )


def summarize_categorical(cells: Iterable[Cell]) -> CategoricalSummary:
    """Count value frequencies in first-seen order; missing cells count as 'unknown'."""
    value_counts = {}
    for cell in cells:
        if isinstance(cell, Missing):
            label = UNKNOWN_LABEL
        else:
            label = str(cell.value)
        value_counts[label] = value_counts.get(label, 0) + 1

    return CategoricalSummary(
        unique_values=len(value_counts),
        value_counts=value_counts,
    )


def pie_slices(summary: CategoricalSummary) -> List[PieSlice]:
    """Pie chart slices, one per distinct value, in first-seen order."""
    return [PieSlice(label=label, value=count) for label, count in summary.value_counts.items()]


def top_values(summary: CategoricalSummary, n: int = 3) -> List[Tuple[str, int]]:
    """
    Most frequent values, highest count first.

    Ties keep first-seen order. This is a display view and does not affect
    the order of pie slices.
    """
    ranked = sorted(summary.value_counts.items(), key=lambda item: item[1], reverse=True)
    return ranked[:n]
