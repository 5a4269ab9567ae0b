"""
Rule-based natural language insights.

Generates observations from the per-column summaries using fixed thresholds.
"""
import logging
from typing import List, Mapping, Optional

from app.core.schemas import CategoricalSummary, ColumnSummary, NumericSummary
from app.services.dataset import Dataset
from app.services.summarizer import top_values

logger = logging.getLogger(__name__)

HIGH_DISPERSION_CV = 50.0
LOW_DISPERSION_CV = 20.0
OUTLIER_MEAN_FACTOR = 3.0
CONCENTRATION_THRESHOLD = 80.0


def coefficient_of_variation(stats: NumericSummary) -> Optional[float]:
    """
    CV as a percentage (std / mean * 100).

    Returns None when std is zero or the mean is zero.
    """
    if stats.std <= 0 or stats.mean == 0:
        return None
    return stats.std / stats.mean * 100


def concentration(stats: CategoricalSummary) -> float:
    """Share (in percent) of the most frequent value among all observations."""
    total = sum(stats.value_counts.values())
    if total == 0:
        return 0.0
    return max(stats.value_counts.values()) / total * 100


def numeric_insights(column: str, stats: NumericSummary) -> List[str]:
    insights = []

    cv = coefficient_of_variation(stats)
    if cv is not None:
        if cv > HIGH_DISPERSION_CV:
            insights.append(
                f"📊 {column} shows high dispersion (coefficient of variation {cv:.2f}%), "
                f"values are unevenly distributed"
            )
        elif cv < LOW_DISPERSION_CV:
            insights.append(
                f"➡️ {column} shows low dispersion (coefficient of variation {cv:.2f}%), "
                f"values are relatively stable"
            )

    if stats.max > stats.mean * OUTLIER_MEAN_FACTOR:
        insights.append(
            f"⚠️ {column} contains outliers: max ({stats.max:.2f}) "
            f"is far above the mean ({stats.mean:.2f})"
        )

    return insights


def categorical_insights(column: str, stats: CategoricalSummary, row_count: int) -> List[str]:
    insights = []

    if stats.unique_values == 1:
        # A constant column is trivially 100% concentrated, one insight is enough
        insights.append(f"ℹ️ All values in {column} are identical, the column has little analytic value")
        return insights
    if stats.unique_values == row_count:
        insights.append(f"🔑 Every value in {column} is unique, it is likely an identifier column")

    share = concentration(stats)
    if share > CONCENTRATION_THRESHOLD:
        top_label = top_values(stats, 1)[0][0]
        insights.append(
            f"🎯 {column} is highly concentrated: '{top_label}' accounts for {share:.1f}% of values"
        )

    return insights


def generate_insights(summary: Mapping[str, ColumnSummary], dataset: Dataset) -> List[str]:
    """
    Generate insights for every summarized column.

    Insights follow the column order of `summary`; within a column the
    dispersion rule comes before the outlier rule, and the constant/identifier
    rule before the concentration rule. Constant columns only get the
    constant-column insight.

    Returns:
        List of insight strings (empty for an empty dataset)
    """
    if dataset.is_empty:
        return []

    insights: List[str] = []
    for column, stats in summary.items():
        if isinstance(stats, NumericSummary):
            insights.extend(numeric_insights(column, stats))
        elif isinstance(stats, CategoricalSummary):
            insights.extend(categorical_insights(column, stats, len(dataset)))

    logger.debug(f"Generated {len(insights)} insights for {len(summary)} columns")
    return insights
