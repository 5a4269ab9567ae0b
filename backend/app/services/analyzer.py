"""
Dataset analysis entry point.

Ties together classification, summaries, chart aggregates and insights into a
single AnalysisResult. Pure computation, safe to call concurrently.
"""
import logging
from typing import Any, Dict, Iterable, Mapping, Optional

from app.core.performance import track_performance
from app.core.schemas import (
    AnalysisOptions,
    AnalysisResult,
    ChartSpec,
    ColumnSummary,
    HistogramChart,
    PieChart,
)
from app.services.classifier import ColumnKind, classify_columns
from app.services.dataset import Dataset
from app.services.histogram import build_histogram
from app.services.insights import generate_insights
from app.services.summarizer import numeric_values, pie_slices, summarize_categorical, summarize_numeric

logger = logging.getLogger(__name__)


@track_performance("analyze_dataset")
def analyze(dataset: Dataset) -> AnalysisResult:
    """
    Analyze a dataset.

    Numeric columns are summarized first, then categorical columns, each group
    in column order. A numeric column with no parseable values is left out of
    both summary and charts.

    Returns:
        AnalysisResult with summary, charts and insights (all empty for an empty dataset)
    """
    if dataset.is_empty:
        return AnalysisResult()

    kinds = classify_columns(dataset)
    numeric_cols = [col for col, kind in kinds.items() if kind == ColumnKind.NUMERIC]
    categorical_cols = [col for col, kind in kinds.items() if kind == ColumnKind.CATEGORICAL]

    summary: Dict[str, ColumnSummary] = {}
    charts: Dict[str, ChartSpec] = {}

    for col in numeric_cols:
        values = numeric_values(dataset, col)
        stats = summarize_numeric(values)
        if stats is None:
            logger.warning(f"Numeric column '{col}' has no parseable values, skipping")
            continue
        summary[col] = stats
        charts[col] = HistogramChart(data=build_histogram(values))

    for col in categorical_cols:
        stats = summarize_categorical(dataset.column(col))
        summary[col] = stats
        charts[col] = PieChart(data=pie_slices(stats))

    insights = generate_insights(summary, dataset)

    logger.info(
        f"Analyzed {len(dataset)} rows: {len(numeric_cols)} numeric, "
        f"{len(categorical_cols)} categorical columns, {len(insights)} insights"
    )
    return AnalysisResult(summary=summary, charts=charts, insights=insights)


def analyze_records(records: Iterable[Mapping[str, Any]]) -> AnalysisResult:
    """Ingest raw rows and analyze them."""
    return analyze(Dataset.from_records(records))


def filter_result(result: AnalysisResult, options: Optional[AnalysisOptions] = None) -> Dict[str, Any]:
    """
    Serialize a result, dropping charts and/or insights when the options disable them.
    """
    options = options or AnalysisOptions()
    exclude = set()
    if not options.include_charts:
        exclude.add("charts")
    if not options.include_insights:
        exclude.add("insights")
    return result.model_dump(exclude=exclude)
