"""
Unit tests for rule-based insights.
"""
import pytest
from app.services.analyzer import analyze
from app.services.dataset import Dataset, Text
from app.services.insights import (
    coefficient_of_variation,
    concentration,
    generate_insights,
)
from app.services.summarizer import summarize_categorical, summarize_numeric


def _insights_for(records):
    dataset = Dataset.from_records(records)
    return generate_insights(analyze(dataset).summary, dataset)


def _column(name, values):
    return [{name: v} for v in values]


@pytest.mark.unit
def test_insight_order_numeric_then_categorical():
    records = [
        {"age": 10, "city": "NY"},
        {"age": 10, "city": "NY"},
        {"age": 10, "city": "NY"},
        {"age": 100, "city": "NY"},
    ]

    insights = _insights_for(records)

    assert len(insights) == 3
    assert "age" in insights[0] and "high dispersion" in insights[0]
    assert "119.91%" in insights[0]
    assert "age" in insights[1] and "max (100.00)" in insights[1] and "mean (32.50)" in insights[1]
    assert "city" in insights[2] and "identical" in insights[2]


@pytest.mark.unit
def test_low_dispersion():
    insights = _insights_for(_column("temp", [100, 101, 99, 100]))

    assert len(insights) == 1
    assert "low dispersion" in insights[0]
    assert "0.71%" in insights[0]


@pytest.mark.unit
def test_moderate_dispersion_has_no_insight():
    # cv = 5 / 15 * 100 = 33.3
    assert _insights_for(_column("v", [10, 20])) == []


@pytest.mark.unit
def test_zero_std_skips_dispersion_rule():
    assert _insights_for(_column("v", [5, 5, 5])) == []


@pytest.mark.unit
def test_zero_mean_skips_dispersion_rule():
    insights = _insights_for(_column("delta", [-1, 1]))

    assert len(insights) == 1
    assert "outliers" in insights[0]


@pytest.mark.unit
def test_concentration_threshold_is_strict():
    assert _insights_for(_column("grade", ["A", "A", "A", "A", "B"])) == []


@pytest.mark.unit
def test_high_concentration():
    insights = _insights_for(_column("grade", ["A", "A", "A", "A", "A", "B"]))

    assert len(insights) == 1
    assert "'A'" in insights[0]
    assert "83.3%" in insights[0]


@pytest.mark.unit
def test_identifier_column():
    insights = _insights_for(_column("code", ["x1", "x2", "x3"]))

    assert len(insights) == 1
    assert "identifier" in insights[0]


@pytest.mark.unit
def test_missing_values_count_toward_concentration():
    insights = _insights_for(_column("note", ["", "", "", "", "", "hi"]))

    assert len(insights) == 1
    assert "'unknown'" in insights[0]


@pytest.mark.unit
def test_empty_dataset_has_no_insights():
    assert generate_insights({}, Dataset.from_records([])) == []


@pytest.mark.unit
def test_helpers():
    assert coefficient_of_variation(summarize_numeric([3, 3])) is None
    assert coefficient_of_variation(summarize_numeric([2, 4, 4, 4, 5, 5, 7, 9])) == pytest.approx(40.0)
    assert concentration(summarize_categorical([Text("a"), Text("a"), Text("b"), Text("c")])) == 50.0


@pytest.mark.unit
def test_outlier_insight_formats_large_max_with_two_decimals():
    insights = _insights_for(_column("v", [0, 0, 0, 1e20]))

    assert any("max (100000000000000000000.00)" in i and "mean (25000000000000000000.00)" in i for i in insights)
