"""
Column classification into numeric vs categorical.
"""
import logging
from enum import Enum
from typing import Dict

from app.services.dataset import Dataset, Number

logger = logging.getLogger(__name__)


class ColumnKind(str, Enum):
    NUMERIC = "numeric"
    CATEGORICAL = "categorical"


def classify_columns(dataset: Dataset) -> Dict[str, ColumnKind]:
    """
    Classify every column of the dataset.

    A column is numeric when at least one of its cells holds a finite number,
    otherwise it is categorical. Returns an empty mapping for an empty dataset.
    """
    if dataset.is_empty:
        return {}

    kinds: Dict[str, ColumnKind] = {}
    for col in dataset.columns:
        has_number = any(isinstance(cell, Number) for cell in dataset.column(col))
        kinds[col] = ColumnKind.NUMERIC if has_number else ColumnKind.CATEGORICAL

    numeric_count = sum(1 for kind in kinds.values() if kind == ColumnKind.NUMERIC)
    logger.debug(f"Classified {len(kinds)} columns: {numeric_count} numeric, {len(kinds) - numeric_count} categorical")
    return kinds
