"""
Typed dataset ingestion.

Raw rows (from a parsed file or a JSON payload) are converted once into typed
cells so the classifier and summarizers never re-inspect untyped values.
"""
import math
import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

# Decimal float literal: optional sign, digits with optional fraction, optional exponent
_NUMBER_PATTERN = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')


@dataclass(frozen=True)
class Number:
    value: float


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class Missing:
    pass


Cell = Union[Number, Text, Missing]

MISSING = Missing()


def parse_number(raw: str) -> Optional[float]:
    """
    Parse a decimal literal into a finite float.

    Surrounding whitespace is tolerated. Returns None for anything that is not
    a finite decimal number (including 'nan', 'inf' and '1_000').
    """
    text = raw.strip()
    if not _NUMBER_PATTERN.match(text):
        return None
    value = float(text)
    if not math.isfinite(value):
        return None
    return value


def to_cell(raw: Any) -> Cell:
    """Convert a raw value into a typed cell."""
    if raw is None:
        return MISSING

    # bool is a subclass of int, keep it textual
    if isinstance(raw, bool):
        return Text("true" if raw else "false")

    if isinstance(raw, (int, float)):
        value = float(raw)
        if math.isnan(value):
            return MISSING
        if math.isinf(value):
            return Text(str(raw))
        return Number(value)

    text = raw if isinstance(raw, str) else str(raw)
    if text == "":
        return MISSING

    number = parse_number(text)
    if number is not None:
        return Number(number)
    return Text(text)


class Dataset:
    """
    Ordered rows of typed cells sharing one column set.

    Columns come from the first row's keys. Keys absent from a later row are
    treated as missing; keys that only appear in later rows are ignored.
    """

    def __init__(self, columns: Iterable[str], rows: Iterable[Tuple[Cell, ...]]):
        self.columns: Tuple[str, ...] = tuple(columns)
        self.rows: Tuple[Tuple[Cell, ...], ...] = tuple(rows)
        self._index: Dict[str, int] = {name: i for i, name in enumerate(self.columns)}

    @classmethod
    def from_records(cls, records: Iterable[Mapping[str, Any]]) -> "Dataset":
        records = list(records)
        if not records:
            return cls((), ())

        columns = [str(key) for key in records[0].keys()]
        rows = []
        for record in records:
            normalized = {str(key): value for key, value in record.items()}
            rows.append(tuple(to_cell(normalized.get(col)) for col in columns))
        return cls(columns, rows)

    def __len__(self) -> int:
        return len(self.rows)

    @property
    def is_empty(self) -> bool:
        return not self.rows

    def column(self, name: str) -> List[Cell]:
        """Return all cells of a column, in row order."""
        idx = self._index[name]
        return [row[idx] for row in self.rows]
