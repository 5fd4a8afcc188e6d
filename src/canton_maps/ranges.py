"""
Value ranges and the range-slider change events that carry them.

A range slider with N thumbs splits the value axis into colored ranges. On
every interaction it emits a ChangeEvent holding the full, ordered list of
ranges; regions are recolored by looking their total up in that list.
"""

import numbers
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import pandas as pd

from . import config
from .errors import EmptyDatasetError

EVENT_TYPES = ('thumbMoved', 'thumbsReset', 'colorChanged')


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


@dataclass(frozen=True)
class Range:
    """Closed interval [min, max] painted with ``color``."""
    min: float
    max: float
    color: str

    def __post_init__(self):
        if not _is_number(self.min) or not _is_number(self.max):
            raise ValueError(f"Range bounds must be numbers, got {self.min!r} and {self.max!r}")
        if self.min > self.max:
            raise ValueError(f"Range min {self.min} is greater than max {self.max}")
        if not isinstance(self.color, str) or not self.color:
            raise ValueError(f"Range color must be a non-empty string, got {self.color!r}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Range':
        return cls(min=data['min'], max=data['max'], color=data['color'])

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def to_dict(self) -> Dict[str, Any]:
        return {'min': self.min, 'max': self.max, 'color': self.color}


@dataclass(frozen=True)
class ChangeEvent:
    """State of the range slider after a thumb move, reset or color change."""
    type: str
    thumb_count: int
    values: List[float] = field(default_factory=list)
    colors: List[str] = field(default_factory=list)
    ranges: List[Range] = field(default_factory=list)
    moved_index: Optional[int] = None

    def __post_init__(self):
        if self.type not in EVENT_TYPES:
            raise ValueError(f"Unknown change event type {self.type!r}; expected one of {EVENT_TYPES}")
        if not isinstance(self.thumb_count, int) or self.thumb_count < 0:
            raise ValueError(f"thumbCount must be a non-negative integer, got {self.thumb_count!r}")
        if self.moved_index is not None and not isinstance(self.moved_index, int):
            raise ValueError(f"movedIndex must be an integer, got {self.moved_index!r}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'ChangeEvent':
        """Build an event from the slider's camelCase payload."""
        ranges = [r if isinstance(r, Range) else Range.from_dict(r) for r in data.get('ranges', [])]
        return cls(
            type=data['type'],
            thumb_count=data['thumbCount'],
            values=list(data.get('values', [])),
            colors=list(data.get('colors', [])),
            ranges=ranges,
            moved_index=data.get('movedIndex'),
        )


def classify(total: Optional[float], ranges: Optional[Sequence[Range]]) -> str:
    """
    Return the fill color for ``total``.

    A total of 0, None or NaN counts as "no value" and gets the default color,
    as does a missing range list. Otherwise the first range (in list order)
    with ``min <= total <= max`` wins, so overlapping ranges resolve by
    position.

    Args:
        total: Value of the region
        ranges: Ordered ranges from the current change event

    Returns:
        A color string, config.DEFAULT_COLOR when nothing matches
    """
    if total is None or pd.isna(total) or not total or ranges is None:
        return config.DEFAULT_COLOR

    for r in ranges:
        if r.min <= total <= r.max:
            return r.color
    return config.DEFAULT_COLOR


RowsLike = Union[pd.DataFrame, Iterable[Mapping[str, Any]]]


def value_bounds(rows: RowsLike, value_col: str = config.VALUE_COLUMN) -> Dict[str, float]:
    """
    Minimum and maximum of ``value_col`` across all rows, skipping nulls.

    Raises:
        EmptyDatasetError: If there are no rows, or no non-null values
    """
    df = rows if isinstance(rows, pd.DataFrame) else pd.DataFrame(list(rows))
    if df.empty or value_col not in df.columns:
        raise EmptyDatasetError("Cannot compute min/max of an empty dataset")

    values = pd.to_numeric(df[value_col], errors='coerce').dropna()
    if values.empty:
        raise EmptyDatasetError(f"Column '{value_col}' has no values")

    return {'min': values.min().item(), 'max': values.max().item()}


def ranges_from_bounds(bounds: Mapping[str, float], colors: Sequence[str]) -> List[Range]:
    """
    Split [bounds['min'], bounds['max']] into len(colors) equal-width ranges.

    Used as the initial slider state before the user moves any thumb.
    Neighbouring ranges share their boundary value; the first one listed wins.
    """
    if not colors:
        return []
    lo, hi = bounds['min'], bounds['max']
    step = (hi - lo) / len(colors)
    ranges = []
    for i, color in enumerate(colors):
        start = lo + step * i
        end = hi if i == len(colors) - 1 else lo + step * (i + 1)
        ranges.append(Range(min=start, max=end, color=color))
    return ranges
