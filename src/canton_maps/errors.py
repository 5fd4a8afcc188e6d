"""Exceptions raised by canton_maps. All of them derive from CantonMapsError."""

from typing import Optional, Sequence


class CantonMapsError(Exception):
    """Base class for every error surfaced to the caller."""


class EmptyTopologyError(CantonMapsError):
    """The boundary data holds no object layers (or no features) to draw."""


class LoadError(CantonMapsError):
    """Boundary data could not be retrieved."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class MissingColumnError(CantonMapsError):
    """Required tabular columns are absent (or null) on a validated row."""

    def __init__(self, missing: Sequence[str], row: Optional[int] = 0):
        self.missing = list(missing)
        self.row = row
        if row is None:
            message = f"Dataset has no rows; required columns: {', '.join(self.missing)}"
        else:
            message = f"Row {row} is missing required column(s): {', '.join(self.missing)}"
        super().__init__(message)


class EmptyDatasetError(CantonMapsError):
    """Min/max was requested over a dataset without any values."""


class InvalidEventError(CantonMapsError):
    """A range-slider change event could not be read or is malformed."""
