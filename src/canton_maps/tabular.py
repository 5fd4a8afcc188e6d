import csv
import io
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import IO, Iterator, List, Optional, Union

import pandas as pd

from . import config
from .errors import MissingColumnError

logger = logging.getLogger(__name__)

TableSource = Union[str, Path, bytes, IO]


@dataclass(frozen=True)
class RegionValue:
    """One row of the dataset: a region name and its numeric total."""
    name: str
    total: Optional[float]


def _source_name(source: TableSource) -> str:
    if isinstance(source, str) and '\n' in source:
        return '<text>'
    if isinstance(source, (str, Path)):
        return str(source)
    return getattr(source, 'name', '<upload>')


def _missing_columns(df: pd.DataFrame, row: int) -> List[str]:
    missing = []
    for col in config.REQUIRED_COLUMNS:
        if col not in df.columns or pd.isna(df[col].iloc[row]):
            missing.append(col)
    return missing


def load_table(source: TableSource, strict: bool = False) -> pd.DataFrame:
    """
    Parse an uploaded delimited file into rows and check the required columns.

    The header row gives the field names and numeric-looking values become
    numbers. The delimiter is sniffed, so comma, semicolon and tab separated
    files are all accepted.

    Only the first row is checked for non-null 'Total' and 'Canton' values
    unless ``strict`` is set, in which case every row is.

    Args:
        source: Path, open file, or the raw file content as bytes or text
                (a str containing a newline is read as content, not as a path)
        strict: Validate every row instead of the first one only

    Returns:
        DataFrame with one row per record

    Raises:
        MissingColumnError: If a validated row lacks a required value, or there are no rows
    """
    name = _source_name(source)
    logger.info(f"Loading tabular data from {name}")

    if isinstance(source, bytes):
        source = io.BytesIO(source)
    elif isinstance(source, str) and '\n' in source:
        source = io.StringIO(source)

    try:
        df = pd.read_csv(source, sep=None, engine='python')
    except (pd.errors.EmptyDataError, csv.Error) as e:
        raise MissingColumnError(config.REQUIRED_COLUMNS, row=None) from e

    if df.empty:
        raise MissingColumnError(config.REQUIRED_COLUMNS, row=None)

    rows_to_check = range(len(df)) if strict else range(1)
    for row in rows_to_check:
        missing = _missing_columns(df, row)
        if missing:
            raise MissingColumnError(missing, row=row)

    logger.info(f"Loaded {len(df)} rows from {name}")
    return df


def region_values(rows: pd.DataFrame) -> Iterator[RegionValue]:
    """Yield a RegionValue per row that has a region name. Non-numeric totals become None."""
    totals = pd.to_numeric(rows[config.VALUE_COLUMN], errors='coerce')
    for name, total in zip(rows[config.NAME_COLUMN], totals):
        if pd.isna(name):
            continue
        yield RegionValue(name=str(name), total=None if pd.isna(total) else total)
