"""
Data loading functions for raw soil core measurements, topographic
attributes and yearly fire-history records.
"""

import re
import numpy as np
import pandas as pd
from pathlib import Path
from typing import Iterable, List, Mapping, Union

from ..constants import (
    MISSING_TOKENS,
    RAW_RECORD_SCHEMA,
    TOPOGRAPHY_SCHEMA,
    FIRE_HISTORY_SCHEMA,
)
from ..errors import MalformedInputError

CSV_SUFFIXES = {'.csv', '.txt'}
EXCEL_SUFFIXES = {'.xlsx', '.xlsm'}

_SEPARATORS = re.compile(r'[_.\s]+')


def clean_column_names(columns: Iterable[str]) -> List[str]:
    """
    Normalize column names: lower-case, underscores, periods and
    whitespace removed.

    Parameters
    ----------
    columns : iterable of str
        Column names as they appear in the source file

    Returns
    -------
    list of str
        Normalized names, e.g. 'Core_ID' -> 'coreid', 'Total.C' -> 'totalc'
    """
    return [_SEPARATORS.sub('', str(col)).lower() for col in columns]


def read_table(path: Union[str, Path], sheet_name=0) -> pd.DataFrame:
    """
    Read a delimited text file or spreadsheet with every cell as text.

    Empty cells are kept as empty strings so that a blank text field
    can be told apart from an explicit missing token such as 'NA'.

    Parameters
    ----------
    path : str or Path
        Path to a .csv/.txt or .xlsx/.xlsm file
    sheet_name : str or int
        Worksheet to read from a spreadsheet (ignored for text files)

    Returns
    -------
    pd.DataFrame
        Table with the source column names and object (str) cells
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"No data file found at {path}")

    suffix = path.suffix.lower()
    if suffix in CSV_SUFFIXES:
        return pd.read_csv(path, dtype=str, keep_default_na=False)
    if suffix in EXCEL_SUFFIXES:
        return pd.read_excel(
            path,
            sheet_name=sheet_name,
            dtype=str,
            keep_default_na=False,
            engine='openpyxl'
        )
    raise MalformedInputError(f"Unsupported file type '{path.suffix}' for {path}")


def _coerce_column(values: pd.Series, dtype: str, field: str, source: str) -> pd.Series:
    """Convert a text column to the schema dtype."""
    raw = values.astype(object).where(values.notna(), None)
    text = raw.map(lambda v: None if v is None else str(v).strip())
    is_missing = text.isna() | text.isin(MISSING_TOKENS)

    if dtype == 'string':
        # Blank stays blank; only explicit tokens become missing
        return text.where(~is_missing, pd.NA).astype('string')

    candidates = text.where(~(is_missing | (text == '')), np.nan)
    numbers = pd.to_numeric(candidates, errors='coerce')
    bad = numbers.isna() & candidates.notna()

    if dtype == 'integer':
        bad = bad | (numbers.notna() & (numbers % 1 != 0))
    elif dtype != 'float':
        raise ValueError(f"Unknown schema dtype '{dtype}' for field '{field}'")

    if bad.any():
        examples = ', '.join(repr(v) for v in text[bad].unique()[:5])
        raise MalformedInputError(
            f"Column '{field}' in {source} has unparsable {dtype} values: {examples}"
        )

    if dtype == 'integer':
        return numbers.astype('Int64')
    return numbers.astype(float)


def apply_schema(
    df: pd.DataFrame,
    schema: Mapping,
    source: str = 'input'
) -> pd.DataFrame:
    """
    Map source columns onto schema fields and coerce their types.

    Each schema entry is ``field -> (aliases, dtype, required)``. The first
    alias present among the normalized source columns supplies the field.
    Optional fields absent from the source are filled with missing values.

    Parameters
    ----------
    df : pd.DataFrame
        Table as returned by read_table()
    schema : Mapping
        Field declarations, e.g. RAW_RECORD_SCHEMA
    source : str
        Name of the source used in error messages

    Returns
    -------
    pd.DataFrame
        Table with exactly the schema fields as columns, in schema order

    Raises
    ------
    MalformedInputError
        If a required column is absent or a numeric column has
        unparsable values
    """
    df = df.copy()
    df.columns = clean_column_names(df.columns)
    df = df.loc[:, ~df.columns.duplicated()]

    columns = {}
    missing_fields = []
    for field, (aliases, dtype, required) in schema.items():
        column = next((a for a in aliases if a in df.columns), None)
        if column is None:
            if required:
                missing_fields.append(field)
                continue
            values = pd.Series([None] * len(df), index=df.index, dtype=object)
        else:
            values = df[column]
        columns[field] = _coerce_column(values, dtype, field, source)

    if missing_fields:
        raise MalformedInputError(
            f"Required column(s) missing from {source}: {', '.join(missing_fields)}"
        )

    return pd.DataFrame(columns, index=df.index).reset_index(drop=True)


def load_raw_records(
    path: Union[str, Path],
    schema: Mapping = RAW_RECORD_SCHEMA,
    sheet_name=0
) -> pd.DataFrame:
    """
    Load raw replicate measurements (field samples and standards).

    Parameters
    ----------
    path : str or Path
        CSV or spreadsheet of analytical results, one row per replicate
    schema : Mapping
        Column schema, RAW_RECORD_SCHEMA by default
    sheet_name : str or int
        Worksheet to read when path is a spreadsheet

    Returns
    -------
    pd.DataFrame
        One row per replicate with the schema fields as columns
    """
    return apply_schema(read_table(path, sheet_name), schema, source=str(path))


def load_topography(path: Union[str, Path], sheet_name=0) -> pd.DataFrame:
    """Load per-plot topographic attributes (one row per plot)."""
    return apply_schema(read_table(path, sheet_name), TOPOGRAPHY_SCHEMA, source=str(path))


def load_fire_history(path: Union[str, Path], sheet_name=0) -> pd.DataFrame:
    """
    Load yearly burn-percentage records.

    Returns
    -------
    pd.DataFrame
        Columns plot_label, year, burn_percent; one row per plot-year
    """
    return apply_schema(read_table(path, sheet_name), FIRE_HISTORY_SCHEMA, source=str(path))
