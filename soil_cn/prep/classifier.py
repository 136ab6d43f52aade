"""
Split raw replicate rows into calibration standards and field samples.
"""

import pandas as pd
from typing import Tuple

from ..constants import STANDARD_COLUMNS

STANDARD = 'standard'
SAMPLE = 'sample'
UNCLASSIFIABLE = 'unclassifiable'

RECORD_CLASSES = [STANDARD, SAMPLE, UNCLASSIFIABLE]


def classify_record(value) -> str:
    """
    Classify a row from its standard-composition field.

    Rules:
    - 'sample': the field is blank after trimming whitespace
    - 'standard': the field holds any other text
    - 'unclassifiable': the field is absent (missing)

    Parameters
    ----------
    value : str or missing
        The standard-composition value of the row

    Returns
    -------
    str
        One of 'standard', 'sample', 'unclassifiable'
    """
    if pd.isna(value):
        return UNCLASSIFIABLE
    if str(value).strip() == '':
        return SAMPLE
    return STANDARD


def add_record_class_column(raw: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of raw with a categorical 'record_class' column."""
    raw = raw.copy()
    classes = raw['standard'].map(classify_record)
    raw['record_class'] = pd.Categorical(classes, categories=RECORD_CLASSES)
    return raw


def split_standards_and_samples(
    raw: pd.DataFrame
) -> Tuple[pd.DataFrame, pd.DataFrame, pd.DataFrame]:
    """
    Partition raw rows into standards, field samples and unclassifiable rows.

    Parameters
    ----------
    raw : pd.DataFrame
        Raw replicate rows with a 'standard' column

    Returns
    -------
    tuple of pd.DataFrame
        (standards, samples, unclassified). Standards keep only the
        standard-record columns; samples and unclassified keep all raw
        columns plus 'record_class'.
    """
    classified = add_record_class_column(raw)
    record_class = classified['record_class']

    standard_cols = [c for c in STANDARD_COLUMNS if c in classified.columns]
    standards = classified.loc[record_class == STANDARD, standard_cols].reset_index(drop=True)
    samples = classified[record_class == SAMPLE].reset_index(drop=True)
    unclassified = classified[record_class == UNCLASSIFIABLE].reset_index(drop=True)

    return standards, samples, unclassified
