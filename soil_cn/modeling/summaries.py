"""
Exploratory summary tables over the prepared data.
"""

import numpy as np
import pandas as pd
from scipy import stats
from typing import Sequence


def treatment_summary(
    analysis: pd.DataFrame,
    value_columns: Sequence[str],
    by: Sequence[str] = ('harvest', 'firetreat')
) -> pd.DataFrame:
    """
    Mean and standard error of each value column per treatment group.

    Missing values are dropped per column, so n can differ between
    columns of the same group.

    Parameters
    ----------
    analysis : pd.DataFrame
        Analysis table
    value_columns : sequence of str
        Numeric columns to summarise, e.g. ['carbon_per_area', 'cn_ratio']
    by : sequence of str
        Grouping columns

    Returns
    -------
    pd.DataFrame
        Long table: grouping columns, variable, n, mean, sem
    """
    by = list(by)
    rows = []
    for keys, group in analysis.groupby(by, observed=True, sort=True):
        if not isinstance(keys, tuple):
            keys = (keys,)
        for col in value_columns:
            values = pd.to_numeric(group[col], errors='coerce').dropna().astype(float)
            row = dict(zip(by, keys))
            row.update({
                'variable': col,
                'n': len(values),
                'mean': values.mean() if len(values) else np.nan,
                'sem': float(stats.sem(values)) if len(values) > 1 else np.nan,
            })
            rows.append(row)

    return pd.DataFrame(rows, columns=by + ['variable', 'n', 'mean', 'sem'])


def standards_summary(standards: pd.DataFrame) -> pd.DataFrame:
    """
    Replicate statistics of calibration standards, one row per standard
    composition: n, mean and standard deviation of total_c and total_n.
    """
    grouped = standards.groupby('standard', sort=True)
    summary = grouped.agg(
        n=('total_c', 'size'),
        mean_c=('total_c', 'mean'),
        sd_c=('total_c', 'std'),
        mean_n=('total_n', 'mean'),
        sd_n=('total_n', 'std'),
    )
    return summary.reset_index()
