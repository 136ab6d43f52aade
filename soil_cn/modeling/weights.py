"""
Observation weights derived from the empirical distribution of fire counts.
"""

import pandas as pd


def fire_count_weights(df: pd.DataFrame, column: str = 'n_fires') -> pd.Series:
    """
    Weight each row by how common its fire count is.

    weight(n) = p(n) / mean over rows of p(row.n), where p(n) is the
    proportion of rows with fire count n. The weights therefore average
    to 1 across rows. Rows with a missing fire count get a missing weight
    and do not enter the proportions.

    Parameters
    ----------
    df : pd.DataFrame
        Analysis table
    column : str
        Fire count column

    Returns
    -------
    pd.Series
        Float weights aligned to df.index, named 'weight'
    """
    values = df[column]
    valid = values[values.notna()]

    if valid.empty:
        return pd.Series(float('nan'), index=df.index, name='weight')

    proportions = valid.value_counts() / len(valid)
    row_proportions = valid.map(proportions).astype(float)
    weights = row_proportions / row_proportions.mean()

    return weights.reindex(df.index).astype(float).rename('weight')
