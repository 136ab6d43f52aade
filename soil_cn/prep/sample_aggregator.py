"""
Aggregate replicate measurements of field samples into one row per core.
"""

import warnings
import pandas as pd
from typing import List

from ..constants import AVERAGED_COLUMNS, REPLICATE_ONLY_COLUMNS
from ..errors import EmptyGroupError, InconsistentCoreDataError, MalformedInputError


def carried_columns(samples: pd.DataFrame) -> List[str]:
    """Per-core columns copied from a representative replicate row."""
    excluded = set(AVERAGED_COLUMNS) | set(REPLICATE_ONLY_COLUMNS) | {'core_id'}
    return [c for c in samples.columns if c not in excluded]


def find_divergent_cores(samples: pd.DataFrame, columns: List[str]) -> pd.DataFrame:
    """
    Find cores whose replicates disagree on any of the given columns.

    Returns
    -------
    pd.DataFrame
        Boolean frame indexed by core_id, one column per checked column,
        restricted to cores with at least one disagreement
    """
    if not columns:
        return pd.DataFrame(index=pd.Index([], name='core_id'))
    n_distinct = samples.groupby('core_id', sort=True)[columns].nunique(dropna=False)
    divergent = n_distinct > 1
    return divergent[divergent.any(axis=1)]


def aggregate_core_means(samples: pd.DataFrame, strict: bool = False) -> pd.DataFrame:
    """
    Average replicate carbon and nitrogen measurements per core.

    For each core_id:
    - replicate_count is the number of replicate rows
    - total_c and total_n are arithmetic means (a missing replicate makes
      the mean missing)
    - every other per-core column is taken from the first replicate row

    Per-core columns are expected to be identical across replicates. With
    strict=True a disagreement raises; otherwise the first row wins and a
    warning names the affected cores.

    Parameters
    ----------
    samples : pd.DataFrame
        Field-sample replicate rows (see split_standards_and_samples)
    strict : bool
        Whether to raise when replicates disagree on per-core columns

    Returns
    -------
    pd.DataFrame
        One row per core, sorted by core_id, with a replicate_count column

    Raises
    ------
    InconsistentCoreDataError
        In strict mode, if replicates of a core disagree
    MalformedInputError
        If a field-sample row has no core id
    """
    if samples['core_id'].isna().any():
        rows = samples.index[samples['core_id'].isna()].tolist()
        raise MalformedInputError(f"Field sample rows without a core id at positions {rows}")

    carried = carried_columns(samples)
    output_cols = ['core_id'] + carried + AVERAGED_COLUMNS + ['replicate_count']

    if samples.empty:
        return pd.DataFrame(columns=output_cols)

    divergent = find_divergent_cores(samples, carried)
    if not divergent.empty:
        columns = [c for c in divergent.columns if divergent[c].any()]
        if strict:
            raise InconsistentCoreDataError(divergent.index.tolist(), columns)
        warnings.warn(
            f"Replicates disagree on {', '.join(columns)} for core(s) "
            f"{', '.join(str(c) for c in divergent.index)}; using the first replicate row."
        )

    grouped = samples.groupby('core_id', sort=True)
    counts = grouped.size()
    if (counts == 0).any():
        raise EmptyGroupError(f"Cores with no replicates: {counts[counts == 0].index.tolist()}")

    means = grouped[AVERAGED_COLUMNS].agg(lambda s: s.mean(skipna=False))
    first_rows = samples.drop_duplicates('core_id', keep='first').set_index('core_id')[carried]

    result = first_rows.join(means, how='inner')
    result['replicate_count'] = counts
    result = result.sort_index().reset_index()

    return result[output_cols]
