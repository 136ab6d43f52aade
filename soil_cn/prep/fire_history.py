"""
Fire history functions: plot numbers from labels, yearly burnt flags,
and per-plot fire exposure measures (severity index, fire counts,
time since fire).
"""

import re
import pandas as pd
from typing import Iterable, Optional, Tuple

from ..constants import BURN_THRESHOLD
from ..errors import UnparsablePlotIdError

_TRAILING_DIGITS = re.compile(r'(\d+)\s*$')


def extract_plot_number(label) -> int:
    """
    Extract the numeric plot id from the trailing digits of a plot label.

    Parameters
    ----------
    label : str
        Composite plot label, e.g. 'Plot_014'

    Returns
    -------
    int
        The plot number, e.g. 14

    Raises
    ------
    UnparsablePlotIdError
        If the label is missing or does not end in digits
    """
    if pd.isna(label):
        raise UnparsablePlotIdError(label)
    match = _TRAILING_DIGITS.search(str(label))
    if match is None:
        raise UnparsablePlotIdError(label)
    return int(match.group(1))


def add_plot_numbers(fire_years: pd.DataFrame) -> pd.DataFrame:
    """Return a copy of fire_years with an integer 'plot' column parsed from 'plot_label'."""
    fire_years = fire_years.copy()
    fire_years['plot'] = pd.array(
        [extract_plot_number(label) for label in fire_years['plot_label']],
        dtype='Int64'
    )
    return fire_years


def add_burnt_flag(fire_years: pd.DataFrame, threshold: float = BURN_THRESHOLD) -> pd.DataFrame:
    """
    Flag each plot-year as burnt when burn_percent >= threshold.

    A missing burn percentage gives a missing flag, not False.
    """
    fire_years = fire_years.copy()
    percent = fire_years['burn_percent'].astype('Float64')
    fire_years['burnt'] = (percent >= threshold).astype('boolean')
    return fire_years


def fire_severity_index(
    fire_years: pd.DataFrame,
    plots: Optional[Iterable] = None
) -> pd.DataFrame:
    """
    Sum yearly burn proportions per plot into a fire severity index.

    severity = sum over the recorded years of burn_percent / 100. Only
    years present in the records contribute; a plot with a sparse history
    is not treated as having had fire-free years in the gaps.

    Parameters
    ----------
    fire_years : pd.DataFrame
        Rows with plot and burn_percent columns
    plots : iterable, optional
        Plots to report. Plots with no fire records get severity 0.0.
        If None, only plots present in fire_years are reported.

    Returns
    -------
    pd.DataFrame
        Columns plot and severity, sorted by plot
    """
    proportions = fire_years['burn_percent'].astype(float) / 100.0
    severity = proportions.groupby(fire_years['plot']).agg(lambda s: s.sum(skipna=False))
    severity = severity.astype(float)
    severity.index = pd.Index(severity.index, name='plot').astype('Int64')

    if plots is not None:
        wanted = sorted({int(p) for p in plots if not pd.isna(p)})
        index = pd.Index(pd.array(wanted, dtype='Int64'), name='plot')
        severity = severity.reindex(index, fill_value=0.0)

    result = severity.rename('severity').rename_axis('plot').reset_index()
    result['plot'] = result['plot'].astype('Int64')
    return result.sort_values('plot').reset_index(drop=True)


def count_fires_since(fire_years: pd.DataFrame, since_year: int) -> pd.DataFrame:
    """
    Count burnt years per plot from since_year onwards.

    Returns
    -------
    pd.DataFrame
        Columns plot and n_fires_since for every plot in fire_years
    """
    recent = fire_years['year'] >= since_year
    burnt = fire_years['burnt'].fillna(False).astype(bool) & recent.fillna(False).astype(bool)
    counts = burnt.groupby(fire_years['plot']).sum().astype('Int64')
    return counts.rename('n_fires_since').rename_axis('plot').reset_index()


def years_since_last_fire(fire_years: pd.DataFrame, as_of_year: int) -> pd.DataFrame:
    """
    Time since the most recent burnt year, as of a given year.

    Burnt years after as_of_year are ignored. Plots that never burnt
    (within the record) have missing last_burnt_year and years_since_fire.

    Returns
    -------
    pd.DataFrame
        Columns plot, last_burnt_year, years_since_fire
    """
    in_range = fire_years['year'] <= as_of_year
    mask = fire_years['burnt'].fillna(False).astype(bool) & in_range.fillna(False).astype(bool)
    last = fire_years.loc[mask].groupby('plot')['year'].max()

    plots = pd.Index(fire_years['plot'].dropna().unique(), name='plot').sort_values()
    last = last.reindex(plots).astype('Int64')

    result = last.rename('last_burnt_year').reset_index()
    result['years_since_fire'] = (as_of_year - result['last_burnt_year']).astype('Int64')
    return result


def summarise_fire_history(
    fire_years: pd.DataFrame,
    since_year: int,
    as_of_year: int
) -> pd.DataFrame:
    """
    Per-plot fire exposure summary: fire count since since_year, last
    burnt year, years since fire and severity index.
    """
    counts = count_fires_since(fire_years, since_year)
    last = years_since_last_fire(fire_years, as_of_year)
    severity = fire_severity_index(fire_years)

    summary = counts.merge(last, on='plot', how='outer')
    summary = summary.merge(severity, on='plot', how='outer')
    return summary.sort_values('plot').reset_index(drop=True)


def build_fire_tables(
    fire_history: pd.DataFrame,
    threshold: float = BURN_THRESHOLD,
    plots: Optional[Iterable] = None
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    Build the plot-year fire table and the per-plot severity index.

    Parameters
    ----------
    fire_history : pd.DataFrame
        Loaded fire history (plot_label, year, burn_percent)
    threshold : float
        Burn percentage at or above which a plot-year counts as burnt
    plots : iterable, optional
        Plots to include in the severity index (missing ones get 0.0)

    Returns
    -------
    tuple of pd.DataFrame
        (fire_years, severity)
    """
    fire_years = add_plot_numbers(fire_history)
    fire_years = add_burnt_flag(fire_years, threshold)
    fire_years = fire_years.sort_values(['plot', 'year']).reset_index(drop=True)

    severity = fire_severity_index(fire_years, plots)
    return fire_years, severity
