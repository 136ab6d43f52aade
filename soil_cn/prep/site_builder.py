"""
Build the one-row-per-plot site table from field samples and
topographic attributes.
"""

import warnings
import numpy as np
import pandas as pd
from typing import Mapping, Optional, Tuple

from ..constants import (
    HARVEST_CODES,
    FIRE_TREATMENT_CODES,
    SITE_COLUMNS,
    TOPOGRAPHY_COLUMNS,
)
from ..errors import InconsistentSiteDataError, UnknownCategoryCodeError


def decode_treatment_code(
    code: str,
    harvest_codes: Mapping[str, str] = HARVEST_CODES,
    fire_treatment_codes: Mapping[str, str] = FIRE_TREATMENT_CODES
) -> Tuple[str, str]:
    """
    Decode a two-character treatment code.

    The first character is the harvest history, the second the fire
    treatment: 'LR' -> ('harvested', 'regular'), 'UN' -> ('unharvested', 'none').

    Parameters
    ----------
    code : str
        Treatment code from the field data
    harvest_codes : Mapping
        Lookup for the first character
    fire_treatment_codes : Mapping
        Lookup for the second character

    Returns
    -------
    tuple of str
        (harvest, firetreat)

    Raises
    ------
    UnknownCategoryCodeError
        If the code is missing, too short, or a character is not in its lookup
    """
    if pd.isna(code):
        raise UnknownCategoryCodeError(code, "Missing treatment code")
    text = str(code).strip()
    if len(text) < 2:
        raise UnknownCategoryCodeError(code)

    harvest = harvest_codes.get(text[0])
    firetreat = fire_treatment_codes.get(text[1])
    if harvest is None or firetreat is None:
        raise UnknownCategoryCodeError(code)

    return harvest, firetreat


def northness(aspect):
    """
    Northness index of an aspect in degrees: sin(pi * aspect / 180).

    Zero at 0 and 180 degrees, one at 90. The divisor is 180, not the 360
    sometimes written for this index: only the 180 form meets those three
    values. Works on scalars, arrays and Series; missing aspects give NaN.
    """
    if np.isscalar(aspect) or aspect is None or aspect is pd.NA:
        if pd.isna(aspect):
            return np.nan
        return float(np.sin(np.pi * float(aspect) / 180.0))
    values = pd.to_numeric(pd.Series(aspect), errors='coerce').astype(float)
    result = np.sin(np.pi * values / 180.0)
    if isinstance(aspect, pd.Series):
        result.index = aspect.index
        return result
    return result.to_numpy()


def extract_site_table(samples: pd.DataFrame) -> pd.DataFrame:
    """
    Select the distinct site-level values of each plot.

    Parameters
    ----------
    samples : pd.DataFrame
        Field-sample rows carrying plot, treatment, time_since_fire, n_fires

    Returns
    -------
    pd.DataFrame
        One row per plot, sorted by plot

    Raises
    ------
    InconsistentSiteDataError
        If any plot has more than one distinct set of site-level values
    """
    sites = samples[SITE_COLUMNS].drop_duplicates()

    duplicated = sites['plot'].duplicated(keep=False)
    if duplicated.any():
        raise InconsistentSiteDataError(sites.loc[duplicated, 'plot'].unique().tolist())

    return sites.sort_values('plot').reset_index(drop=True)


def add_treatment_categories(
    sites: pd.DataFrame,
    harvest_codes: Mapping[str, str] = HARVEST_CODES,
    fire_treatment_codes: Mapping[str, str] = FIRE_TREATMENT_CODES
) -> pd.DataFrame:
    """
    Add categorical 'harvest' and 'firetreat' columns decoded from the
    treatment code. Category sets are the lookup values, so they survive
    a round trip even when a level is absent from the data.
    """
    sites = sites.copy()
    decoded = [
        decode_treatment_code(code, harvest_codes, fire_treatment_codes)
        for code in sites['treatment']
    ]
    harvest = [h for h, _ in decoded]
    firetreat = [f for _, f in decoded]

    sites['harvest'] = pd.Categorical(harvest, categories=list(harvest_codes.values()))
    sites['firetreat'] = pd.Categorical(firetreat, categories=list(fire_treatment_codes.values()))
    return sites


def add_topography(sites: pd.DataFrame, topography: pd.DataFrame) -> pd.DataFrame:
    """
    Left-join topographic attributes onto the site table and derive northness.

    Plots without a topographic row keep missing values (a warning lists
    them). A plot appearing twice in the topographic table is an error.

    Parameters
    ----------
    sites : pd.DataFrame
        One row per plot
    topography : pd.DataFrame
        Table with a plot column and any of the topographic columns

    Returns
    -------
    pd.DataFrame
        Site table with topographic columns and northness
    """
    topo_cols = [c for c in TOPOGRAPHY_COLUMNS if c in topography.columns]
    topo = topography[['plot'] + topo_cols].copy()

    duplicated = topo['plot'].duplicated(keep=False)
    if duplicated.any():
        raise InconsistentSiteDataError(
            topo.loc[duplicated, 'plot'].unique().tolist(),
            "Topographic table has more than one row for plot(s): "
            + ", ".join(str(p) for p in sorted(topo.loc[duplicated, 'plot'].unique()))
        )

    existing = [c for c in TOPOGRAPHY_COLUMNS + ['northness'] if c in sites.columns]
    merged = sites.drop(columns=existing).merge(topo, on='plot', how='left', validate='one_to_one')

    unmatched = ~merged['plot'].isin(topo['plot'])
    if unmatched.any():
        warnings.warn(
            "No topographic data for plot(s) "
            f"{', '.join(str(p) for p in merged.loc[unmatched, 'plot'])}; "
            "their topographic fields are left missing."
        )

    for col in TOPOGRAPHY_COLUMNS:
        if col not in merged.columns:
            merged[col] = np.nan

    merged['northness'] = northness(merged['aspect'])
    return merged


def build_site_table(
    samples: pd.DataFrame,
    topography: Optional[pd.DataFrame] = None,
    harvest_codes: Mapping[str, str] = HARVEST_CODES,
    fire_treatment_codes: Mapping[str, str] = FIRE_TREATMENT_CODES
) -> pd.DataFrame:
    """
    Build the site table: distinct site values, decoded treatment
    categories, and (when given) joined topography with northness.
    """
    sites = extract_site_table(samples)
    sites = add_treatment_categories(sites, harvest_codes, fire_treatment_codes)
    if topography is not None:
        sites = add_topography(sites, topography)
    return sites
