"""
Derived per-core metrics: carbon and nitrogen stocks per unit area and
the C:N ratio.

With core depth in cm, bulk density in g/cm^3 and concentrations in
percent, depth x density x concentration is a stock in Mg/ha (tonnes per
hectare) with no further conversion factor.
"""

import numpy as np
import pandas as pd
from typing import Dict

STOCK_INPUTS = ['core_depth', 'bulk_density', 'total_c', 'total_n']


def _as_float(values):
    # pd.NA, None and text become NaN rather than raising
    if isinstance(values, pd.Series):
        return pd.to_numeric(values, errors='coerce').astype(float).to_numpy()
    flat = pd.Series(np.ravel(np.asarray(values, dtype=object)), dtype=object)
    converted = pd.to_numeric(flat, errors='coerce').astype(float).to_numpy()
    return converted.reshape(np.shape(values))


def safe_ratio(numerator, denominator):
    """
    Elementwise numerator / denominator with NaN where the denominator is
    zero or either side is missing (never +/-inf, never an exception).
    """
    num = _as_float(numerator)
    den = _as_float(denominator)
    with np.errstate(divide='ignore', invalid='ignore'):
        ratio = np.where((den != 0) & ~np.isnan(den) & ~np.isnan(num), num / den, np.nan)
    if ratio.ndim == 0:
        return float(ratio)
    return ratio


def carbon_nitrogen_per_area(
    core_depth,
    bulk_density,
    total_c,
    total_n
) -> Dict[str, np.ndarray]:
    """
    Compute carbon and nitrogen per area and their ratio.

    Parameters
    ----------
    core_depth : float or array-like
        Core depth (cm)
    bulk_density : float or array-like
        Bulk density (g/cm^3)
    total_c : float or array-like
        Total carbon (%)
    total_n : float or array-like
        Total nitrogen (%)

    Returns
    -------
    dict
        'carbon_per_area', 'nitrogen_per_area' (Mg/ha) and 'cn_ratio'.
        Missing inputs propagate as NaN; a zero nitrogen stock gives a
        NaN ratio.
    """
    depth = _as_float(core_depth)
    density = _as_float(bulk_density)
    soil_mass = depth * density

    carbon = soil_mass * _as_float(total_c)
    nitrogen = soil_mass * _as_float(total_n)

    result = {
        'carbon_per_area': carbon,
        'nitrogen_per_area': nitrogen,
        'cn_ratio': safe_ratio(carbon, nitrogen),
    }
    if np.ndim(carbon) == 0:
        result = {k: float(v) for k, v in result.items()}
    return result


def derive_core_metrics(core_means: pd.DataFrame) -> pd.DataFrame:
    """
    Add carbon_per_area, nitrogen_per_area and cn_ratio columns to the
    per-core table. Rows with missing or zero inputs get NaN values;
    downstream model fitting drops incomplete rows itself.
    """
    core_means = core_means.copy()
    metrics = carbon_nitrogen_per_area(
        core_means['core_depth'],
        core_means['bulk_density'],
        core_means['total_c'],
        core_means['total_n'],
    )
    for col, values in metrics.items():
        core_means[col] = values
    return core_means
