"""
Model fitting workflow over the analysis table: fit weighted and
unweighted GLM/GAM variants, compare them by AIC and tabulate
coefficients. Estimation itself is delegated to statsmodels.
"""

import re
import numpy as np
import pandas as pd
import statsmodels.api as sm
import statsmodels.formula.api as smf
from statsmodels.gam.api import BSplines, GLMGam
from typing import Dict, List, Mapping, Optional, Sequence, Union

from .weights import fire_count_weights
from ..errors import InsufficientDataError

_IDENTIFIER = re.compile(r'[A-Za-z_][A-Za-z0-9_]*')

# Default basis size and degree for spline smooths
SPLINE_DF = 5
SPLINE_DEGREE = 3


def formula_columns(formula: str, data: pd.DataFrame) -> List[str]:
    """Columns of data referenced by name in a model formula."""
    names = _IDENTIFIER.findall(formula)
    seen = []
    for name in names:
        if name in data.columns and name not in seen:
            seen.append(name)
    return seen


def complete_cases(data: pd.DataFrame, columns: Sequence[str]) -> pd.DataFrame:
    """
    Rows with no missing values in columns, with unused categorical levels
    dropped so they do not enter the design matrix. Nullable numeric
    columns (Int64, Float64) become plain floats so formulas treat them
    as numeric.
    """
    complete = data.dropna(subset=list(columns)).copy()
    for col in columns:
        dtype = complete[col].dtype
        if isinstance(dtype, pd.CategoricalDtype):
            complete[col] = complete[col].cat.remove_unused_categories()
        elif (pd.api.types.is_extension_array_dtype(dtype)
              and pd.api.types.is_numeric_dtype(dtype)
              and not pd.api.types.is_bool_dtype(dtype)):
            complete[col] = complete[col].astype(float)
    return complete


def fit_model(
    data: pd.DataFrame,
    formula: str,
    smooth: Optional[Sequence[str]] = None,
    weights: Optional[Union[str, pd.Series]] = None,
    spline_df: int = SPLINE_DF,
    degree: int = SPLINE_DEGREE,
    alpha: float = 0.0,
    family=None,
    extra_columns: Sequence[str] = ()
):
    """
    Fit a Gaussian GLM, or a GAM when smooth terms are given.

    Rows missing any variable used by the model (formula variables,
    smooth variables, weights and extra_columns) are dropped first.

    Parameters
    ----------
    data : pd.DataFrame
        Analysis table
    formula : str
        Parametric part of the model, e.g. 'carbon_per_area ~ harvest + firetreat'
    smooth : sequence of str, optional
        Columns to enter as penalized B-spline smooths
    weights : str or pd.Series, optional
        Prior (variance) weights, as a column name or a Series aligned to data
    spline_df : int
        Basis dimension per smooth
    degree : int
        Spline degree
    alpha : float
        Smoothing penalty weight for every smooth
    family : statsmodels family, optional
        Defaults to Gaussian
    extra_columns : sequence of str
        Further columns that must be complete (keeps row sets comparable
        across model variants)

    Returns
    -------
    statsmodels results
        GLMResults or GLMGamResults
    """
    smooth = list(smooth or [])
    family = family if family is not None else sm.families.Gaussian()

    data = data.copy()
    weight_col = None
    if weights is not None:
        weight_col = '_weight'
        data[weight_col] = data[weights] if isinstance(weights, str) else weights

    used = formula_columns(formula, data) + smooth + list(extra_columns)
    if weight_col is not None:
        used.append(weight_col)
    used = list(dict.fromkeys(used))
    complete = complete_cases(data, used)

    n_min = len(used) + 2 + spline_df * len(smooth)
    if len(complete) < n_min:
        raise InsufficientDataError(
            f"Only {len(complete)} complete rows for '{formula}' "
            f"(need at least {n_min})"
        )

    kwargs = {}
    if weight_col is not None:
        kwargs['var_weights'] = complete[weight_col].to_numpy(dtype=float)

    if not smooth:
        return smf.glm(formula, data=complete, family=family, **kwargs).fit()

    splines = BSplines(
        complete[smooth].astype(float),
        df=[spline_df] * len(smooth),
        degree=[degree] * len(smooth)
    )
    model = GLMGam.from_formula(
        formula,
        data=complete,
        smoother=splines,
        alpha=[alpha] * len(smooth),
        family=family,
        **kwargs
    )
    return model.fit()


def fit_weighted_variants(
    data: pd.DataFrame,
    formula: str,
    smooth: Optional[Sequence[str]] = None,
    weight_column: str = 'n_fires',
    **kwargs
) -> Dict[str, object]:
    """
    Fit the same model unweighted and weighted by fire-count frequency.

    Both variants use the same complete rows.

    Returns
    -------
    dict
        {'unweighted': results, 'weighted': results}
    """
    weights = fire_count_weights(data, weight_column)
    return {
        'unweighted': fit_model(data, formula, smooth, extra_columns=[weight_column], **kwargs),
        'weighted': fit_model(data, formula, smooth, weights=weights,
                              extra_columns=[weight_column], **kwargs),
    }


def fit_candidate_models(
    data: pd.DataFrame,
    candidates: Mapping[str, Mapping],
    weight_column: Optional[str] = 'n_fires'
) -> Dict[str, object]:
    """
    Fit a set of named candidate models.

    Parameters
    ----------
    data : pd.DataFrame
        Analysis table
    candidates : Mapping
        name -> dict of fit_model arguments ('formula' required, 'smooth' etc.)
    weight_column : str, optional
        If given, each candidate is fitted unweighted and weighted and the
        results are keyed '<name>_unweighted' / '<name>_weighted'

    Returns
    -------
    dict
        Fitted results keyed by model name
    """
    fits = {}
    for name, options in candidates.items():
        options = dict(options)
        formula = options.pop('formula')
        if weight_column is None:
            fits[name] = fit_model(data, formula, **options)
            continue
        variants = fit_weighted_variants(data, formula, weight_column=weight_column, **options)
        for variant, result in variants.items():
            fits[f"{name}_{variant}"] = result
    return fits


def compare_by_aic(fits: Mapping[str, object]) -> pd.DataFrame:
    """
    Tabulate AIC for fitted models, best first.

    Returns
    -------
    pd.DataFrame
        Columns model, aic, delta_aic, n_obs
    """
    rows = [
        {'model': name, 'aic': float(result.aic), 'n_obs': int(result.nobs)}
        for name, result in fits.items()
    ]
    table = pd.DataFrame(rows, columns=['model', 'aic', 'n_obs'])
    if table.empty:
        table['delta_aic'] = pd.Series(dtype=float)
        return table[['model', 'aic', 'delta_aic', 'n_obs']]

    table = table.sort_values('aic').reset_index(drop=True)
    table['delta_aic'] = table['aic'] - table['aic'].min()
    return table[['model', 'aic', 'delta_aic', 'n_obs']]


def summarise_fit(result) -> pd.DataFrame:
    """Coefficient table: term, estimate, std_error, p_value."""
    return pd.DataFrame({
        'term': list(result.params.index),
        'estimate': np.asarray(result.params, dtype=float),
        'std_error': np.asarray(result.bse, dtype=float),
        'p_value': np.asarray(result.pvalues, dtype=float),
    })
