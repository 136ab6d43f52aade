"""
Main workflow orchestration for preparing the soil carbon/nitrogen
analysis tables from raw core measurements, topography and fire history.
"""

import warnings
import pandas as pd
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from .data_loader import (
    load_raw_records,
    load_topography,
    load_fire_history,
)
from .classifier import split_standards_and_samples
from .sample_aggregator import aggregate_core_means
from .site_builder import build_site_table
from .fire_history import build_fire_tables
from .metrics import derive_core_metrics
from .table_store import TableStore
from ..constants import (
    BURN_THRESHOLD,
    FIRE_TREATMENT_CODES,
    HARVEST_CODES,
    TABLE_KEYS,
)
from ..errors import MalformedInputError


def build_analysis_table(
    core_metrics: pd.DataFrame,
    sites: pd.DataFrame,
    severity: Optional[pd.DataFrame] = None
) -> pd.DataFrame:
    """
    Join per-core metrics with site attributes and, optionally, the fire
    severity index.

    Parameters
    ----------
    core_metrics : pd.DataFrame
        Per-core table with derived metrics (one row per core)
    sites : pd.DataFrame
        Site table (one row per plot)
    severity : pd.DataFrame, optional
        Per-plot fire severity index (plot, severity)

    Returns
    -------
    pd.DataFrame
        One row per core with site columns appended. Cores whose plot has
        no site row or severity keep missing values.
    """
    # Site-level fields also ride along on the core rows; take them from the site table
    site_cols = [c for c in sites.columns if c != 'plot']
    cores = core_metrics.drop(columns=[c for c in site_cols if c in core_metrics.columns])

    analysis = cores.merge(sites, on='plot', how='left', validate='many_to_one')

    if severity is not None:
        analysis = analysis.merge(
            severity[['plot', 'severity']], on='plot', how='left', validate='many_to_one'
        )

    return analysis


def prepare_tables(
    raw_path: Union[str, Path],
    topography_path: Optional[Union[str, Path]] = None,
    fire_history_path: Optional[Union[str, Path]] = None,
    store: Optional[TableStore] = None,
    strict_replicates: bool = False,
    allow_unclassified: bool = False,
    burn_threshold: float = BURN_THRESHOLD,
    harvest_codes: Mapping[str, str] = HARVEST_CODES,
    fire_treatment_codes: Mapping[str, str] = FIRE_TREATMENT_CODES,
    verbose: bool = True
) -> Dict[str, Any]:
    """
    Run the full data preparation pipeline.

    Steps:
    1. Load raw replicate records
    2. Split standards from field samples
    3. Average replicates per core
    4. Build the site table (with topography when given)
    5. Build fire-year and fire severity tables (when given)
    6. Derive per-area carbon/nitrogen metrics
    7. Join everything into the analysis table
    8. Persist all tables (only once every table has been built)

    Parameters
    ----------
    raw_path : str or Path
        CSV or spreadsheet of raw replicate measurements
    topography_path : str or Path, optional
        Per-plot topographic attributes
    fire_history_path : str or Path, optional
        Yearly burn percentages per plot
    store : TableStore, optional
        Where to persist the tables. Nothing is written if None.
    strict_replicates : bool
        Raise instead of warn when replicates disagree on per-core values
    allow_unclassified : bool
        Drop rows with a missing standard field (with a warning) instead
        of failing
    burn_threshold : float
        Burn percentage at or above which a plot-year counts as burnt
    harvest_codes, fire_treatment_codes : Mapping
        Treatment code lookups
    verbose : bool
        Whether to print progress messages

    Returns
    -------
    dict
        Tables under 'standards', 'sample_means', 'sites', 'fires',
        'fire_severity', 'analysis' ('fires' and 'fire_severity' are None
        without a fire history), plus a 'metadata' dict.
    """
    # Step 1: Load raw records
    if verbose:
        print(f"  Loading raw records from {raw_path}...")
    raw = load_raw_records(raw_path)

    # Step 2: Classify rows
    if verbose:
        print("  Separating standards from field samples...")
    standards, samples, unclassified = split_standards_and_samples(raw)
    if not unclassified.empty:
        seq = unclassified['seq'].tolist() if 'seq' in unclassified.columns else []
        message = (f"{len(unclassified)} row(s) have no standard field and cannot be "
                   f"classified (seq: {seq})")
        if not allow_unclassified:
            raise MalformedInputError(message)
        warnings.warn(message + "; dropping them.")

    # Step 3: Average replicates per core
    if verbose:
        print(f"  Averaging {len(samples)} replicate rows per core...")
    sample_means = aggregate_core_means(samples, strict=strict_replicates)

    # Step 4: Site table
    topography = None
    if topography_path is not None:
        if verbose:
            print(f"  Loading topography from {topography_path}...")
        topography = load_topography(topography_path)
    if verbose:
        print("  Building site table...")
    sites = build_site_table(samples, topography, harvest_codes, fire_treatment_codes)

    # Step 5: Fire history
    fires = None
    fire_severity = None
    if fire_history_path is not None:
        if verbose:
            print(f"  Loading fire history from {fire_history_path}...")
        fire_history = load_fire_history(fire_history_path)
        fires, fire_severity = build_fire_tables(
            fire_history, threshold=burn_threshold, plots=sites['plot']
        )

    # Step 6: Derived metrics
    if verbose:
        print("  Deriving carbon and nitrogen per area...")
    core_metrics = derive_core_metrics(sample_means)

    # Step 7: Analysis table
    analysis = build_analysis_table(core_metrics, sites, fire_severity)

    tables = {
        'standards': standards,
        'sample_means': sample_means,
        'sites': sites,
        'fires': fires,
        'fire_severity': fire_severity,
        'analysis': analysis,
    }

    # Step 8: Persist. Tables absent from this run are removed from the store
    if store is not None:
        if verbose:
            print(f"  Saving tables to {store.root_dir}...")
        store.save_all({TABLE_KEYS[name]: table for name, table in tables.items()})

    if verbose:
        print(f"  Done! {len(sample_means)} cores across {len(sites)} plots "
              f"({len(standards)} standard rows set aside).")

    output = dict(tables)
    output['metadata'] = {
        'raw_path': str(raw_path),
        'n_raw_rows': len(raw),
        'n_standard_rows': len(standards),
        'n_sample_rows': len(samples),
        'n_unclassified_rows': len(unclassified),
        'n_cores': len(sample_means),
        'n_plots': len(sites),
        'has_topography': topography is not None,
        'has_fire_history': fires is not None,
        'burn_threshold': burn_threshold,
        'strict_replicates': strict_replicates,
    }
    return output


def load_analysis_table(store: TableStore, key: str = TABLE_KEYS['analysis']) -> pd.DataFrame:
    """Load a previously persisted analysis table."""
    return store.load(key)
