"""
Soil carbon/nitrogen study toolkit.

This package prepares analysis-ready tables from raw soil core
measurements, site treatment records, topography and yearly fire
history, and fits the comparative GLM/GAM models used in the reports.
"""

# Re-export constants
from .constants import (
    HARVEST_CODES,
    FIRE_TREATMENT_CODES,
    BURN_THRESHOLD,
    RAW_RECORD_SCHEMA,
    TOPOGRAPHY_SCHEMA,
    FIRE_HISTORY_SCHEMA,
    TABLE_KEYS,
)

from .errors import (
    SoilCNError,
    MalformedInputError,
    InconsistentSiteDataError,
    InconsistentCoreDataError,
    UnknownCategoryCodeError,
    UnparsablePlotIdError,
    TableNotFoundError,
    EmptyGroupError,
    InsufficientDataError,
)

# Re-export preparation functions for convenience
from .prep import (
    # Data loading
    clean_column_names,
    load_raw_records,
    load_topography,
    load_fire_history,
    # Classification and aggregation
    split_standards_and_samples,
    aggregate_core_means,
    # Sites
    decode_treatment_code,
    northness,
    build_site_table,
    # Fire history
    extract_plot_number,
    build_fire_tables,
    fire_severity_index,
    summarise_fire_history,
    # Metrics
    derive_core_metrics,
    # Storage and workflow
    TableStore,
    build_analysis_table,
    prepare_tables,
    load_analysis_table,
)

from .modeling import (
    fire_count_weights,
    fit_model,
    fit_weighted_variants,
    fit_candidate_models,
    compare_by_aic,
    summarise_fit,
    treatment_summary,
    standards_summary,
)

__version__ = "0.1.0"
