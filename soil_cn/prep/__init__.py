"""
Data preparation pipeline: raw records to analysis-ready tables.
"""

from .data_loader import (
    clean_column_names,
    read_table,
    apply_schema,
    load_raw_records,
    load_topography,
    load_fire_history,
)

from .classifier import (
    classify_record,
    add_record_class_column,
    split_standards_and_samples,
)

from .sample_aggregator import aggregate_core_means

from .site_builder import (
    decode_treatment_code,
    northness,
    extract_site_table,
    add_treatment_categories,
    add_topography,
    build_site_table,
)

from .fire_history import (
    extract_plot_number,
    add_plot_numbers,
    add_burnt_flag,
    fire_severity_index,
    count_fires_since,
    years_since_last_fire,
    summarise_fire_history,
    build_fire_tables,
)

from .metrics import (
    carbon_nitrogen_per_area,
    derive_core_metrics,
)

from .table_store import TableStore

from .main import (
    build_analysis_table,
    prepare_tables,
    load_analysis_table,
)
