"""
Modeling workflow over the prepared analysis table.
"""

from .weights import fire_count_weights

from .gam_workflow import (
    fit_model,
    fit_weighted_variants,
    fit_candidate_models,
    compare_by_aic,
    summarise_fit,
)

from .summaries import (
    treatment_summary,
    standards_summary,
)
