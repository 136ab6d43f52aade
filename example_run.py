#!/usr/bin/env python3
"""
Example script demonstrating how to run the soil C/N preparation and
modeling workflow.

This script expects a data directory containing:
1. raw_cn.csv (or .xlsx) - replicate C/N measurements, standards included
2. topography.csv - per-plot topographic attributes
3. fire_history.csv - yearly burn percentages per plot (optional)

It produces the prepared tables (saved to a table store and as CSVs) and
prints an AIC comparison of weighted and unweighted models.
"""

import sys
from pathlib import Path

from soil_cn import (
    TableStore,
    prepare_tables,
    fit_candidate_models,
    compare_by_aic,
    summarise_fit,
    treatment_summary,
)
from soil_cn.errors import InsufficientDataError

CANDIDATE_MODELS = {
    'treatment': {'formula': 'carbon_per_area ~ harvest + firetreat'},
    'fire_count': {'formula': 'carbon_per_area ~ harvest + n_fires'},
    'tsf_smooth': {'formula': 'carbon_per_area ~ harvest', 'smooth': ['time_since_fire']},
}


def find_input(data_dir: Path, stem: str):
    """Return the first existing stem.csv / stem.xlsx in data_dir, or None."""
    for suffix in ('.csv', '.xlsx'):
        path = data_dir / f"{stem}{suffix}"
        if path.exists():
            return path
    return None


def process(data_dir: str, output_dir: str = "./output") -> dict:
    """
    Prepare the analysis tables and fit the candidate models.

    Parameters
    ----------
    data_dir : str
        Directory with the input files
    output_dir : str
        Directory to save output tables

    Returns
    -------
    dict
        Output of prepare_tables() plus 'aic' and 'fits'
    """
    data_path = Path(data_dir)
    output_path = Path(output_dir)
    csvs_output_dir = output_path / "csvs"
    csvs_output_dir.mkdir(parents=True, exist_ok=True)

    raw_path = find_input(data_path, 'raw_cn')
    if raw_path is None:
        raise FileNotFoundError(f"No raw_cn.csv or raw_cn.xlsx in {data_path}")

    print(f"\n{'='*60}")
    print(f"Preparing tables from: {data_path}")
    print(f"{'='*60}\n")

    store = TableStore(output_path / "tables")
    output = prepare_tables(
        raw_path=raw_path,
        topography_path=find_input(data_path, 'topography'),
        fire_history_path=find_input(data_path, 'fire_history'),
        store=store,
        verbose=True
    )

    for key in ('sample_means', 'sites', 'analysis'):
        filepath = csvs_output_dir / f"{key}.csv"
        output[key].to_csv(filepath, index=False)
        print(f"CSV saved: {filepath}")

    print(f"\n{'='*60}")
    print("Summary:")
    print(f"{'='*60}")
    meta = output['metadata']
    print(f"  Raw rows: {meta['n_raw_rows']} ({meta['n_standard_rows']} standards)")
    print(f"  Cores: {meta['n_cores']}")
    print(f"  Plots: {meta['n_plots']}")

    analysis = output['analysis']
    print("\nCarbon and nitrogen per area by treatment:")
    print(treatment_summary(analysis, ['carbon_per_area', 'nitrogen_per_area', 'cn_ratio']).to_string())

    try:
        fits = fit_candidate_models(analysis, CANDIDATE_MODELS)
    except InsufficientDataError as e:
        print(f"\nSkipping model comparison: {e}")
        fits = {}

    aic = compare_by_aic(fits)
    if not aic.empty:
        print("\nModel comparison (AIC):")
        print(aic.to_string())
        best = aic['model'].iloc[0]
        print(f"\nCoefficients of best model ({best}):")
        print(summarise_fit(fits[best]).to_string())

    output['fits'] = fits
    output['aic'] = aic
    return output


def main():
    """Main entry point."""
    data_dir = sys.argv[1] if len(sys.argv) > 1 else "./data"
    output_dir = sys.argv[2] if len(sys.argv) > 2 else "./output"

    if not Path(data_dir).is_dir():
        print(f"Error: data directory '{data_dir}' not found.")
        sys.exit(1)

    process(data_dir, output_dir)

    print(f"\n{'='*60}")
    print("Done!")
    print(f"{'='*60}")


if __name__ == "__main__":
    main()
