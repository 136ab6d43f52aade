"""Pytest configuration and shared fixtures."""
import numpy as np
import pandas as pd
import pytest

RAW_COLUMNS = [
    "Core", "Plot", "Sticker", "Standard", "Tree.Open", "Treatment", "TSF",
    "NFires", "Core_Depth", "Soil.Depth", "Topsoil.Depth", "Soil_Colour",
    "Weight", "Bulk.Density", "Total.C", "Total.N", "Seq",
]


def raw_row(core, plot, treatment, tsf, nfires, total_c, total_n, seq,
            standard="", depth="10", density="1.2", micro_site="tree"):
    return {
        "Core": core, "Plot": plot, "Sticker": f"S{seq:03d}", "Standard": standard,
        "Tree.Open": micro_site, "Treatment": treatment, "TSF": tsf, "NFires": nfires,
        "Core_Depth": depth, "Soil.Depth": "30", "Topsoil.Depth": "8",
        "Soil_Colour": "brown", "Weight": "25.1", "Bulk.Density": density,
        "Total.C": total_c, "Total.N": total_n, "Seq": str(seq),
    }


@pytest.fixture
def raw_frame():
    """Raw replicate table as it appears in the lab export (all text)."""
    rows = [
        raw_row("STD1", "", "", "", "", "41.0", "9.5", 1, standard="EDTA", depth="",
                density="", micro_site=""),
        raw_row("1A", "1", "UN", "12", "0", "2.0", "0.10", 2),
        raw_row("1A", "1", "UN", "12", "0", "2.2", "0.12", 3),
        raw_row("1B", "1", "UN", "12", "0", "1.5", "0.08", 4, micro_site="open"),
        raw_row("2A", "2", "LR", "3", "4", "3.0", "0.20", 5, depth="5", density="1.0"),
        raw_row("2A", "2", "LR", "3", "4", "3.4", "0.20", 6, depth="5", density="1.0"),
        raw_row("STD2", "", "", "", "", "40.6", "9.4", 7, standard="EDTA", depth="",
                density="", micro_site=""),
        raw_row("7A", "7", "UF", "1", "9", "1.0", "0", 8),
    ]
    return pd.DataFrame(rows, columns=RAW_COLUMNS)


@pytest.fixture
def raw_csv(tmp_path, raw_frame):
    path = tmp_path / "raw_cn.csv"
    raw_frame.to_csv(path, index=False)
    return path


@pytest.fixture
def topography_csv(tmp_path):
    path = tmp_path / "topography.csv"
    pd.DataFrame({
        "Plot": [1, 2],
        "Easting": [500100.0, 500900.0],
        "Northing": [6100200.0, 6100800.0],
        "Aspect": [90.0, 180.0],
        "Slope": [4.5, 12.0],
        "Elevation": [310.0, 355.0],
        "Wetness": [7.1, 5.4],
        "Solar": [1.02, 0.97],
    }).to_csv(path, index=False)
    return path


@pytest.fixture
def fire_history_csv(tmp_path):
    path = tmp_path / "fire_history.csv"
    pd.DataFrame({
        "Plot": ["Plot_002", "Plot_002", "Plot_007", "Plot_007", "Plot_007"],
        "Year": [2005, 2012, 2001, 2010, 2015],
        "Burn_Percent": [60.0, 10.0, 20.0, 50.0, 5.0],
    }).to_csv(path, index=False)
    return path


@pytest.fixture
def samples(raw_frame):
    """Field-sample rows in schema form."""
    from soil_cn.prep.data_loader import apply_schema
    from soil_cn.constants import RAW_RECORD_SCHEMA
    from soil_cn.prep.classifier import split_standards_and_samples

    raw = apply_schema(raw_frame, RAW_RECORD_SCHEMA)
    _, field_samples, _ = split_standards_and_samples(raw)
    return field_samples


@pytest.fixture
def model_frame():
    """Synthetic analysis table with a known linear/smooth structure."""
    rng = np.random.default_rng(42)
    n = 60
    harvest = np.where(np.arange(n) % 2 == 0, "unharvested", "harvested")
    n_fires = rng.integers(0, 4, size=n)
    tsf = rng.uniform(0, 30, size=n)
    carbon = (
        40.0
        - 5.0 * (harvest == "harvested")
        + 2.0 * n_fires
        + 3.0 * np.sin(tsf / 5.0)
        + rng.normal(0, 1.0, size=n)
    )
    return pd.DataFrame({
        "harvest": pd.Categorical(harvest, categories=["unharvested", "harvested", "unused"]),
        "n_fires": pd.array(n_fires, dtype="Int64"),
        "time_since_fire": tsf,
        "carbon_per_area": carbon,
    })
