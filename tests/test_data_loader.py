"""Tests for soil_cn.prep.data_loader"""
import numpy as np
import pandas as pd
import pytest

from soil_cn.constants import RAW_RECORD_SCHEMA
from soil_cn.errors import MalformedInputError
from soil_cn.prep.data_loader import (
    apply_schema,
    clean_column_names,
    load_fire_history,
    load_raw_records,
    load_topography,
    read_table,
)


def test_clean_column_names():
    assert clean_column_names(["Core_ID", "Total.C", "Bulk Density", "tsf"]) == [
        "coreid", "totalc", "bulkdensity", "tsf"
    ]


def test_load_raw_records_types_and_blanks(raw_csv):
    raw = load_raw_records(raw_csv)

    assert list(raw.columns) == list(RAW_RECORD_SCHEMA)
    assert len(raw) == 8
    assert str(raw["plot"].dtype) == "Int64"
    assert raw["total_c"].dtype == float
    # Blank standard fields stay blank strings, not missing
    assert raw.loc[1, "standard"] == ""
    assert raw.loc[0, "standard"] == "EDTA"
    # Blank numeric cells become missing
    assert pd.isna(raw.loc[0, "plot"])
    assert raw.loc[7, "total_n"] == 0.0


def test_missing_required_column_raises(tmp_path, raw_frame):
    path = tmp_path / "raw.csv"
    raw_frame.drop(columns=["Total.N"]).to_csv(path, index=False)

    with pytest.raises(MalformedInputError, match="total_n"):
        load_raw_records(path)


def test_missing_optional_column_is_filled(raw_frame):
    raw = apply_schema(raw_frame.drop(columns=["Soil_Colour", "Weight"]), RAW_RECORD_SCHEMA)

    assert raw["soil_colour"].isna().all()
    assert raw["weight"].isna().all()


def test_unparsable_numeric_raises(raw_frame):
    raw_frame.loc[2, "Total.C"] = "two"

    with pytest.raises(MalformedInputError, match="total_c"):
        apply_schema(raw_frame, RAW_RECORD_SCHEMA)


def test_non_integer_plot_raises(raw_frame):
    raw_frame.loc[2, "Plot"] = "1.5"

    with pytest.raises(MalformedInputError, match="plot"):
        apply_schema(raw_frame, RAW_RECORD_SCHEMA)


def test_na_token_is_missing(raw_frame):
    raw_frame.loc[2, "Standard"] = "NA"
    raw_frame.loc[3, "Total.C"] = "NA"

    raw = apply_schema(raw_frame, RAW_RECORD_SCHEMA)

    assert pd.isna(raw.loc[2, "standard"])
    assert np.isnan(raw.loc[3, "total_c"])


def test_read_excel(tmp_path, raw_frame):
    path = tmp_path / "raw.xlsx"
    raw_frame.to_excel(path, index=False)

    raw = load_raw_records(path)

    assert len(raw) == 8
    assert raw["total_c"].tolist()[1:3] == [2.0, 2.2]
    assert raw.loc[1, "standard"] == ""


def test_read_table_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_table(tmp_path / "absent.csv")

    path = tmp_path / "data.json"
    path.write_text("{}")
    with pytest.raises(MalformedInputError):
        read_table(path)


def test_read_table_rejects_legacy_xls(tmp_path):
    path = tmp_path / "raw.xls"
    path.write_bytes(b"\xd0\xcf\x11\xe0")

    with pytest.raises(MalformedInputError, match="xls"):
        read_table(path)


def test_load_topography_and_fire_history(topography_csv, fire_history_csv):
    topo = load_topography(topography_csv)
    fires = load_fire_history(fire_history_csv)

    assert topo["plot"].tolist() == [1, 2]
    assert topo["aspect"].tolist() == [90.0, 180.0]
    assert list(fires.columns) == ["plot_label", "year", "burn_percent"]
    assert fires["plot_label"].iloc[0] == "Plot_002"
