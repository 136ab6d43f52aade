"""Tests for soil_cn.prep.site_builder"""
import math

import numpy as np
import pandas as pd
import pytest

from soil_cn.errors import InconsistentSiteDataError, UnknownCategoryCodeError
from soil_cn.prep.data_loader import load_topography
from soil_cn.prep.site_builder import (
    add_topography,
    build_site_table,
    decode_treatment_code,
    extract_site_table,
    northness,
)


@pytest.mark.parametrize("code, expected", [
    ("LR", ("harvested", "regular")),
    ("UN", ("unharvested", "none")),
    ("UF", ("unharvested", "frequent")),
    ("LN", ("harvested", "none")),
])
def test_decode_treatment_code(code, expected):
    assert decode_treatment_code(code) == expected


@pytest.mark.parametrize("code", ["XX", "LX", "XR", "L", "", None])
def test_decode_unknown_code_raises(code):
    with pytest.raises(UnknownCategoryCodeError):
        decode_treatment_code(code)


def test_decode_with_custom_lookup():
    assert decode_treatment_code("AB", {"A": "a"}, {"B": "b"}) == ("a", "b")


def test_northness_values():
    assert northness(0) == pytest.approx(0.0, abs=1e-12)
    assert northness(180) == pytest.approx(0.0, abs=1e-12)
    assert northness(90) == pytest.approx(1.0)
    aspects = np.linspace(0, 180, 181)
    assert aspects[np.argmax(northness(aspects))] == 90
    assert math.isnan(northness(np.nan))
    assert math.isnan(northness(None))


def test_northness_uses_half_turn_period():
    assert northness(270) == pytest.approx(-1.0)
    assert northness(45) == pytest.approx(math.sqrt(2) / 2)
    assert northness(360) == pytest.approx(0.0, abs=1e-12)


def test_northness_series_keeps_index():
    aspects = pd.Series([90.0, np.nan], index=[5, 6])

    result = northness(aspects)

    assert list(result.index) == [5, 6]
    assert result[5] == pytest.approx(1.0)
    assert np.isnan(result[6])


def test_extract_site_table_one_row_per_plot(samples):
    sites = extract_site_table(samples)

    assert sites["plot"].tolist() == [1, 2, 7]
    assert sites["treatment"].tolist() == ["UN", "LR", "UF"]
    assert not sites["plot"].duplicated().any()


def test_conflicting_site_rows_raise(samples):
    samples = samples.copy()
    samples.loc[samples["seq"] == 3, "treatment"] = "LR"

    with pytest.raises(InconsistentSiteDataError) as excinfo:
        extract_site_table(samples)

    assert excinfo.value.plot_ids == [1]
    assert "1" in str(excinfo.value)


def test_build_site_table_categories(samples):
    sites = build_site_table(samples)

    assert sites["harvest"].tolist() == ["unharvested", "harvested", "unharvested"]
    assert sites["firetreat"].tolist() == ["none", "regular", "frequent"]
    assert list(sites["harvest"].cat.categories) == ["unharvested", "harvested"]
    assert list(sites["firetreat"].cat.categories) == ["none", "regular", "frequent"]
    assert "northness" not in sites.columns


def test_build_site_table_unknown_code(samples):
    samples = samples.copy()
    samples["treatment"] = samples["treatment"].replace({"UF": "XX"})

    with pytest.raises(UnknownCategoryCodeError):
        build_site_table(samples)


def test_add_topography_left_join(samples, topography_csv):
    topography = load_topography(topography_csv)

    with pytest.warns(UserWarning, match="7"):
        sites = build_site_table(samples, topography)

    sites = sites.set_index("plot")
    assert len(sites) == 3
    assert sites.loc[1, "northness"] == pytest.approx(1.0)
    assert sites.loc[2, "northness"] == pytest.approx(0.0, abs=1e-12)
    assert sites.loc[2, "slope"] == 12.0
    assert np.isnan(sites.loc[7, "elevation"])
    assert np.isnan(sites.loc[7, "northness"])


def test_add_topography_duplicate_plot_raises(samples):
    sites = extract_site_table(samples)
    topography = pd.DataFrame({"plot": [1, 1], "aspect": [10.0, 20.0]})

    with pytest.raises(InconsistentSiteDataError):
        add_topography(sites, topography)


def test_add_topography_does_not_modify_sites(samples, topography_csv):
    sites = extract_site_table(samples)
    before = sites.copy()

    with pytest.warns(UserWarning):
        add_topography(sites, load_topography(topography_csv))

    pd.testing.assert_frame_equal(sites, before)
