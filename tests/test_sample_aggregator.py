"""Tests for soil_cn.prep.sample_aggregator"""
import warnings

import numpy as np
import pandas as pd
import pytest

from soil_cn.errors import InconsistentCoreDataError, MalformedInputError
from soil_cn.prep.sample_aggregator import aggregate_core_means


def test_replicate_count_and_means(samples):
    means = aggregate_core_means(samples)

    assert means["core_id"].tolist() == ["1A", "1B", "2A", "7A"]
    for core_id, group in samples.groupby("core_id"):
        row = means[means["core_id"] == core_id].iloc[0]
        assert row["replicate_count"] == len(group)
        assert row["total_c"] == pytest.approx(group["total_c"].mean())
        assert row["total_n"] == pytest.approx(group["total_n"].mean())


def test_replicate_only_columns_dropped(samples):
    means = aggregate_core_means(samples)

    for col in ["sticker", "standard", "seq", "record_class"]:
        assert col not in means.columns
    assert {"plot", "core_depth", "bulk_density", "treatment", "replicate_count"} <= set(means.columns)
    assert (means["replicate_count"] >= 1).all()


def test_missing_replicate_makes_mean_missing(samples):
    samples = samples.copy()
    samples.loc[samples["seq"] == 3, "total_c"] = np.nan

    means = aggregate_core_means(samples).set_index("core_id")

    assert np.isnan(means.loc["1A", "total_c"])
    assert means.loc["1A", "total_n"] == pytest.approx(0.11)


def test_divergent_replicates_lenient_warns(samples):
    samples = samples.copy()
    samples.loc[samples["seq"] == 3, "core_depth"] = 12.0

    with pytest.warns(UserWarning, match="1A"):
        means = aggregate_core_means(samples)

    assert means.set_index("core_id").loc["1A", "core_depth"] == 10.0


def test_divergent_replicates_strict_raises(samples):
    samples = samples.copy()
    samples.loc[samples["seq"] == 3, "core_depth"] = 12.0

    with pytest.raises(InconsistentCoreDataError) as excinfo:
        aggregate_core_means(samples, strict=True)

    assert excinfo.value.core_ids == ["1A"]
    assert excinfo.value.columns == ["core_depth"]


def test_consistent_replicates_do_not_warn(samples):
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        aggregate_core_means(samples, strict=False)


def test_missing_core_id_raises(samples):
    samples = samples.copy()
    samples["core_id"] = samples["core_id"].astype(object)
    samples.loc[0, "core_id"] = None

    with pytest.raises(MalformedInputError):
        aggregate_core_means(samples)


def test_empty_samples(samples):
    means = aggregate_core_means(samples.iloc[0:0])

    assert means.empty
    assert "replicate_count" in means.columns
