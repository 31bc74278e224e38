# tests/test_power.py
import math

import numpy as np
import pytest

from epistat.power import (
    DEFAULT_SPECTRUM_POWERS,
    cluster_adjustment,
    power_curve,
    power_noninferiority,
    power_paired,
    power_two_means,
    power_two_proportions,
    sample_size_mean_estimate,
    sample_size_noninferiority,
    sample_size_paired,
    sample_size_proportion_estimate,
    sample_size_spectrum,
    sample_size_two_means,
    sample_size_two_proportions,
)


# -------------------------
# Sample size
# -------------------------

def test_two_proportions_reference():
    res = sample_size_two_proportions(0.3, 0.5, power=0.8, alpha=0.05, ratio=1)
    assert res.n == 93
    assert res.n2 == 93
    assert res.n_total == 186


def test_two_means_equal_and_unequal_allocation():
    # (z_.975 + z_.8)^2 ~= 7.849
    res = sample_size_two_means(0.0, 5.0, sd=10.0)
    assert (res.n, res.n2, res.n_total) == (63, 63, 126)

    res = sample_size_two_means(0.0, 5.0, sd=10.0, ratio=2)
    assert (res.n, res.n2, res.n_total) == (48, 96, 144)


def test_sample_sizes_are_integers_rounded_up():
    res = sample_size_two_means(10.0, 12.5, sd=4.0, power=0.9)
    assert isinstance(res.n, int)
    raw = 16 * 2 * (1.959964 + 1.281552) ** 2 / 2.5 ** 2
    assert res.n == math.ceil(raw)


def test_paired():
    res = sample_size_paired(diff=2.0, sd_diff=5.0)
    assert res.n == 50
    assert res.n_total == 50


def test_noninferiority():
    res = sample_size_noninferiority(0.85, 0.85, margin=0.10)
    assert res.n == 201
    assert res.n_total == 402


def test_noninferiority_zero_denominator_is_undefined():
    res = sample_size_noninferiority(0.5, 0.75, margin=0.25)
    assert not res.defined
    assert res.n == 0
    assert res.note


def test_zero_effect_is_undefined():
    assert not sample_size_two_means(5.0, 5.0, sd=1.0).defined
    assert not sample_size_two_proportions(0.4, 0.4).defined
    assert not sample_size_paired(0.0, 1.0).defined


def test_estimate_precision():
    assert sample_size_mean_estimate(sd=10.0, margin=2.0).n == 97
    assert sample_size_proportion_estimate(0.5, margin=0.05).n == 385
    assert not sample_size_mean_estimate(sd=10.0, margin=0.0).defined


def test_cluster_adjustment():
    res = cluster_adjustment(200, cluster_size=20, icc=0.05)
    assert res.design_effect == pytest.approx(1.95)
    assert res.n_adjusted == 390
    assert res.n_clusters == 20


def test_cluster_adjustment_no_correlation():
    res = cluster_adjustment(120, cluster_size=10, icc=0.0)
    assert res.design_effect == 1.0
    assert res.n_adjusted == 120
    assert res.n_clusters == 12


def test_invalid_inputs_raise():
    with pytest.raises(ValueError):
        sample_size_two_means(0, 1, 1, ratio=0)
    with pytest.raises(ValueError):
        sample_size_two_proportions(0.0, 0.5)
    with pytest.raises(ValueError):
        sample_size_two_means(0, 1, 1, alpha=1.5)
    with pytest.raises(ValueError):
        cluster_adjustment(100, cluster_size=10, icc=2.0)
    with pytest.raises(ValueError):
        cluster_adjustment(100, cluster_size=0, icc=0.1)


# -------------------------
# Power
# -------------------------

def test_power_matches_sample_size_solutions():
    assert power_two_means(63, 63, 0.0, 5.0, 10.0).power >= 0.8
    assert power_two_proportions(93, 93, 0.3, 0.5).power == pytest.approx(0.8, abs=0.01)
    assert power_paired(50, 2.0, 5.0).power == pytest.approx(0.8, abs=0.01)
    assert power_noninferiority(201, 0.85, 0.85, 0.10).power == pytest.approx(0.8, abs=0.01)


def test_power_without_effect_equals_alpha():
    res = power_two_means(100, 100, 1.0, 1.0, 2.0, alpha=0.05)
    assert res.power == pytest.approx(0.05, abs=1e-6)


def test_power_is_clamped_for_extreme_inputs():
    res = power_two_means(10 ** 9, 10 ** 9, 0.0, 100.0, 0.001)
    assert res.power == 1.0
    res = power_two_proportions(5, 5, 0.5, 0.5)
    assert 0.0 <= res.power <= 1.0


def test_power_undefined_for_empty_groups():
    res = power_two_means(0, 10, 0.0, 1.0, 1.0)
    assert not res.defined
    assert math.isnan(res.power)
    assert not power_paired(0, 1.0, 1.0).defined


# -------------------------
# Spectra
# -------------------------

def test_sample_size_spectrum():
    df = sample_size_spectrum(sample_size_two_proportions, p1=0.3, p2=0.5)
    assert list(df.columns) == ["power", "n", "n2", "n_total", "defined"]
    assert len(df) == len(DEFAULT_SPECTRUM_POWERS)
    assert df["n"].is_monotonic_increasing
    assert df.loc[np.isclose(df["power"], 0.8), "n"].item() == 93
    assert df["defined"].all()


def test_sample_size_spectrum_keeps_undefined_rows():
    df = sample_size_spectrum(
        sample_size_noninferiority,
        powers=[0.8, 0.9],
        p_standard=0.5, p_test=0.75, margin=0.25,
    )
    assert len(df) == 2
    assert not df["defined"].any()


def test_power_curve_increases_with_n():
    df = power_curve(
        power_two_means,
        [10, 50, 100, 200],
        n_args=("n1", "n2"),
        m1=0.0, m2=5.0, sd=10.0,
    )
    assert list(df.columns) == ["n", "power", "defined"]
    assert df["power"].is_monotonic_increasing
    assert df["power"].between(0, 1).all()


def test_power_curve_tolerates_degenerate_points():
    df = power_curve(power_paired, [0, 20], diff=1.0, sd_diff=2.0)
    assert not df.loc[0, "defined"]
    assert df.loc[1, "defined"]
