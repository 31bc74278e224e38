# tests/test_accuracy.py
import numpy as np

from epistat.accuracy import (
    chi_sq_critical_envelope,
    f_critical_envelope,
    normal_quantile_envelope,
    t_critical_envelope,
)


def test_normal_quantile_envelope_is_tight():
    df = normal_quantile_envelope(np.linspace(0.001, 0.999, 41))
    assert {"p", "approx", "reference", "abs_error", "rel_error"} <= set(df.columns)
    assert df["abs_error"].max() < 1e-6


def test_t_critical_envelope_moderate_df():
    df = t_critical_envelope([10, 30, 100, 400])
    assert len(df) == 12
    assert df["abs_error"].max() < 2e-2


def test_t_critical_envelope_degrades_at_small_df():
    small = t_critical_envelope([1], confidences=[95.0])
    large = t_critical_envelope([30], confidences=[95.0])
    assert small["abs_error"].iloc[0] > large["abs_error"].iloc[0]


def test_chi_sq_envelope_improves_with_df():
    df = chi_sq_critical_envelope([1, 10, 50], upper_tail=[0.05, 0.5])
    by_df = df.groupby("df")["rel_error"].max()
    assert by_df[50] < 0.01
    assert by_df[10] < 0.01
    assert by_df[1] > by_df[50]


def test_f_critical_envelope_within_one_percent_for_moderate_df():
    df = f_critical_envelope([20, 40, 100], [30, 60, 200], p=0.975)
    assert len(df) == 9
    assert df["rel_error"].max() < 0.01


def test_f_critical_envelope_small_df_is_worse():
    small = f_critical_envelope([2], [4])
    moderate = f_critical_envelope([40], [40])
    assert small["rel_error"].iloc[0] > moderate["rel_error"].iloc[0]
