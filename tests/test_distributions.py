# tests/test_distributions.py
import math

import numpy as np
import pytest
from scipy import stats

from epistat.distributions import (
    chi_sq_critical,
    chi_sq_pvalue,
    erf,
    f_critical,
    normal_cdf,
    normal_quantile,
    t_critical,
    t_pvalue,
    z_alpha,
    z_beta,
    z_critical,
)


@pytest.mark.parametrize("conf, expected", [(90, 1.645), (95, 1.96), (99, 2.576)])
def test_z_critical_reference_values(conf, expected):
    assert z_critical(conf) == pytest.approx(expected, abs=1e-3)


def test_normal_cdf_matches_scipy():
    zs = np.linspace(-6, 6, 61)
    for z in zs:
        assert normal_cdf(z) == pytest.approx(stats.norm.cdf(z), abs=2e-7)


def test_normal_cdf_saturates_and_is_symmetric():
    assert normal_cdf(40) == 1.0
    assert normal_cdf(-40) == 0.0
    assert normal_cdf(0) == pytest.approx(0.5, abs=1e-9)
    assert normal_cdf(1.3) + normal_cdf(-1.3) == pytest.approx(1.0, abs=1e-9)


def test_erf_is_odd():
    assert erf(0.7) == pytest.approx(-erf(-0.7))
    assert erf(0.0) == pytest.approx(0.0, abs=1e-8)


def test_normal_quantile_inverts_cdf():
    for p in [1e-6, 0.001, 0.02, 0.3, 0.5, 0.77, 0.975, 0.999]:
        assert normal_quantile(p) == pytest.approx(stats.norm.ppf(p), abs=1e-6)


def test_normal_quantile_endpoints():
    assert normal_quantile(0.0) == -math.inf
    assert normal_quantile(1.0) == math.inf


def test_z_alpha_and_z_beta():
    assert z_alpha(0.05) == pytest.approx(1.96, abs=1e-3)
    assert z_alpha(0.05, two_sided=False) == pytest.approx(1.645, abs=1e-3)
    assert z_beta(0.8) == pytest.approx(0.8416, abs=1e-3)
    with pytest.raises(ValueError):
        z_alpha(0.0)
    with pytest.raises(ValueError):
        z_beta(1.0)


# -------------------------
# Student-t
# -------------------------

def test_t_critical_converges_to_z():
    for conf in (90, 95, 99):
        assert t_critical(conf, 1000) == pytest.approx(z_critical(conf), abs=1e-2)
        assert t_critical(conf, 400) > z_critical(conf)


def test_t_critical_close_to_reference_moderate_df():
    for df in (5, 10, 30, 100):
        assert t_critical(95, df) == pytest.approx(stats.t.ppf(0.975, df), abs=1e-2)


def test_t_critical_nonpositive_df_is_zero():
    assert t_critical(95, 0) == 0.0
    assert t_critical(95, -3) == 0.0


@pytest.mark.parametrize("df", [1, 2, 3, 4, 7, 10, 25, 60])
def test_t_pvalue_matches_reference(df):
    for t in (0.5, 1.5, 2.2, 3.0):
        res = t_pvalue(t, df)
        assert res.two_sided == pytest.approx(2 * stats.t.sf(t, df), abs=1e-6)


def test_t_pvalue_orientation_and_consistency():
    pos = t_pvalue(2.1, 12)
    neg = t_pvalue(-2.1, 12)

    assert pos.upper < 0.5 < pos.lower
    assert neg.lower < 0.5 < neg.upper
    assert pos.upper == pytest.approx(neg.lower)
    for res in (pos, neg):
        assert res.lower + res.upper == pytest.approx(1.0)
        assert res.two_sided == pytest.approx(2 * min(res.lower, res.upper))
        assert 0 <= res.two_sided <= 1


def test_t_pvalue_large_df_uses_normal():
    res = t_pvalue(1.96, 5000)
    assert res.two_sided == pytest.approx(0.05, abs=1e-3)


def test_t_pvalue_at_zero_is_one():
    res = t_pvalue(0.0, 8)
    assert res.two_sided == pytest.approx(1.0)
    assert res.lower == pytest.approx(0.5)


def test_t_pvalue_small_df_undefined():
    res = t_pvalue(2.0, 0.5)
    assert not res.defined
    assert math.isnan(res.two_sided)


def test_t_pvalue_fractional_df_is_floored():
    assert t_pvalue(2.0, 7.9).two_sided == pytest.approx(t_pvalue(2.0, 7).two_sided)


# -------------------------
# Chi-square
# -------------------------

def test_chi_sq_critical_upper_tail_convention():
    # P(X > 3.84) = 0.05 for 1 df
    assert chi_sq_critical(0.05, 1) == pytest.approx(3.841, rel=0.05)
    assert chi_sq_critical(0.05, 10) == pytest.approx(18.307, rel=0.01)
    assert chi_sq_critical(0.95, 10) == pytest.approx(3.940, rel=0.02)


def test_chi_sq_critical_sentinels():
    assert chi_sq_critical(0.05, 0) == 0.0
    # cube-root transform leaves its range for df=1 in the far lower tail
    assert chi_sq_critical(0.99, 1) == 0.0


@pytest.mark.parametrize("df", [1, 2, 5, 10, 30, 100])
@pytest.mark.parametrize("p", [0.01, 0.05, 0.25, 0.5, 0.75, 0.9])
def test_chi_sq_round_trip(df, p):
    assert chi_sq_pvalue(chi_sq_critical(p, df), df) == pytest.approx(p, abs=1e-2)


@pytest.mark.parametrize("df", [2, 5, 30, 100])
def test_chi_sq_round_trip_lower_tail(df):
    for p in (0.95, 0.99):
        assert chi_sq_pvalue(chi_sq_critical(p, df), df) == pytest.approx(p, abs=1e-2)


def test_chi_sq_pvalue_degenerate_and_reference():
    assert chi_sq_pvalue(0.0, 3) == 1.0
    assert chi_sq_pvalue(-1.0, 3) == 1.0
    assert chi_sq_pvalue(11.07, 5) == pytest.approx(0.05, abs=5e-3)


# -------------------------
# F
# -------------------------

def test_f_critical_close_to_reference():
    for d1, d2 in [(10, 20), (20, 20), (40, 60), (100, 100)]:
        assert f_critical(0.975, d1, d2) == pytest.approx(stats.f.ppf(0.975, d1, d2), rel=0.01)


def test_f_critical_sentinels():
    assert f_critical(0.975, 0, 10) == 0.0
    assert f_critical(0.975, 5, -1) == 0.0
    assert f_critical(0.975, 10, 1) == math.inf
