"""
epistat/intervals.py

Confidence intervals for proportions, Poisson rates, variances and means.

What's included:
  - Proportions: Wald, Wilson, Wilson with continuity correction (Newcombe),
    Clopper-Pearson via the Beta-F relation
  - Poisson rates: exact (chi-square) and Byar's approximation
  - Variance / SD: chi-square interval
  - Means: t interval plus one-sample t statistic

Degenerate inputs (n = 0, T <= 0, n < 2) return records flagged
defined=False instead of raising.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Tuple

import numpy as np

from .distributions import (
    TPValue,
    chi_sq_critical,
    f_critical,
    t_critical,
    t_pvalue,
    z_critical,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE = 95.0


@dataclass(frozen=True)
class IntervalEstimate:
    value: float
    lower: float
    upper: float
    corrected: bool = False
    defined: bool = True

    @classmethod
    def undefined(cls) -> "IntervalEstimate":
        return cls(math.nan, math.nan, math.nan, defined=False)

    @property
    def width(self) -> float:
        return self.upper - self.lower

    def contains(self, x: float) -> bool:
        return self.defined and self.lower <= x <= self.upper


def _as_1d_float(x: Iterable[float]) -> np.ndarray:
    arr = np.asarray(list(x), dtype=float)
    if arr.ndim != 1:
        raise ValueError("Input must be 1D.")
    return arr


def _clamp01(x: float) -> float:
    return min(1.0, max(0.0, x))


# -------------------------
# Proportions
# -------------------------

@dataclass(frozen=True)
class ProportionIntervals:
    p_hat: float
    wald: IntervalEstimate
    wilson: IntervalEstimate
    wilson_cc: IntervalEstimate
    clopper_pearson: IntervalEstimate


def _clopper_pearson(x: int, n: int, alpha: float) -> Tuple[float, float]:
    lower = 0.0
    if x > 0:
        f = f_critical(1 - alpha / 2, 2 * (n - x + 1), 2 * x)
        lower = 0.0 if math.isinf(f) else x / (x + (n - x + 1) * f)
    upper = 1.0
    if x < n:
        f = f_critical(1 - alpha / 2, 2 * (x + 1), 2 * (n - x))
        upper = 1.0 if math.isinf(f) else (x + 1) * f / ((n - x) + (x + 1) * f)
    return _clamp01(lower), _clamp01(upper)


def proportion_intervals(
    successes: int,
    n: int,
    confidence: float = DEFAULT_CONFIDENCE,
) -> ProportionIntervals:
    """
    Four intervals for a binomial proportion x/n.

    Wald is reported as computed (it may leave [0, 1]); the other three are
    confined to [0, 1]. Clopper-Pearson has lower = 0 at x = 0 and upper = 1
    at x = n. n = 0 yields undefined intervals.
    """
    if successes < 0 or n < 0:
        raise ValueError("successes and n must be >= 0")
    if successes > n:
        raise ValueError("successes cannot exceed n")
    if n == 0:
        logger.debug("proportion_intervals called with n=0")
        u = IntervalEstimate.undefined()
        return ProportionIntervals(math.nan, u, u, u, u)

    x = successes
    p = x / n
    alpha = 1 - confidence / 100
    z = z_critical(confidence)
    z2 = z * z

    se = math.sqrt(p * (1 - p) / n)
    wald = IntervalEstimate(p, p - z * se, p + z * se)

    denom = 1 + z2 / n
    center = p + z2 / (2 * n)
    spread = z * math.sqrt(p * (1 - p) / n + z2 / (4 * n * n))
    # pinned at the boundaries; rounding leaves e.g. 0.9999999999999998 at x = n
    w_low = 0.0 if x == 0 else _clamp01((center - spread) / denom)
    w_high = 1.0 if x == n else _clamp01((center + spread) / denom)
    wilson = IntervalEstimate(p, w_low, w_high)

    # Newcombe (1998), method 4
    if x == 0:
        cc_low = 0.0
    else:
        root = math.sqrt(max(0.0, z2 - (2 + 1 / n) + 4 * p * (n * (1 - p) + 1)))
        cc_low = (2 * n * p + z2 - 1 - z * root) / (2 * (n + z2))
    if x == n:
        cc_high = 1.0
    else:
        root = math.sqrt(max(0.0, z2 + (2 - 1 / n) + 4 * p * (n * (1 - p) - 1)))
        cc_high = (2 * n * p + z2 + 1 + z * root) / (2 * (n + z2))
    wilson_cc = IntervalEstimate(p, _clamp01(cc_low), _clamp01(cc_high), corrected=True)

    cp_low, cp_high = _clopper_pearson(x, n, alpha)
    clopper_pearson = IntervalEstimate(p, cp_low, cp_high)

    return ProportionIntervals(
        p_hat=p,
        wald=wald,
        wilson=wilson,
        wilson_cc=wilson_cc,
        clopper_pearson=clopper_pearson,
    )


def wilson_interval(successes: int, n: int, confidence: float = DEFAULT_CONFIDENCE) -> IntervalEstimate:
    return proportion_intervals(successes, n, confidence).wilson


# -------------------------
# Poisson rates
# -------------------------

@dataclass(frozen=True)
class PoissonRateIntervals:
    rate: float
    exact: IntervalEstimate
    byar: IntervalEstimate


def byar_bounds(k: float, z: float) -> Tuple[float, float]:
    """
    Byar's cube-root approximation to the Poisson limits for an observed
    count k, on the count scale. Lower is 0 when k = 0.
    """
    if k <= 0:
        lower = 0.0
    else:
        lower = k * max(0.0, 1 - 1 / (9 * k) - z / (3 * math.sqrt(k))) ** 3
    k1 = k + 1
    upper = k1 * (1 - 1 / (9 * k1) + z / (3 * math.sqrt(k1))) ** 3
    return lower, upper


def poisson_rate_interval(
    k: int,
    T: float,
    confidence: float = DEFAULT_CONFIDENCE,
) -> PoissonRateIntervals:
    """
    Exact and Byar intervals for a Poisson rate k/T.

    Exact limits are chi-square quantiles: the lower-tail alpha/2 point with
    2k df and the lower-tail 1 - alpha/2 point with 2k + 2 df, each over 2T.
    T <= 0 yields undefined intervals.
    """
    if k < 0:
        raise ValueError("k must be >= 0")
    if T <= 0:
        logger.debug("poisson_rate_interval called with T=%s", T)
        u = IntervalEstimate.undefined()
        return PoissonRateIntervals(math.nan, u, u)

    alpha = 1 - confidence / 100
    rate = k / T

    # chi_sq_critical takes an upper-tail probability.
    exact_low = 0.0 if k == 0 else chi_sq_critical(1 - alpha / 2, 2 * k) / (2 * T)
    exact_high = chi_sq_critical(alpha / 2, 2 * k + 2) / (2 * T)

    b_low, b_high = byar_bounds(k, z_critical(confidence))

    return PoissonRateIntervals(
        rate=rate,
        exact=IntervalEstimate(rate, exact_low, exact_high),
        byar=IntervalEstimate(rate, b_low / T, b_high / T),
    )


# -------------------------
# Variance / SD
# -------------------------

@dataclass(frozen=True)
class VarianceInterval:
    variance: IntervalEstimate
    sd: IntervalEstimate
    df: int


def variance_interval(
    sd: float,
    n: int,
    confidence: float = DEFAULT_CONFIDENCE,
) -> VarianceInterval:
    """
    [(n-1)s^2 / chi2_upper, (n-1)s^2 / chi2_lower] and its square root.
    """
    df = n - 1
    if df < 1 or sd < 0:
        logger.debug("variance_interval called with sd=%s, n=%s", sd, n)
        u = IntervalEstimate.undefined()
        return VarianceInterval(u, u, max(df, 0))

    alpha = 1 - confidence / 100
    s2 = sd * sd
    chi_hi = chi_sq_critical(alpha / 2, df)
    chi_lo = chi_sq_critical(1 - alpha / 2, df)

    var_low = df * s2 / chi_hi
    var_high = df * s2 / chi_lo if chi_lo > 0 else math.inf

    return VarianceInterval(
        variance=IntervalEstimate(s2, var_low, var_high),
        sd=IntervalEstimate(sd, math.sqrt(var_low), math.sqrt(var_high)),
        df=df,
    )


# -------------------------
# Means
# -------------------------

@dataclass(frozen=True)
class MeanInterval:
    estimate: IntervalEstimate
    se: float
    df: int
    t: float
    p_value: TPValue
    mu0: float


def mean_interval(
    mean: float,
    sd: float,
    n: int,
    confidence: float = DEFAULT_CONFIDENCE,
    mu0: float = 0.0,
) -> MeanInterval:
    """
    t interval for a population mean from summary statistics, together with
    the one-sample t test of H0: mu = mu0.
    """
    df = n - 1
    if df < 1 or sd <= 0:
        logger.debug("mean_interval called with sd=%s, n=%s", sd, n)
        return MeanInterval(
            estimate=IntervalEstimate.undefined(),
            se=math.nan,
            df=max(df, 0),
            t=math.nan,
            p_value=TPValue(math.nan, math.nan, math.nan, defined=False),
            mu0=mu0,
        )

    se = sd / math.sqrt(n)
    tcrit = t_critical(confidence, df)
    t = (mean - mu0) / se

    return MeanInterval(
        estimate=IntervalEstimate(mean, mean - tcrit * se, mean + tcrit * se),
        se=se,
        df=df,
        t=t,
        p_value=t_pvalue(t, df),
        mu0=mu0,
    )


def mean_interval_from_data(
    values: Iterable[float],
    confidence: float = DEFAULT_CONFIDENCE,
    mu0: float = 0.0,
) -> MeanInterval:
    x = _as_1d_float(values)
    if len(x) < 2:
        return mean_interval(float(np.mean(x)) if len(x) else math.nan, 0.0, len(x), confidence, mu0)
    return mean_interval(float(np.mean(x)), float(np.std(x, ddof=1)), len(x), confidence, mu0)
