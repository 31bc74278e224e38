"""
epistat/power.py

Closed-form sample size and power for two-group and paired designs.

Sample sizes are always rounded up (math.ceil). A design whose effect is zero
(so n would be infinite) returns a SampleSizeResult with defined=False and a
note; power functions never raise for extreme inputs and always report a
power in [0, 1].
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence

import numpy as np
import pandas as pd

from .distributions import normal_cdf, z_alpha, z_beta, z_critical
from .intervals import DEFAULT_CONFIDENCE

logger = logging.getLogger(__name__)

DEFAULT_SPECTRUM_POWERS = (0.70, 0.75, 0.80, 0.85, 0.90, 0.95, 0.99)


@dataclass(frozen=True)
class SampleSizeResult:
    n: int
    n2: Optional[int] = None
    n_total: Optional[int] = None
    defined: bool = True
    note: Optional[str] = None


def _undefined(note: str) -> SampleSizeResult:
    logger.debug("sample size undefined: %s", note)
    return SampleSizeResult(n=0, defined=False, note=note)


def _two_group(n1_real: float, ratio: float) -> SampleSizeResult:
    n1 = math.ceil(n1_real)
    n2 = math.ceil(n1 * ratio)
    return SampleSizeResult(n=n1, n2=n2, n_total=n1 + n2)


def _check_ratio(ratio: float) -> None:
    if ratio <= 0:
        raise ValueError("ratio must be > 0")


# -------------------------
# Sample size
# -------------------------

def sample_size_two_means(
    m1: float,
    m2: float,
    sd: float,
    power: float = 0.8,
    alpha: float = 0.05,
    ratio: float = 1.0,   # n2 / n1
) -> SampleSizeResult:
    """
    n1 = sd^2 (1 + 1/k) (z_a/2 + z_b)^2 / delta^2, n2 = ceil(k * n1).
    """
    _check_ratio(ratio)
    za = z_alpha(alpha)
    zb = z_beta(power)
    delta = abs(m1 - m2)
    if delta == 0 or sd <= 0:
        return _undefined("means must differ and sd must be > 0")

    n1 = sd ** 2 * (1 + 1 / ratio) * (za + zb) ** 2 / delta ** 2
    return _two_group(n1, ratio)


def sample_size_two_proportions(
    p1: float,
    p2: float,
    power: float = 0.8,
    alpha: float = 0.05,
    ratio: float = 1.0,   # n2 / n1
) -> SampleSizeResult:
    """
    Pooled-variance formula under H0, unpooled under H1:

      n1 = [z_a/2 sqrt((1 + 1/k) p q) + z_b sqrt(p1 q1 + p2 q2 / k)]^2 / (p1 - p2)^2
    """
    _check_ratio(ratio)
    if not (0 < p1 < 1 and 0 < p2 < 1):
        raise ValueError("p1 and p2 must be in (0,1)")
    za = z_alpha(alpha)
    zb = z_beta(power)
    if p1 == p2:
        return _undefined("p1 and p2 must differ")

    p_avg = (p1 + ratio * p2) / (1 + ratio)
    q_avg = 1 - p_avg
    num = (
        za * math.sqrt((1 + 1 / ratio) * p_avg * q_avg)
        + zb * math.sqrt(p1 * (1 - p1) + p2 * (1 - p2) / ratio)
    ) ** 2
    return _two_group(num / (p1 - p2) ** 2, ratio)


def sample_size_paired(
    diff: float,
    sd_diff: float,
    power: float = 0.8,
    alpha: float = 0.05,
) -> SampleSizeResult:
    """
    Number of pairs: n = [sd_diff (z_a/2 + z_b) / diff]^2.
    """
    za = z_alpha(alpha)
    zb = z_beta(power)
    if diff == 0 or sd_diff <= 0:
        return _undefined("diff must be non-zero and sd_diff must be > 0")
    n = math.ceil((sd_diff * (za + zb) / diff) ** 2)
    return SampleSizeResult(n=n, n_total=n)


def sample_size_noninferiority(
    p_standard: float,
    p_test: float,
    margin: float,
    power: float = 0.8,
    alpha: float = 0.025,  # one-sided
) -> SampleSizeResult:
    """
    Per-arm n = (z_a + z_b)^2 (pS qS + pT qT) / (pT - pS - margin)^2 with a
    one-sided z_a. Undefined when pT - pS - margin is 0.
    """
    za = z_alpha(alpha, two_sided=False)
    zb = z_beta(power)
    denominator = (p_test - p_standard - margin) ** 2
    if denominator <= 0:
        return _undefined("p_test - p_standard equals the margin; non-inferiority cannot be shown")

    variance = p_standard * (1 - p_standard) + p_test * (1 - p_test)
    n = math.ceil((za + zb) ** 2 * variance / denominator)
    return SampleSizeResult(n=n, n2=n, n_total=2 * n)


def sample_size_mean_estimate(
    sd: float,
    margin: float,
    confidence: float = DEFAULT_CONFIDENCE,
) -> SampleSizeResult:
    """
    n = (z sd / margin)^2 to estimate a mean within +/- margin.
    """
    if margin <= 0 or sd <= 0:
        return _undefined("sd and margin must be > 0")
    n = math.ceil((z_critical(confidence) * sd / margin) ** 2)
    return SampleSizeResult(n=n, n_total=n)


def sample_size_proportion_estimate(
    p: float,
    margin: float,
    confidence: float = DEFAULT_CONFIDENCE,
) -> SampleSizeResult:
    """
    n = z^2 p (1 - p) / margin^2 to estimate a proportion within +/- margin.
    """
    if not (0 <= p <= 1):
        raise ValueError("p must be in [0,1]")
    if margin <= 0:
        return _undefined("margin must be > 0")
    z = z_critical(confidence)
    n = math.ceil(z ** 2 * p * (1 - p) / margin ** 2)
    return SampleSizeResult(n=n, n_total=n)


@dataclass(frozen=True)
class ClusterDesign:
    design_effect: float
    n_adjusted: int
    n_clusters: int


def cluster_adjustment(n_individual: int, cluster_size: float, icc: float) -> ClusterDesign:
    """
    Inflate an individually randomized n by the design effect 1 + (m - 1) ICC
    and convert to a number of clusters of size m.
    """
    if cluster_size < 1:
        raise ValueError("cluster_size must be >= 1")
    if not (0 <= icc <= 1):
        raise ValueError("icc must be in [0,1]")
    deff = 1 + (cluster_size - 1) * icc
    n_adjusted = math.ceil(n_individual * deff)
    return ClusterDesign(
        design_effect=deff,
        n_adjusted=n_adjusted,
        n_clusters=math.ceil(n_adjusted / cluster_size),
    )


# -------------------------
# Power given n
# -------------------------

@dataclass(frozen=True)
class PowerResult:
    power: float
    noncentrality: float
    z_alpha: float
    defined: bool = True


def _power(p: float, ncp: float, za: float) -> PowerResult:
    return PowerResult(power=min(1.0, max(0.0, p)), noncentrality=ncp, z_alpha=za)


def _undefined_power(za: float) -> PowerResult:
    return PowerResult(math.nan, math.nan, za, defined=False)


def power_two_means(
    n1: int,
    n2: int,
    m1: float,
    m2: float,
    sd: float,
    alpha: float = 0.05,
) -> PowerResult:
    """
    Two-sided power, P(Z > z_a/2 - lambda) + P(Z < -z_a/2 - lambda), with
    lambda = |m1 - m2| / (sd sqrt(1/n1 + 1/n2)).
    """
    za = z_alpha(alpha)
    if n1 <= 0 or n2 <= 0 or sd <= 0:
        return _undefined_power(za)
    se = sd * math.sqrt(1 / n1 + 1 / n2)
    ncp = abs(m1 - m2) / se
    return _power(normal_cdf(ncp - za) + normal_cdf(-ncp - za), ncp, za)


def power_two_proportions(
    n1: int,
    n2: int,
    p1: float,
    p2: float,
    alpha: float = 0.05,
) -> PowerResult:
    za = z_alpha(alpha)
    if n1 <= 0 or n2 <= 0:
        return _undefined_power(za)
    p_avg = (n1 * p1 + n2 * p2) / (n1 + n2)
    se0 = math.sqrt(p_avg * (1 - p_avg) * (1 / n1 + 1 / n2))
    se_a = math.sqrt(p1 * (1 - p1) / n1 + p2 * (1 - p2) / n2)
    if se_a == 0:
        return _undefined_power(za)
    ncp = (abs(p1 - p2) - za * se0) / se_a
    return _power(normal_cdf(ncp), ncp, za)


def power_paired(
    n: int,
    diff: float,
    sd_diff: float,
    alpha: float = 0.05,
) -> PowerResult:
    za = z_alpha(alpha)
    if n <= 0 or sd_diff <= 0:
        return _undefined_power(za)
    ncp = abs(diff) / (sd_diff / math.sqrt(n))
    return _power(normal_cdf(ncp - za), ncp, za)


def power_noninferiority(
    n_per_group: int,
    p_standard: float,
    p_test: float,
    margin: float,
    alpha: float = 0.025,  # one-sided
) -> PowerResult:
    """
    Power for the non-inferiority design of sample_size_noninferiority, using
    the same effect |pT - pS - margin|.
    """
    za = z_alpha(alpha, two_sided=False)
    variance = p_standard * (1 - p_standard) + p_test * (1 - p_test)
    if n_per_group <= 0 or variance <= 0:
        return _undefined_power(za)
    se = math.sqrt(variance / n_per_group)
    ncp = abs(p_test - p_standard - margin) / se
    return _power(normal_cdf(ncp - za), ncp, za)


# -------------------------
# Spectra
# -------------------------

def sample_size_spectrum(
    solver: Callable[..., SampleSizeResult],
    powers: Iterable[float] = DEFAULT_SPECTRUM_POWERS,
    **kwargs,
) -> pd.DataFrame:
    """
    Evaluate a sample size solver over several target powers.

    Example:
      sample_size_spectrum(sample_size_noninferiority,
                           p_standard=0.85, p_test=0.85, margin=0.10)
    """
    rows = []
    for pw in powers:
        res = solver(power=float(pw), **kwargs)
        rows.append({
            "power": float(pw),
            "n": res.n,
            "n2": res.n2,
            "n_total": res.n_total,
            "defined": res.defined,
        })
    return pd.DataFrame(rows)


def power_curve(
    power_fn: Callable[..., PowerResult],
    n_values: Iterable[int],
    n_args: Sequence[str] = ("n",),
    **kwargs,
) -> pd.DataFrame:
    """
    Power across a sweep of sample sizes. Each name in `n_args` receives the
    swept n, e.g. n_args=("n1", "n2") for power_two_means.
    """
    ns = np.asarray(list(n_values), dtype=int)
    rows = []
    for n in ns:
        res = power_fn(**{name: int(n) for name in n_args}, **kwargs)
        rows.append({"n": int(n), "power": res.power, "defined": res.defined})
    return pd.DataFrame(rows, columns=["n", "power", "defined"])
