"""
epistat/stats.py

Hypothesis tests on summary statistics, evaluated with the closed-form
distribution approximations in epistat.distributions.

What's included:
  - One-sample t-test (mean vs. mu0) with t interval
  - Independent two-sample t-test (pooled variance)
  - Two-proportion z-test on a 2x2 table (exposed vs. unexposed risk),
    pooled SE under H0 and a Wald interval for the risk difference
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Literal, Tuple

from .distributions import TPValue, normal_cdf, t_critical, t_pvalue, z_critical
from .epi import Table2x2
from .intervals import DEFAULT_CONFIDENCE

logger = logging.getLogger(__name__)


# -------------------------
# t-tests
# -------------------------

@dataclass(frozen=True)
class TTestResult:
    t: float
    df: int
    p_value: TPValue
    estimate: float
    se: float
    ci: Tuple[float, float]
    method: str
    defined: bool = True


def _undefined_ttest(df: int, method: str) -> TTestResult:
    return TTestResult(
        t=math.nan,
        df=df,
        p_value=TPValue(math.nan, math.nan, math.nan, defined=False),
        estimate=math.nan,
        se=math.nan,
        ci=(math.nan, math.nan),
        method=method,
        defined=False,
    )


def one_sample_ttest(
    mean: float,
    mu0: float,
    sd: float,
    n: int,
    confidence: float = DEFAULT_CONFIDENCE,
) -> TTestResult:
    """
    t = (mean - mu0) / (sd / sqrt(n)), df = n - 1, with a t interval for the
    mean.
    """
    method = "one-sample t-test"
    df = n - 1
    if df < 1 or sd <= 0:
        logger.debug("one_sample_ttest undefined: sd=%s, n=%s", sd, n)
        return _undefined_ttest(max(df, 0), method)

    se = sd / math.sqrt(n)
    t = (mean - mu0) / se
    tcrit = t_critical(confidence, df)
    return TTestResult(
        t=t,
        df=df,
        p_value=t_pvalue(t, df),
        estimate=mean,
        se=se,
        ci=(mean - tcrit * se, mean + tcrit * se),
        method=method,
    )


def two_sample_ttest(
    m1: float, s1: float, n1: int,
    m2: float, s2: float, n2: int,
    confidence: float = DEFAULT_CONFIDENCE,
) -> TTestResult:
    """
    Student's t-test with pooled variance for m1 - m2.
    """
    method = "two-sample t-test (pooled variance)"
    df = n1 + n2 - 2
    if n1 < 2 or n2 < 2:
        return _undefined_ttest(max(df, 0), method)

    pooled_sd = math.sqrt(((n1 - 1) * s1 ** 2 + (n2 - 1) * s2 ** 2) / df)
    se = pooled_sd * math.sqrt(1 / n1 + 1 / n2)
    if se == 0:
        logger.debug("two_sample_ttest undefined: zero pooled SD")
        return _undefined_ttest(df, method)

    diff = m1 - m2
    t = diff / se
    tcrit = t_critical(confidence, df)
    return TTestResult(
        t=t,
        df=df,
        p_value=t_pvalue(t, df),
        estimate=diff,
        se=se,
        ci=(diff - tcrit * se, diff + tcrit * se),
        method=method,
    )


# -------------------------
# Two proportions
# -------------------------

@dataclass(frozen=True)
class RiskZTest:
    risk_exposed: float
    risk_unexposed: float
    risk_difference: float
    z: float
    p_value: float
    ci: Tuple[float, float]
    alternative: str
    pooled: bool
    defined: bool = True


def two_proportion_ztest(
    table: Table2x2,
    confidence: float = DEFAULT_CONFIDENCE,
    alternative: Literal["two-sided", "less", "greater"] = "two-sided",
    pooled: bool = True,
) -> RiskZTest:
    """
    z-test of H0: risk in the exposed row == risk in the unexposed row.

    The test SE is pooled under H0 unless pooled=False; the interval for the
    risk difference always uses the unpooled (Wald) SE, matching
    risk_difference(). "greater" tests r_exposed > r_unexposed. An empty
    exposure row gives an undefined result; two identical degenerate risks
    (both 0 or both 1) give z = 0, p = 1.
    """
    if alternative not in ("two-sided", "less", "greater"):
        raise ValueError("alternative must be 'two-sided', 'less', or 'greater'")

    n1, n2 = table.rows
    if n1 == 0 or n2 == 0:
        logger.debug("two_proportion_ztest undefined: empty exposure row in %s", table)
        return RiskZTest(
            math.nan, math.nan, math.nan, math.nan, math.nan,
            (math.nan, math.nan), alternative, pooled, defined=False,
        )

    r1 = table.a / n1
    r2 = table.c / n2
    rd = r1 - r2
    se_wald = math.sqrt(r1 * (1 - r1) / n1 + r2 * (1 - r2) / n2)
    if pooled:
        r = (table.a + table.c) / table.n
        se_test = math.sqrt(r * (1 - r) * (1 / n1 + 1 / n2))
    else:
        se_test = se_wald

    if se_test == 0:
        z, p = 0.0, 1.0
    else:
        z = rd / se_test
        if alternative == "two-sided":
            p = 2 * (1 - normal_cdf(abs(z)))
        elif alternative == "greater":
            p = 1 - normal_cdf(z)
        else:
            p = normal_cdf(z)

    zc = z_critical(confidence)
    return RiskZTest(
        risk_exposed=r1,
        risk_unexposed=r2,
        risk_difference=rd,
        z=z,
        p_value=min(1.0, max(0.0, p)),
        ci=(rd - zc * se_wald, rd + zc * se_wald),
        alternative=alternative,
        pooled=pooled,
    )
