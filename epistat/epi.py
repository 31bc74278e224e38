"""
epistat/epi.py

Epidemiological effect measures on 2x2 tables and observed/expected counts.

Table layout:

                 cases   non-cases
    exposed        a         b
    unexposed      c         d

Zero-cell policy: when any cell is 0, the ratio measures (RR, OR) add 0.5 to
every cell (Haldane-Anscombe) for both the point estimate and the log-scale
SE. The risk difference always uses the uncorrected table.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .distributions import chi_sq_pvalue, z_critical
from .intervals import DEFAULT_CONFIDENCE, IntervalEstimate, byar_bounds, wilson_interval

logger = logging.getLogger(__name__)

HALDANE_CORRECTION = 0.5


@dataclass(frozen=True)
class Table2x2:
    a: float  # exposed, case
    b: float  # exposed, non-case
    c: float  # unexposed, case
    d: float  # unexposed, non-case

    def __post_init__(self) -> None:
        if min(self.a, self.b, self.c, self.d) < 0:
            raise ValueError("2x2 cell counts must be >= 0")

    @classmethod
    def from_counts(
        cls,
        exposed_cases: float,
        exposed_controls: float,
        unexposed_cases: float,
        unexposed_controls: float,
    ) -> "Table2x2":
        return cls(exposed_cases, exposed_controls, unexposed_cases, unexposed_controls)

    @property
    def n(self) -> float:
        return self.a + self.b + self.c + self.d

    @property
    def rows(self) -> Tuple[float, float]:
        return self.a + self.b, self.c + self.d

    @property
    def cols(self) -> Tuple[float, float]:
        return self.a + self.c, self.b + self.d

    @property
    def has_zero_cell(self) -> bool:
        return 0 in (self.a, self.b, self.c, self.d)

    @property
    def has_zero_marginal(self) -> bool:
        return 0 in self.rows + self.cols

    def continuity_corrected(self, amount: float = HALDANE_CORRECTION) -> "Table2x2":
        """
        Returns a new table with `amount` added to every cell if any cell is
        zero, otherwise self.
        """
        if not self.has_zero_cell:
            return self
        return Table2x2(self.a + amount, self.b + amount, self.c + amount, self.d + amount)

    def swap_exposure(self) -> "Table2x2":
        return Table2x2(self.c, self.d, self.a, self.b)


# -------------------------
# Ratio measures
# -------------------------

def _log_interval(value: float, se: float, z: float, corrected: bool) -> IntervalEstimate:
    log_v = math.log(value)
    return IntervalEstimate(
        value=value,
        lower=math.exp(log_v - z * se),
        upper=math.exp(log_v + z * se),
        corrected=corrected,
    )


def risk_ratio(table: Table2x2, confidence: float = DEFAULT_CONFIDENCE) -> IntervalEstimate:
    """
    Risk ratio [a/(a+b)] / [c/(c+d)] with a log (Taylor series) interval.

    Undefined when any row or column total is 0.
    """
    if table.has_zero_marginal:
        logger.debug("risk_ratio undefined: zero marginal in %s", table)
        return IntervalEstimate.undefined()

    t = table.continuity_corrected()
    n1, n2 = t.rows
    rr = (t.a / n1) / (t.c / n2)
    se = math.sqrt((1 / t.a - 1 / n1) + (1 / t.c - 1 / n2))
    return _log_interval(rr, se, z_critical(confidence), t is not table)


def odds_ratio(table: Table2x2, confidence: float = DEFAULT_CONFIDENCE) -> IntervalEstimate:
    """
    Odds ratio ad/bc with Woolf's log interval.

    Undefined when any row or column total is 0.
    """
    if table.has_zero_marginal:
        logger.debug("odds_ratio undefined: zero marginal in %s", table)
        return IntervalEstimate.undefined()

    t = table.continuity_corrected()
    or_ = (t.a * t.d) / (t.b * t.c)
    se = math.sqrt(1 / t.a + 1 / t.b + 1 / t.c + 1 / t.d)
    return _log_interval(or_, se, z_critical(confidence), t is not table)


# -------------------------
# Risk difference
# -------------------------

@dataclass(frozen=True)
class RiskDifference:
    value: float
    lower: float
    upper: float
    nnt: float  # math.inf when value == 0
    defined: bool = True


def number_needed(difference: float) -> float:
    if difference == 0:
        return math.inf
    # round first so float noise (10.000000000000002) doesn't bump the ceiling
    return float(math.ceil(round(abs(1 / difference), 9)))


def risk_difference(table: Table2x2, confidence: float = DEFAULT_CONFIDENCE) -> RiskDifference:
    """
    r1 - r2 with a Wald interval, on the uncorrected table.

    Undefined when either exposure row is empty.
    """
    n1, n2 = table.rows
    if n1 == 0 or n2 == 0:
        logger.debug("risk_difference undefined: empty exposure row in %s", table)
        return RiskDifference(math.nan, math.nan, math.nan, math.nan, defined=False)

    r1 = table.a / n1
    r2 = table.c / n2
    rd = r1 - r2
    se = math.sqrt(r1 * (1 - r1) / n1 + r2 * (1 - r2) / n2)
    z = z_critical(confidence)

    return RiskDifference(
        value=rd,
        lower=rd - z * se,
        upper=rd + z * se,
        nnt=number_needed(rd),
    )


# -------------------------
# Standardized ratios
# -------------------------

def standardized_ratio(
    observed: int,
    expected: float,
    confidence: float = DEFAULT_CONFIDENCE,
) -> IntervalEstimate:
    """
    SMR / SIR = observed / expected, with Byar's Poisson limits scaled by
    expected. Undefined for expected <= 0.
    """
    if observed < 0:
        raise ValueError("observed must be >= 0")
    if expected <= 0:
        logger.debug("standardized_ratio undefined: expected=%s", expected)
        return IntervalEstimate.undefined()

    low, high = byar_bounds(observed, z_critical(confidence))
    return IntervalEstimate(observed / expected, low / expected, high / expected)


# -------------------------
# Chi-square test of independence
# -------------------------

@dataclass(frozen=True)
class ChiSquareResult:
    chi2: float
    p_value: float
    df: int
    yates: bool
    defined: bool = True
    note: Optional[str] = None


def chi_square_2x2(table: Table2x2, yates: bool = False) -> ChiSquareResult:
    """
    chi2 = n(|ad - bc| - c)^2 / (R1 R2 C1 C2), c = n/2 with Yates' correction.
    """
    if table.has_zero_marginal:
        return ChiSquareResult(
            math.nan, math.nan, 1, yates,
            defined=False,
            note="Table contains a row or column with zero totals.",
        )

    n = table.n
    r1, r2 = table.rows
    c1, c2 = table.cols
    num = abs(table.a * table.d - table.b * table.c)
    if yates:
        num = max(0.0, num - n / 2)
    chi2 = n * num ** 2 / (r1 * r2 * c1 * c2)
    return ChiSquareResult(chi2, chi_sq_pvalue(chi2, 1), 1, yates)


# -------------------------
# Diagnostic accuracy
# -------------------------

@dataclass(frozen=True)
class DiagnosticAccuracy:
    sensitivity: IntervalEstimate
    specificity: IntervalEstimate
    ppv: float
    npv: float
    lr_positive: float
    lr_negative: float
    notes: Tuple[str, ...] = ()


def _ratio(num: float, den: float, name: str, notes: list) -> float:
    if den == 0:
        notes.append(f"{name} not computable (zero denominator)")
        return math.nan
    return num / den


def diagnostic_accuracy(
    tp: int,
    fp: int,
    fn: int,
    tn: int,
    prevalence: Optional[float] = None,
    confidence: float = DEFAULT_CONFIDENCE,
) -> DiagnosticAccuracy:
    """
    Sensitivity, specificity (with Wilson intervals), predictive values and
    likelihood ratios. With `prevalence` (a fraction in [0, 1]) the predictive
    values are recomputed by Bayes' rule instead of read off the table.
    """
    if min(tp, fp, fn, tn) < 0:
        raise ValueError("counts must be >= 0")
    if prevalence is not None and not (0 <= prevalence <= 1):
        raise ValueError("prevalence must be in [0,1]")

    notes: list = []
    sens_ci = wilson_interval(tp, tp + fn, confidence)
    spec_ci = wilson_interval(tn, tn + fp, confidence)
    if not sens_ci.defined:
        notes.append("sensitivity not computable (no diseased subjects)")
    if not spec_ci.defined:
        notes.append("specificity not computable (no healthy subjects)")
    sens, spec = sens_ci.value, spec_ci.value

    if prevalence is None:
        ppv = _ratio(tp, tp + fp, "PPV", notes)
        npv = _ratio(tn, tn + fn, "NPV", notes)
    else:
        ppv = _ratio(sens * prevalence, sens * prevalence + (1 - spec) * (1 - prevalence), "PPV", notes)
        npv = _ratio(spec * (1 - prevalence), spec * (1 - prevalence) + (1 - sens) * prevalence, "NPV", notes)

    lr_pos = _ratio(sens, 1 - spec, "LR+", notes)
    lr_neg = _ratio(1 - sens, spec, "LR-", notes)

    return DiagnosticAccuracy(
        sensitivity=sens_ci,
        specificity=spec_ci,
        ppv=ppv,
        npv=npv,
        lr_positive=lr_pos,
        lr_negative=lr_neg,
        notes=tuple(notes),
    )


# -------------------------
# Impact measures
# -------------------------

@dataclass(frozen=True)
class ClinicalImpact:
    arr: float
    rrr: float
    nnt: float
    nnh: Optional[float]
    defined: bool = True


def clinical_impact(risk_exposed: float, risk_control: float) -> ClinicalImpact:
    """
    Absolute and relative risk reduction with NNT (and NNH when the exposed
    risk is higher). RRR is undefined when the control risk is 0.
    """
    for r in (risk_exposed, risk_control):
        if not (0 <= r <= 1):
            raise ValueError("risks must be in [0,1]")

    arr = abs(risk_control - risk_exposed)
    nnh = number_needed(risk_exposed - risk_control) if risk_exposed > risk_control else None
    if risk_control == 0:
        return ClinicalImpact(arr, math.nan, number_needed(arr), nnh, defined=False)
    return ClinicalImpact(arr, arr / risk_control, number_needed(arr), nnh)


@dataclass(frozen=True)
class VaccineEffectiveness:
    ve: float
    rr: float
    defined: bool = True


def vaccine_effectiveness(risk_vaccinated: float, risk_unvaccinated: float) -> VaccineEffectiveness:
    if risk_unvaccinated <= 0:
        return VaccineEffectiveness(math.nan, math.nan, defined=False)
    rr = risk_vaccinated / risk_unvaccinated
    return VaccineEffectiveness(ve=1 - rr, rr=rr)
