"""
epistat/accuracy.py

Measured accuracy of the closed-form approximations against scipy.stats
reference quantiles. The engine itself never calls scipy; this module exists
to characterise where the approximations can be trusted.

Each function returns a DataFrame with one row per grid point:
  approx, reference, abs_error, rel_error
"""

from __future__ import annotations

from typing import Iterable, Sequence

import numpy as np
import pandas as pd
from scipy import stats

from .distributions import chi_sq_critical, f_critical, normal_quantile, t_critical


def _frame(rows: list) -> pd.DataFrame:
    df = pd.DataFrame(rows)
    df["abs_error"] = (df["approx"] - df["reference"]).abs()
    df["rel_error"] = df["abs_error"] / df["reference"].abs()
    return df


def normal_quantile_envelope(probs: Iterable[float]) -> pd.DataFrame:
    rows = [
        {"p": float(p), "approx": normal_quantile(float(p)), "reference": float(stats.norm.ppf(p))}
        for p in np.asarray(list(probs), dtype=float)
    ]
    return _frame(rows)


def t_critical_envelope(
    dfs: Iterable[int],
    confidences: Sequence[float] = (90.0, 95.0, 99.0),
) -> pd.DataFrame:
    rows = []
    for df in dfs:
        for conf in confidences:
            alpha = 1 - conf / 100
            rows.append({
                "df": int(df),
                "confidence": conf,
                "approx": t_critical(conf, df),
                "reference": float(stats.t.ppf(1 - alpha / 2, df)),
            })
    return _frame(rows)


def chi_sq_critical_envelope(
    dfs: Iterable[int],
    upper_tail: Sequence[float] = (0.975, 0.95, 0.5, 0.05, 0.025),
) -> pd.DataFrame:
    rows = []
    for df in dfs:
        for p in upper_tail:
            rows.append({
                "df": int(df),
                "p": p,
                "approx": chi_sq_critical(p, df),
                "reference": float(stats.chi2.isf(p, df)),
            })
    return _frame(rows)


def f_critical_envelope(
    d1_values: Iterable[int],
    d2_values: Iterable[int],
    p: float = 0.975,
) -> pd.DataFrame:
    d2_list = list(d2_values)
    rows = []
    for d1 in d1_values:
        for d2 in d2_list:
            rows.append({
                "d1": int(d1),
                "d2": int(d2),
                "p": p,
                "approx": f_critical(p, d1, d2),
                "reference": float(stats.f.ppf(p, d1, d2)),
            })
    return _frame(rows)
