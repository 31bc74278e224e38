from __future__ import annotations

import argparse
import json
import logging
from typing import Optional, Sequence

from .epi import Table2x2, chi_square_2x2, odds_ratio, risk_difference, risk_ratio, standardized_ratio
from .intervals import DEFAULT_CONFIDENCE, poisson_rate_interval, proportion_intervals, variance_interval
from .power import (
    cluster_adjustment,
    power_two_means,
    power_two_proportions,
    sample_size_noninferiority,
    sample_size_paired,
    sample_size_two_means,
    sample_size_two_proportions,
)
from .stats import two_proportion_ztest
from .utils import as_report_dict


def _add_confidence(p: argparse.ArgumentParser) -> None:
    p.add_argument("--conf", type=float, default=DEFAULT_CONFIDENCE, help="Confidence level in percent")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="epistat", description="Confidence intervals, effect measures and sample size.")
    ap.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG shows sentinel policies)")
    sub = ap.add_subparsers(dest="command", required=True)

    p = sub.add_parser("proportion", help="Wald/Wilson/Clopper-Pearson intervals for x/n")
    p.add_argument("x", type=int)
    p.add_argument("n", type=int)
    _add_confidence(p)

    p = sub.add_parser("poisson", help="Exact and Byar intervals for a rate k/T")
    p.add_argument("k", type=int)
    p.add_argument("T", type=float)
    _add_confidence(p)

    p = sub.add_parser("variance", help="Chi-square interval for a variance and SD")
    p.add_argument("sd", type=float)
    p.add_argument("n", type=int)
    _add_confidence(p)

    p = sub.add_parser("table", help="RR, OR, RD, chi-square and z-test for a 2x2 table")
    for cell in ("a", "b", "c", "d"):
        p.add_argument(cell, type=float)
    p.add_argument("--yates", action="store_true")
    _add_confidence(p)

    p = sub.add_parser("smr", help="Standardized ratio observed/expected")
    p.add_argument("observed", type=int)
    p.add_argument("expected", type=float)
    _add_confidence(p)

    p = sub.add_parser("sample-size", help="Sample size for common designs")
    p.add_argument("design", choices=["means", "proportions", "paired", "noninferiority"])
    p.add_argument("--m1", type=float)
    p.add_argument("--m2", type=float)
    p.add_argument("--sd", type=float)
    p.add_argument("--p1", type=float)
    p.add_argument("--p2", type=float)
    p.add_argument("--diff", type=float)
    p.add_argument("--margin", type=float)
    p.add_argument("--ratio", type=float, default=1.0)
    p.add_argument("--power", type=float, default=0.8)
    p.add_argument("--alpha", type=float, default=None,
                   help="Defaults to 0.05 (two-sided), 0.025 for noninferiority (one-sided)")
    p.add_argument("--cluster-size", type=float, default=None)
    p.add_argument("--icc", type=float, default=0.0)

    p = sub.add_parser("power", help="Power given n")
    p.add_argument("design", choices=["means", "proportions"])
    p.add_argument("--n1", type=int, required=True)
    p.add_argument("--n2", type=int, required=True)
    p.add_argument("--m1", type=float)
    p.add_argument("--m2", type=float)
    p.add_argument("--sd", type=float)
    p.add_argument("--p1", type=float)
    p.add_argument("--p2", type=float)
    p.add_argument("--alpha", type=float, default=0.05)
    return ap


def _sample_size(args: argparse.Namespace) -> dict:
    if args.design == "means":
        res = sample_size_two_means(args.m1, args.m2, args.sd, args.power, args.alpha or 0.05, args.ratio)
    elif args.design == "proportions":
        res = sample_size_two_proportions(args.p1, args.p2, args.power, args.alpha or 0.05, args.ratio)
    elif args.design == "paired":
        res = sample_size_paired(args.diff, args.sd, args.power, args.alpha or 0.05)
    else:
        res = sample_size_noninferiority(args.p1, args.p2, args.margin, args.power, args.alpha or 0.025)

    out = {"sample_size": as_report_dict(res, json_safe=True)}
    if args.cluster_size and res.defined:
        n = res.n_total if res.n_total is not None else res.n
        out["cluster"] = as_report_dict(cluster_adjustment(n, args.cluster_size, args.icc))
    return out


def run(args: argparse.Namespace) -> dict:
    if args.command == "proportion":
        return as_report_dict(proportion_intervals(args.x, args.n, args.conf), json_safe=True)
    if args.command == "poisson":
        return as_report_dict(poisson_rate_interval(args.k, args.T, args.conf), json_safe=True)
    if args.command == "variance":
        return as_report_dict(variance_interval(args.sd, args.n, args.conf), json_safe=True)
    if args.command == "table":
        table = Table2x2(args.a, args.b, args.c, args.d)
        return {
            "risk_ratio": as_report_dict(risk_ratio(table, args.conf), json_safe=True),
            "odds_ratio": as_report_dict(odds_ratio(table, args.conf), json_safe=True),
            "risk_difference": as_report_dict(risk_difference(table, args.conf), json_safe=True),
            "chi_square": as_report_dict(chi_square_2x2(table, args.yates), json_safe=True),
            "ztest": as_report_dict(two_proportion_ztest(table, args.conf), json_safe=True),
        }
    if args.command == "smr":
        return as_report_dict(standardized_ratio(args.observed, args.expected, args.conf), json_safe=True)
    if args.command == "sample-size":
        return _sample_size(args)
    if args.design == "means":
        res = power_two_means(args.n1, args.n2, args.m1, args.m2, args.sd, args.alpha)
    else:
        res = power_two_proportions(args.n1, args.n2, args.p1, args.p2, args.alpha)
    return as_report_dict(res, json_safe=True)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    print(json.dumps(run(args), indent=2))


if __name__ == "__main__":
    main()
