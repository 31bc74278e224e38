"""
epistat/utils.py

Helpers for handing results to callers:
  - dataclass results -> plain dicts (JSON-friendly)
  - lists of results -> DataFrame
"""

from __future__ import annotations

import math
from dataclasses import asdict, is_dataclass
from typing import Any, Dict, Iterable

import pandas as pd


def _jsonable(x: Any) -> Any:
    if isinstance(x, float) and not math.isfinite(x):
        # JSON has no inf/nan
        return None if math.isnan(x) else ("inf" if x > 0 else "-inf")
    if isinstance(x, dict):
        return {k: _jsonable(v) for k, v in x.items()}
    if isinstance(x, (list, tuple)):
        return [_jsonable(v) for v in x]
    return x


def as_report_dict(obj, json_safe: bool = False) -> Dict:
    """
    Convert dataclass or dict-like result to a plain dict for JSON/printing.
    With json_safe=True, NaN becomes None and infinities become "inf"/"-inf".
    """
    if is_dataclass(obj):
        out = asdict(obj)
    elif isinstance(obj, dict):
        out = dict(obj)
    else:
        raise TypeError("Expected dataclass or dict.")
    return _jsonable(out) if json_safe else out


def _flatten(d: Dict, prefix: str = "") -> Dict:
    flat: Dict = {}
    for k, v in d.items():
        key = f"{prefix}{k}"
        if isinstance(v, dict):
            flat.update(_flatten(v, f"{key}_"))
        else:
            flat[key] = v
    return flat


def results_frame(results: Iterable) -> pd.DataFrame:
    """
    One row per result; nested records (e.g. IntervalEstimate fields) become
    prefixed columns such as exact_lower.
    """
    return pd.DataFrame([_flatten(as_report_dict(r)) for r in results])
