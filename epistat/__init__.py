"""
epistat: distribution approximations, confidence intervals, epidemiological
effect measures and sample size / power solvers.

Public API is re-exported here for convenience.
"""

from importlib.metadata import PackageNotFoundError, version as _version

# ---- Version ----
try:
    __version__ = _version("epistat")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

# Distributions
from .distributions import (  # noqa: F401
    TPValue,
    chi_sq_critical,
    chi_sq_pvalue,
    f_critical,
    normal_cdf,
    normal_quantile,
    t_critical,
    t_pvalue,
    z_critical,
)

# Intervals
from .intervals import (  # noqa: F401
    IntervalEstimate,
    mean_interval,
    poisson_rate_interval,
    proportion_intervals,
    variance_interval,
)

# Effect measures
from .epi import (  # noqa: F401
    Table2x2,
    chi_square_2x2,
    clinical_impact,
    diagnostic_accuracy,
    odds_ratio,
    risk_difference,
    risk_ratio,
    standardized_ratio,
    vaccine_effectiveness,
)

# Tests on summary statistics
from .stats import (  # noqa: F401
    one_sample_ttest,
    two_sample_ttest,
    two_proportion_ztest,
)

# Sample size / power
from .power import (  # noqa: F401
    SampleSizeResult,
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

__all__ = [
    "__version__",
    # distributions
    "TPValue",
    "chi_sq_critical",
    "chi_sq_pvalue",
    "f_critical",
    "normal_cdf",
    "normal_quantile",
    "t_critical",
    "t_pvalue",
    "z_critical",
    # intervals
    "IntervalEstimate",
    "mean_interval",
    "poisson_rate_interval",
    "proportion_intervals",
    "variance_interval",
    # effect measures
    "Table2x2",
    "chi_square_2x2",
    "clinical_impact",
    "diagnostic_accuracy",
    "odds_ratio",
    "risk_difference",
    "risk_ratio",
    "standardized_ratio",
    "vaccine_effectiveness",
    # tests
    "one_sample_ttest",
    "two_sample_ttest",
    "two_proportion_ztest",
    # power
    "SampleSizeResult",
    "cluster_adjustment",
    "power_curve",
    "power_noninferiority",
    "power_paired",
    "power_two_means",
    "power_two_proportions",
    "sample_size_mean_estimate",
    "sample_size_noninferiority",
    "sample_size_paired",
    "sample_size_proportion_estimate",
    "sample_size_spectrum",
    "sample_size_two_means",
    "sample_size_two_proportions",
]
