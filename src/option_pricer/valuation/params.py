"""Parameter classes for method-specific valuation configuration.

Each pricing method (analytical, binomial, Monte Carlo) has its own parameter
class that explicitly documents the configuration options available for that
method.
"""

from dataclasses import dataclass

import numpy as np

from ..exceptions import ValidationError


@dataclass(frozen=True, slots=True)
class AnalyticalParams:
    """Numerical floors for closed-form Black-Scholes valuation.

    Attributes
    ==========
    min_maturity:
        Lower bound applied to time to expiry inside d1/d2.
    min_volatility:
        Volatility below this value is treated as deterministic; also the
        lower bound applied to volatility inside d1/d2.
    min_price:
        Lower bound applied to spot and strike inside the log-moneyness.
    """

    min_maturity: float = 1e-12
    min_volatility: float = 1e-12
    min_price: float = 1e-12

    def __post_init__(self):
        for name in ("min_maturity", "min_volatility", "min_price"):
            value = getattr(self, name)
            if not (np.isfinite(value) and value > 0.0):
                raise ValidationError(f"{name} must be positive and finite, got {value}")


@dataclass(frozen=True, slots=True)
class BinomialParams:
    """Parameters for binomial tree option valuation through ``OptionValuation``.

    Attributes
    ==========
    depth:
        Number of time steps in the binomial tree.
        More steps increase accuracy but also computation time.
        Default: 500.
    closed_form:
        Price with the closed-form binomial expectation instead of backward
        induction (European contracts only).
    log_timings:
        Log wall-clock timings at DEBUG level.
    """

    depth: int = 500
    closed_form: bool = False
    log_timings: bool = False

    def __post_init__(self):
        if self.depth < 1:
            raise ValidationError(f"depth must be >= 1, got {self.depth}")


@dataclass(frozen=True, slots=True)
class MonteCarloParams:
    """Parameters for Monte Carlo option valuation.

    Attributes
    ==========
    num_paths:
        Number of samples generated by ``OptionValuation.present_value``.
        Engines used directly take the count in ``generate``.
    random_seed:
        Root seed for reproducibility. If None, uses fresh OS entropy.
        Worker streams are spawned from it, so results reproduce for a
        fixed ``max_workers``.
    max_workers:
        Upper bound on worker threads, itself capped at ``os.cpu_count()``.
        None means ``os.cpu_count()``.
    batch_size:
        Path pairs simulated per vectorised batch inside a worker.
    control_variate:
        Substitute the closed-form price for European, path-independent
        contracts.
    z_score:
        Normal quantile used for the confidence interval (1.96 -> 95%).
    std_error_warn_ratio:
        Log a warning when std_error / |price| exceeds this ratio.
        None disables the check.
    log_timings:
        Log wall-clock timings at DEBUG level.
    """

    num_paths: int = 100_000
    random_seed: int | None = None
    max_workers: int | None = None
    batch_size: int = 4096
    control_variate: bool = True
    z_score: float = 1.96
    std_error_warn_ratio: float | None = None
    log_timings: bool = False

    def __post_init__(self):
        if self.num_paths < 1:
            raise ValidationError(f"num_paths must be >= 1, got {self.num_paths}")
        if self.max_workers is not None and self.max_workers < 1:
            raise ValidationError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.batch_size < 1:
            raise ValidationError(f"batch_size must be >= 1, got {self.batch_size}")
        if not (np.isfinite(self.z_score) and self.z_score > 0.0):
            raise ValidationError(f"z_score must be positive, got {self.z_score}")
        if self.std_error_warn_ratio is not None and self.std_error_warn_ratio <= 0.0:
            raise ValidationError(
                f"std_error_warn_ratio must be positive, got {self.std_error_warn_ratio}"
            )


# Type alias for any valuation parameters
ValuationParams = AnalyticalParams | BinomialParams | MonteCarloParams
