"""Monte Carlo Simulation option valuation under risk-neutral geometric Brownian motion."""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import TYPE_CHECKING
import logging
import os
import numpy as np

from ..exceptions import (
    ConfigurationError,
    NumericalError,
    PreconditionError,
    ValidationError,
)
from ..market_environment import MarketParameters
from ..random_source import RandomSource
from ..utils import log_timing
from .bsm import AnalyticalEngine
from .params import MonteCarloParams

if TYPE_CHECKING:
    from ..options import Option


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class RunningEstimate:
    """Welford running mean / variance state.

    Attributes
    ==========
    count:
        Number of samples seen.
    mean:
        Running mean.
    m2:
        Running sum of squared deviations from the mean.
    """

    count: int = 0
    mean: float = 0.0
    m2: float = 0.0

    def update(self, sample: float) -> None:
        """Add one sample (Welford's algorithm).

        Scalar reference form; simulation workers accumulate through
        :meth:`update_batch`.
        """
        self.count += 1
        delta = sample - self.mean
        self.mean += delta / self.count
        self.m2 += delta * (sample - self.mean)

    def update_batch(self, samples: np.ndarray) -> None:
        """Add a batch of samples by merging its two-pass statistics."""
        x = np.asarray(samples, dtype=float).ravel()
        if x.size == 0:
            return
        batch_mean = float(np.mean(x))
        batch_m2 = float(np.sum((x - batch_mean) ** 2))
        self.merge(RunningEstimate(int(x.size), batch_mean, batch_m2))

    def merge(self, other: RunningEstimate) -> None:
        """Combine with another accumulator (parallel variant of Welford's algorithm).

        n = n1 + n2, delta = m2 - m1, mean = m1 + delta * n2 / n,
        M2 = M2_1 + M2_2 + delta^2 * n1 * n2 / n
        """
        if other.count == 0:
            return
        if self.count == 0:
            self.count, self.mean, self.m2 = other.count, other.mean, other.m2
            return
        total = self.count + other.count
        delta = other.mean - self.mean
        self.mean += delta * (other.count / total)
        self.m2 += other.m2 + delta * delta * (self.count * other.count / total)
        self.count = total

    def copy(self) -> RunningEstimate:
        return RunningEstimate(self.count, self.mean, self.m2)

    @property
    def variance(self) -> float:
        """Sample variance M2 / (n - 1)."""
        if self.count < 2:
            raise PreconditionError("variance needs at least two samples")
        return self.m2 / (self.count - 1)

    @property
    def standard_error(self) -> float:
        """Standard error of the mean, sqrt(variance / n)."""
        return float(np.sqrt(self.variance / self.count))


class MonteCarloEngine:
    """Multi-threaded Monte Carlo pricer with antithetic variates.

    Paths follow risk-neutral GBM on the option's observation grid. Each
    normal draw ``z`` drives two trajectories (``+z`` and ``-z``). For
    European path-independent contracts the discounted sample is replaced by
    the closed-form Black-Scholes value (control variate), which makes the
    estimator exact with zero variance.

    Samples accumulate across :meth:`generate` calls; the accumulator is only
    reset by building a new engine.

    Parameters
    ==========
    option: Option
        Contract to price; borrowed and only read by worker threads.
    market: MarketParameters
        Spot, rate and volatility.
    params: MonteCarloParams, optional
        Seed, worker count, batch size and confidence settings.
    """

    def __init__(
        self,
        option: Option,
        market: MarketParameters,
        params: MonteCarloParams | None = None,
    ) -> None:
        if option is None:
            raise ConfigurationError("MonteCarloEngine requires an option")
        if not isinstance(market, MarketParameters):
            raise ConfigurationError(
                f"market must be MarketParameters, got {type(market).__name__}"
            )
        if params is None:
            params = MonteCarloParams()
        elif not isinstance(params, MonteCarloParams):
            raise ConfigurationError(
                f"params must be MonteCarloParams, got {type(params).__name__}"
            )

        self.option = option
        self.market = market
        self.params = params

        if option.is_path_dependent:
            times = np.asarray(option.observation_times, dtype=float)
        else:
            times = np.asarray([option.expiry], dtype=float)
        if times.ndim != 1 or times.size == 0:
            raise ValidationError("observation times must be a non-empty sequence")
        if not np.all(np.isfinite(times)):
            raise ValidationError("observation times must be finite")
        if times[0] < 0.0:
            raise ValidationError("observation times must start at or after zero")
        if np.any(np.diff(times) <= 0.0):
            raise ValidationError("observation times must be strictly increasing")

        # Per-step coefficients, read-only once workers start.
        delta_t = np.diff(times, prepend=0.0)
        sigma = market.volatility
        self._time_grid = times
        self._drift_dt = (market.rate - 0.5 * sigma**2) * delta_t
        self._vol_sqrt_dt = sigma * np.sqrt(delta_t)
        self._discount = float(np.exp(-market.rate * times[-1]))

        self._control_value: float | None = None
        if params.control_variate and not option.is_path_dependent and not option.is_american:
            self._control_value = AnalyticalEngine(option, market).price()
            logger.debug("MC control variate reference=%.10g", self._control_value)
        if option.is_american:
            logger.warning(
                "MonteCarloEngine does not model early exercise; "
                "American contract priced as European"
            )

        self._estimate = RunningEstimate()
        self._random_source = RandomSource(params.random_seed)

    @property
    def time_grid(self) -> np.ndarray:
        return self._time_grid.copy()

    @property
    def has_control_variate(self) -> bool:
        return self._control_value is not None

    @property
    def num_paths(self) -> int:
        return self._estimate.count

    @property
    def estimate(self) -> RunningEstimate:
        """Snapshot of the running estimate."""
        return self._estimate.copy()

    def _simulate_chunk(self, num_samples: int, source: RandomSource) -> RunningEstimate:
        """Simulate ``num_samples`` discounted payoffs in antithetic pairs.

        Runs on a worker thread: touches only its own source and accumulator.
        """
        stats = RunningEstimate()
        remaining = num_samples
        spot = self.market.spot

        while remaining > 0:
            pairs = min(self.params.batch_size, (remaining + 1) // 2)
            z = source.normal((pairs, self._drift_dt.size))
            shock = self._vol_sqrt_dt * z
            path_pos = spot * np.exp(np.cumsum(self._drift_dt + shock, axis=1))
            path_neg = spot * np.exp(np.cumsum(self._drift_dt - shock, axis=1))

            payoff_pos = self.option.payoff_path(path_pos)
            payoff_neg = self.option.payoff_path(path_neg)
            if payoff_pos is None or payoff_neg is None:
                raise ValidationError("option returned no payoff for a simulated path")

            # Interleave (+z, -z) samples; an odd count drops the last -z path.
            payoffs = np.column_stack((payoff_pos, payoff_neg)).ravel()[:remaining]
            discounted = self._discount * payoffs
            if self._control_value is not None:
                discounted = np.full(discounted.shape, self._control_value)
            if not np.all(np.isfinite(discounted)):
                raise NumericalError("non-finite discounted payoff in Monte Carlo sample")

            stats.update_batch(discounted)
            remaining -= discounted.size
        return stats

    def _worker_count(self, num_paths: int) -> int:
        hardware = os.cpu_count() or 1
        limit = min(self.params.max_workers or hardware, hardware)
        return max(1, min(num_paths, limit))

    def generate(self, num_paths: int) -> None:
        """Simulate ``num_paths`` more samples and merge them into the running estimate.

        Work is split across a bounded thread pool; the calling thread blocks
        until every worker finishes, then merges the worker accumulators in
        submission order. ``num_paths == 0`` is a no-op.
        """
        if not isinstance(num_paths, (int, np.integer)) or isinstance(num_paths, bool):
            raise ValidationError(f"num_paths must be an integer, got {type(num_paths).__name__}")
        if num_paths < 0:
            raise ValidationError(f"num_paths must be >= 0, got {num_paths}")
        if num_paths == 0:
            return

        num_workers = self._worker_count(int(num_paths))
        base, remainder = divmod(int(num_paths), num_workers)
        allocations = [base + (1 if i < remainder else 0) for i in range(num_workers)]
        sources = self._random_source.spawn(num_workers)
        logger.debug(
            "MC generate paths=%d workers=%d steps=%d", num_paths, num_workers, self._drift_dt.size
        )

        with log_timing(logger, "MC generate", self.params.log_timings):
            with ThreadPoolExecutor(max_workers=num_workers) as pool:
                futures = [
                    pool.submit(self._simulate_chunk, paths, source)
                    for paths, source in zip(allocations, sources)
                ]
            partial = [future.result() for future in futures]

        for stats in partial:
            self._estimate.merge(stats)
        self._warn_if_high_std_error()

    def _warn_if_high_std_error(self) -> None:
        """Emit a warning log if the standard error is high relative to the estimate."""
        if self._estimate.count < 2:
            return
        std_error = self._estimate.standard_error
        scale = max(abs(self._estimate.mean), 1.0e-12)
        ratio = std_error / scale
        logger.debug(
            "MC std_error=%.6g ratio=%.6g paths=%d", std_error, ratio, self._estimate.count
        )
        threshold = self.params.std_error_warn_ratio
        if threshold is not None and ratio > threshold:
            logger.warning(
                "MC standard error high: std_error=%.6g ratio=%.6g (>%.3g) paths=%d",
                std_error,
                ratio,
                threshold,
                self._estimate.count,
            )

    def price(self) -> float:
        """Running mean of the discounted payoffs."""
        if self._estimate.count == 0:
            raise PreconditionError(
                "MonteCarloEngine: call generate() before requesting price"
            )
        return float(self._estimate.mean)

    def __call__(self) -> float:
        return self.price()

    def standard_error(self) -> float:
        if self._estimate.count < 2:
            raise PreconditionError(
                "MonteCarloEngine: need at least two paths for a standard error"
            )
        return self._estimate.standard_error

    def confidence_interval(self) -> tuple[float, float]:
        """Normal confidence interval ``mean -/+ z * se`` (95% by default).

        A zero standard error (perfect control variate) is widened to a
        machine-epsilon half-width so the interval never has zero width.
        """
        if self._estimate.count < 2:
            raise PreconditionError(
                "MonteCarloEngine: need at least two paths for confidence interval"
            )
        mean = float(self._estimate.mean)
        std_error = self._estimate.standard_error
        if std_error == 0.0:
            std_error = float(np.finfo(float).eps) * (1.0 + abs(mean))
        half_width = self.params.z_score * std_error
        return mean - half_width, mean + half_width
