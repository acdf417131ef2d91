"""Valuation of European and American options using the binomial option pricing model of
Cox-Ross-Rubinstein
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING
import logging
import numpy as np
from ..exceptions import (
    ArbitrageViolationError,
    ConfigurationError,
    LatticeIndexError,
    PreconditionError,
    UnsupportedFeatureError,
    ValidationError,
)
from ..lattice import TriangularLattice
from ..market_environment import MarketParameters
from ..utils import expected_binomial, log_timing

if TYPE_CHECKING:
    from ..options import Option


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LatticeFactors:
    """One-period multiplicative factors of a binomial tree.

    Attributes
    ==========
    up:
        Gross factor U applied on an up-move.
    down:
        Gross factor D applied on a down-move.
    growth:
        One-period gross risk-free return R.

    All three must be positive and satisfy the no-arbitrage ordering
    ``D < R < U``. Use :meth:`from_returns` when quoting net returns
    (``0.05`` for 5%) and :meth:`from_volatility` for the CRR calibration.
    """

    up: float
    down: float
    growth: float

    def __post_init__(self) -> None:
        for name in ("up", "down", "growth"):
            try:
                value = float(getattr(self, name))
            except (TypeError, ValueError) as exc:
                raise ValidationError(f"LatticeFactors.{name} must be numeric") from exc
            if not np.isfinite(value) or value <= 0.0:
                raise ValidationError(
                    f"LatticeFactors.{name} must be a positive finite factor, got {value}"
                )
            object.__setattr__(self, name, value)

        if not (self.down < self.growth < self.up):
            raise ArbitrageViolationError(
                "Arbitrage condition violated: need D < R < U, got "
                f"D={self.down:.6g}, R={self.growth:.6g}, U={self.up:.6g}"
            )

    @classmethod
    def from_factors(cls, up: float, down: float, growth: float) -> LatticeFactors:
        """Build from gross factors (``1.2`` for a 20% up-move)."""
        return cls(up, down, growth)

    @classmethod
    def from_returns(cls, up: float, down: float, growth: float) -> LatticeFactors:
        """Build from net one-period returns (``0.2`` up, ``-0.2`` down, ``0.05`` rate)."""
        factors = {}
        for name, value in (("up", up), ("down", down), ("growth", growth)):
            factor = 1.0 + float(value)
            if factor <= 0.0:
                raise ValidationError(f"{name} return must be > -100%, got {value}")
            factors[name] = factor
        return cls(**factors)

    @classmethod
    def from_volatility(
        cls, rate: float, volatility: float, expiry: float, depth: int
    ) -> LatticeFactors:
        """CRR calibration: U = e^{sigma sqrt(dt)}, D = 1/U, R = e^{r dt}, dt = T / depth."""
        if depth < 1:
            raise ValidationError(f"depth must be >= 1 to derive factors, got {depth}")
        delta_t = float(expiry) / depth
        step = float(volatility) * np.sqrt(delta_t)
        return cls(np.exp(step), np.exp(-step), np.exp(float(rate) * delta_t))

    @property
    def risk_neutral_probability(self) -> float:
        """q = (R - D) / (U - D), strictly inside (0, 1)."""
        return (self.growth - self.down) / (self.up - self.down)


class LatticeEngine:
    """Cox-Ross-Rubinstein binomial pricer with optional American early exercise.

    Node ``(n, i)`` is the state after ``i`` up-moves and ``n - i`` down-moves,
    with spot ``S0 U^i D^(n-i)``. :meth:`compute` fills the option-value and
    exercise-flag lattices by backward induction; :meth:`price` returns the
    root value or, with ``closed_form=True``, the exact binomial expectation.

    Parameters
    ==========
    option: Option
        Path-independent contract; borrowed, never copied.
    depth: int
        Number of periods (>= 0).
    spot: float
        Initial spot S0 (> 0).
    factors: LatticeFactors
        One-period factors U, D, R.
    log_timings: bool
        Log compute timings at DEBUG level.
    """

    def __init__(
        self,
        option: Option,
        depth: int,
        spot: float,
        factors: LatticeFactors,
        *,
        log_timings: bool = False,
    ) -> None:
        if option is None:
            raise ConfigurationError("LatticeEngine requires an option")
        if option.is_path_dependent:
            raise UnsupportedFeatureError(
                "LatticeEngine cannot price path-dependent (Asian) options"
            )
        if not isinstance(depth, (int, np.integer)) or isinstance(depth, bool):
            raise ValidationError(f"depth must be an integer, got {type(depth).__name__}")
        if depth < 0:
            raise ValidationError(f"depth must be >= 0, got {depth}")
        spot = float(spot)
        if not np.isfinite(spot) or spot <= 0.0:
            raise ValidationError(f"spot must be positive and finite, got {spot}")
        if not isinstance(factors, LatticeFactors):
            raise ConfigurationError(
                f"factors must be LatticeFactors, got {type(factors).__name__}"
            )

        self.option = option
        self.depth = int(depth)
        self.spot = spot
        self.factors = factors
        self.log_timings = log_timings

        self._values = TriangularLattice(self.depth, dtype=float)
        self._exercise = TriangularLattice(self.depth, dtype=bool)
        self._computed = False

    @classmethod
    def from_market(
        cls,
        option: Option,
        depth: int,
        market: MarketParameters,
        *,
        log_timings: bool = False,
    ) -> LatticeEngine:
        """Build an engine whose factors are derived from rate and volatility over ``option.expiry``."""
        if option is None:
            raise ConfigurationError("LatticeEngine requires an option")
        if not isinstance(market, MarketParameters):
            raise ConfigurationError(
                f"market must be MarketParameters, got {type(market).__name__}"
            )
        factors = LatticeFactors.from_volatility(
            market.rate, market.volatility, option.expiry, depth
        )
        return cls(option, depth, market.spot, factors, log_timings=log_timings)

    @property
    def is_computed(self) -> bool:
        return self._computed

    def _level_spots(self, n: int) -> np.ndarray:
        ups = np.arange(n + 1, dtype=float)
        return self.spot * self.factors.up**ups * self.factors.down ** (n - ups)

    def spot_at(self, n: int, i: int) -> float:
        """Underlying price at node ``(n, i)``."""
        if not (0 <= n <= self.depth and 0 <= i <= n):
            raise LatticeIndexError(f"node ({n}, {i}) outside lattice of depth {self.depth}")
        return float(self.spot * self.factors.up**i * self.factors.down ** (n - i))

    def _payoffs(self, n: int) -> np.ndarray:
        return np.asarray(self.option.payoff(self._level_spots(n)), dtype=float)

    def compute(self) -> None:
        """Fill the value and exercise lattices by backward induction.

        Re-running recomputes the lattices from scratch with identical results.
        """
        q = self.factors.risk_neutral_probability
        growth = self.factors.growth
        american = bool(self.option.is_american)
        logger.debug(
            "CRR compute depth=%d q=%.6g american=%s", self.depth, q, american
        )

        with log_timing(logger, "CRR compute", self.log_timings):
            values = self._payoffs(self.depth)
            self._values.set_level(self.depth, values)
            self._exercise.set_level(self.depth, american & (values > 0.0))

            for n in range(self.depth - 1, -1, -1):
                continuation = (q * values[1:] + (1.0 - q) * values[:-1]) / growth
                if american:
                    intrinsic = self._payoffs(n)
                    exercise = intrinsic > continuation
                    values = np.where(exercise, intrinsic, continuation)
                else:
                    exercise = np.zeros(n + 1, dtype=bool)
                    values = continuation
                self._values.set_level(n, values)
                self._exercise.set_level(n, exercise)

        self._computed = True

    def _require_computed(self, label: str) -> None:
        if not self._computed:
            raise PreconditionError(f"LatticeEngine.{label} needs compute() first")

    def get(self, n: int, i: int) -> float:
        """Option value at node ``(n, i)``."""
        self._require_computed("get")
        return self._values.get_node(n, i)

    def get_exercise(self, n: int, i: int) -> bool:
        """Whether early exercise is optimal at node ``(n, i)``."""
        self._require_computed("get_exercise")
        return self._exercise.get_node(n, i)

    @property
    def value_lattice(self) -> TriangularLattice:
        self._require_computed("value_lattice")
        return self._values

    @property
    def exercise_lattice(self) -> TriangularLattice:
        self._require_computed("exercise_lattice")
        return self._exercise

    def _closed_form_price(self) -> float:
        r"""Exact binomial expectation of the terminal payoff.

        .. math::

            \frac{1}{R^N} \sum_{i=0}^{N} \binom{N}{i} q^i (1-q)^{N-i}
            \, f(S_0 U^i D^{N-i})
        """
        q = self.factors.risk_neutral_probability
        terminal = self._payoffs(self.depth)
        expectation = expected_binomial(self.depth, q, lambda ks: terminal[ks])
        return float(expectation / np.longdouble(self.factors.growth) ** self.depth)

    def price(self, closed_form: bool = False) -> float:
        """Present value at the root of the tree.

        Parameters
        ==========
        closed_form: bool
            Evaluate the closed-form binomial sum instead of backward
            induction. Only valid for European contracts.
        """
        if closed_form:
            if self.option.is_american:
                raise PreconditionError(
                    "LatticeEngine: closed form is only available for European options"
                )
            return self._closed_form_price()

        if not self._computed:
            self.compute()
        return self._values.get_node(0, 0)

    def __call__(self, closed_form: bool = False) -> float:
        return self.price(closed_form=closed_form)

    def delta(self) -> float:
        """Extract delta from the first step of the tree (Hull Ch. 13).

        .. math::

            \\Delta = \\frac{f_u - f_d}{S_u - S_d}
        """
        if self.depth < 1:
            raise ValidationError("Tree delta requires depth >= 1.")
        if not self._computed:
            self.compute()
        f_up, f_down = self._values.get_node(1, 1), self._values.get_node(1, 0)
        return (f_up - f_down) / (self.spot_at(1, 1) - self.spot_at(1, 0))
