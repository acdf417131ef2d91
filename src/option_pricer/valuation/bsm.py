"""Closed-form Black-Scholes valuation of European vanilla and digital options."""

from __future__ import annotations
from typing import TYPE_CHECKING, NamedTuple
import logging
import numpy as np
from scipy.stats import norm
from ..enums import OptionType
from ..exceptions import ConfigurationError, NumericalError, UnsupportedFeatureError
from ..market_environment import MarketParameters
from .params import AnalyticalParams

if TYPE_CHECKING:
    from ..options import Option


logger = logging.getLogger(__name__)


class _BSMInputs(NamedTuple):
    """Pre-computed inputs shared by price and delta."""

    spot: float
    strike: float
    time_to_maturity: float
    df_r: float
    sigma_sqrt_t: float
    d1: float
    d2: float


def _ensure_finite(value: float, label: str) -> float:
    if not np.isfinite(value):
        raise NumericalError(f"{label} is not finite: {value}")
    return float(value)


class AnalyticalEngine:
    """Black-Scholes price and delta for European vanilla and digital payoffs.

    Parameters
    ==========
    option: Option
        European, path-independent contract. The engine only borrows it.
    market: MarketParameters
        Spot, rate and volatility; the horizon is ``option.expiry``.
    params: AnalyticalParams, optional
        Numerical floors applied inside d1/d2.

    Notes
    -----
    Expired contracts (``T <= 0``) and volatility below
    ``params.min_volatility`` are treated as deterministic: the price is the
    immediate payoff at ``S`` and delta is a step function of moneyness.
    """

    def __init__(
        self,
        option: Option,
        market: MarketParameters,
        params: AnalyticalParams | None = None,
    ) -> None:
        if option is None:
            raise ConfigurationError("AnalyticalEngine requires an option")
        if not isinstance(market, MarketParameters):
            raise ConfigurationError(
                f"market must be MarketParameters, got {type(market).__name__}"
            )
        if params is None:
            params = AnalyticalParams()
        elif not isinstance(params, AnalyticalParams):
            raise ConfigurationError(
                f"params must be AnalyticalParams, got {type(params).__name__}"
            )
        if option.is_path_dependent:
            raise UnsupportedFeatureError("AnalyticalEngine cannot price path-dependent options")
        if option.is_american:
            raise UnsupportedFeatureError("AnalyticalEngine only prices European options")

        self.option = option
        self.market = market
        self.params = params
        self._is_digital = bool(getattr(option, "is_digital", False))

    @property
    def _is_call(self) -> bool:
        return self.option.option_type is OptionType.CALL

    def _is_deterministic(self) -> bool:
        return self.option.expiry <= 0.0 or self.market.volatility < self.params.min_volatility

    def _bsm_inputs(self) -> _BSMInputs:
        """Compute d1/d2 with maturity, volatility and price floors applied."""
        p = self.params
        spot = self.market.spot
        strike = float(self.option.strike)
        T = max(float(self.option.expiry), p.min_maturity)
        vol = max(self.market.volatility, p.min_volatility)

        sigma_sqrt_t = vol * np.sqrt(T)
        log_moneyness = np.log(max(spot, p.min_price) / max(strike, p.min_price))
        d1 = (log_moneyness + (self.market.rate + 0.5 * vol**2) * T) / sigma_sqrt_t
        d2 = d1 - sigma_sqrt_t
        logger.debug("BSM d1=%.6g d2=%.6g T=%.6g vol=%.6g", d1, d2, T, vol)
        return _BSMInputs(
            spot=spot,
            strike=strike,
            time_to_maturity=T,
            df_r=float(np.exp(-self.market.rate * T)),
            sigma_sqrt_t=float(sigma_sqrt_t),
            d1=float(d1),
            d2=float(d2),
        )

    def price(self) -> float:
        """Closed-form present value."""
        if self._is_deterministic():
            return _ensure_finite(self.option.payoff(self.market.spot), "deterministic price")

        inp = self._bsm_inputs()
        if self._is_digital:
            if self._is_call:
                value = inp.df_r * norm.cdf(inp.d2)
            else:
                value = inp.df_r * norm.cdf(-inp.d2)
        elif self._is_call:
            value = inp.spot * norm.cdf(inp.d1) - inp.strike * inp.df_r * norm.cdf(inp.d2)
        else:
            value = inp.strike * inp.df_r * norm.cdf(-inp.d2) - inp.spot * norm.cdf(-inp.d1)
        return _ensure_finite(value, "BSM price")

    def __call__(self) -> float:
        return self.price()

    def delta(self) -> float:
        """Closed-form delta.

        vanilla: N(d1) for calls, N(d1) - 1 for puts
        digital: +/- e^{-rT} n(d2) / (S sigma sqrt(T))

        Deterministic regime: a step function of moneyness (1 for an
        in-the-money call, -1 for an in-the-money put, 0 otherwise) and
        0 for digitals.
        """
        if self._is_deterministic():
            if self._is_digital:
                return 0.0
            spot, strike = self.market.spot, self.option.strike
            if self._is_call:
                return 1.0 if spot > strike else 0.0
            return -1.0 if spot < strike else 0.0

        inp = self._bsm_inputs()
        if self._is_digital:
            factor = inp.df_r * norm.pdf(inp.d2) / (inp.spot * inp.sigma_sqrt_t)
            value = factor if self._is_call else -factor
        elif self._is_call:
            value = norm.cdf(inp.d1)
        else:
            value = norm.cdf(inp.d1) - 1.0
        return _ensure_finite(value, "BSM delta")
