"""Single entry point that routes an option to one pricing engine."""

from __future__ import annotations
from typing import TYPE_CHECKING
import logging
from ..enums import PricingMethod
from ..exceptions import ConfigurationError, UnsupportedFeatureError
from ..market_environment import MarketParameters
from .binomial import LatticeEngine
from .bsm import AnalyticalEngine
from .monte_carlo import MonteCarloEngine
from .params import AnalyticalParams, BinomialParams, MonteCarloParams, ValuationParams

if TYPE_CHECKING:
    from ..options import Option

logger = logging.getLogger(__name__)

_DEFAULT_PARAMS: dict[PricingMethod, type] = {
    PricingMethod.BSM: AnalyticalParams,
    PricingMethod.BINOMIAL: BinomialParams,
    PricingMethod.MONTE_CARLO: MonteCarloParams,
}


class OptionValuation:
    """Price one option with one engine.

    Parameters
    ----------
    option : Option
        Contract to price.
    market : MarketParameters
        Spot, rate and volatility.
    pricing_method : PricingMethod
        BSM, BINOMIAL or MONTE_CARLO.
    params : ValuationParams, optional
        Method-specific parameters; defaults to the method's parameter class.

    Examples
    --------
    >>> option = OptionSpec.american(OptionType.PUT, strike=101.0, expiry=5.0)
    >>> market = MarketParameters(spot=100.0, rate=0.01, volatility=0.1)
    >>> OptionValuation(option, market, PricingMethod.BINOMIAL).present_value()  # doctest: +SKIP
    """

    def __init__(
        self,
        option: Option,
        market: MarketParameters,
        pricing_method: PricingMethod,
        params: ValuationParams | None = None,
    ) -> None:
        if not isinstance(pricing_method, PricingMethod):
            raise ConfigurationError(
                f"pricing_method must be PricingMethod enum, got {type(pricing_method).__name__}"
            )
        expected = _DEFAULT_PARAMS[pricing_method]
        if params is None:
            params = expected()
        elif not isinstance(params, expected):
            raise ConfigurationError(
                f"{pricing_method.value} valuation requires {expected.__name__}, "
                f"got {type(params).__name__}"
            )

        self.option = option
        self.market = market
        self.pricing_method = pricing_method
        self.params = params

        if pricing_method is PricingMethod.BSM:
            self._engine = AnalyticalEngine(option, market, params)
        elif pricing_method is PricingMethod.BINOMIAL:
            self._engine = LatticeEngine.from_market(
                option, params.depth, market, log_timings=params.log_timings
            )
        else:
            self._engine = MonteCarloEngine(option, market, params)
        logger.debug(
            "OptionValuation method=%s engine=%s",
            pricing_method.value,
            type(self._engine).__name__,
        )

    @property
    def engine(self) -> AnalyticalEngine | LatticeEngine | MonteCarloEngine:
        return self._engine

    def present_value(self) -> float:
        """Return the present value from the selected engine."""
        if self.pricing_method is PricingMethod.BINOMIAL:
            return self._engine.price(closed_form=self.params.closed_form)
        if self.pricing_method is PricingMethod.MONTE_CARLO:
            if self._engine.num_paths == 0:
                self._engine.generate(self.params.num_paths)
            return self._engine.price()
        return self._engine.price()

    def delta(self) -> float:
        """Delta from the analytical formula or the tree; not available for Monte Carlo."""
        if self.pricing_method is PricingMethod.MONTE_CARLO:
            raise UnsupportedFeatureError("Monte Carlo valuation does not provide delta")
        return self._engine.delta()
