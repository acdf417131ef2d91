"""Tests for closed-form Black-Scholes valuation."""

import numpy as np
import pytest

from option_pricer.enums import OptionType
from option_pricer.exceptions import (
    ConfigurationError,
    UnsupportedFeatureError,
    ValidationError,
)
from option_pricer.market_environment import MarketParameters
from option_pricer.options import OptionSpec
from option_pricer.tests.helpers import (
    BS_CALL,
    BS_CALL_DELTA,
    BS_PUT,
    BS_PUT_DELTA,
    EXPIRY,
    RATE,
    SPOT,
    STRIKE,
    VOL,
)
from option_pricer.utils import put_call_parity_gap
from option_pricer.valuation import AnalyticalEngine, AnalyticalParams


class TestBSMValuation:
    """Tests for the AnalyticalEngine."""

    def test_reference_prices(self, market, euro_call, euro_put):
        assert np.isclose(AnalyticalEngine(euro_call, market).price(), BS_CALL, atol=1e-9)
        assert np.isclose(AnalyticalEngine(euro_put, market).price(), BS_PUT, atol=1e-9)

    def test_call_operator_aliases_price(self, market, euro_call):
        engine = AnalyticalEngine(euro_call, market)
        assert engine() == engine.price()

    def test_reference_deltas(self, market, euro_call, euro_put):
        assert np.isclose(AnalyticalEngine(euro_call, market).delta(), BS_CALL_DELTA, atol=1e-9)
        assert np.isclose(AnalyticalEngine(euro_put, market).delta(), BS_PUT_DELTA, atol=1e-9)

    @pytest.mark.parametrize("strike", [80.0, 100.0, 125.0])
    @pytest.mark.parametrize("expiry", [0.25, 1.0, 5.0])
    def test_put_call_parity(self, market, strike, expiry):
        call = AnalyticalEngine(OptionSpec.vanilla(OptionType.CALL, strike, expiry), market)
        put = AnalyticalEngine(OptionSpec.vanilla(OptionType.PUT, strike, expiry), market)
        gap = put_call_parity_gap(
            call_price=call.price(),
            put_price=put.price(),
            spot=SPOT,
            strike=strike,
            rate=RATE,
            expiry=expiry,
        )
        assert abs(gap) < 1e-10

    def test_digital_call_put_sum_to_discount_factor(self, market):
        call = OptionSpec.digital(OptionType.CALL, STRIKE, EXPIRY)
        put = OptionSpec.digital(OptionType.PUT, STRIKE, EXPIRY)
        total = AnalyticalEngine(call, market).price() + AnalyticalEngine(put, market).price()
        assert np.isclose(total, np.exp(-RATE * EXPIRY), atol=1e-12)

    @pytest.mark.parametrize("option_type", [OptionType.CALL, OptionType.PUT])
    @pytest.mark.parametrize("digital", [False, True])
    def test_delta_matches_finite_difference(self, option_type, digital):
        factory = OptionSpec.digital if digital else OptionSpec.vanilla
        option = factory(option_type, STRIKE, EXPIRY)
        h = 1e-4

        def price_at(spot):
            return AnalyticalEngine(option, MarketParameters(spot, RATE, VOL)).price()

        fd_delta = (price_at(SPOT + h) - price_at(SPOT - h)) / (2 * h)
        delta = AnalyticalEngine(option, MarketParameters(SPOT, RATE, VOL)).delta()
        assert np.isclose(delta, fd_delta, rtol=1e-5, atol=1e-8)

    def test_digital_delta_sign(self, market):
        call = AnalyticalEngine(OptionSpec.digital(OptionType.CALL, STRIKE, EXPIRY), market)
        put = AnalyticalEngine(OptionSpec.digital(OptionType.PUT, STRIKE, EXPIRY), market)
        assert call.delta() > 0
        assert np.isclose(put.delta(), -call.delta())


class TestBSMBoundary:
    """Expired and zero-volatility contracts."""

    def test_expired_contract_returns_payoff(self):
        call = OptionSpec.vanilla(OptionType.CALL, STRIKE, 0.0)
        put = OptionSpec.vanilla(OptionType.PUT, STRIKE, 0.0)
        assert AnalyticalEngine(call, MarketParameters(110.0, RATE, VOL)).price() == 10.0
        assert AnalyticalEngine(put, MarketParameters(90.0, RATE, VOL)).price() == 10.0

    def test_expired_delta_is_step_function(self):
        call = OptionSpec.vanilla(OptionType.CALL, STRIKE, 0.0)
        put = OptionSpec.vanilla(OptionType.PUT, STRIKE, 0.0)
        digital = OptionSpec.digital(OptionType.CALL, STRIKE, 0.0)
        assert AnalyticalEngine(call, MarketParameters(110.0, RATE, VOL)).delta() == 1.0
        assert AnalyticalEngine(call, MarketParameters(90.0, RATE, VOL)).delta() == 0.0
        assert AnalyticalEngine(put, MarketParameters(90.0, RATE, VOL)).delta() == -1.0
        assert AnalyticalEngine(put, MarketParameters(110.0, RATE, VOL)).delta() == 0.0
        assert AnalyticalEngine(digital, MarketParameters(110.0, RATE, VOL)).delta() == 0.0

    def test_price_converges_to_payoff_as_expiry_vanishes(self):
        market = MarketParameters(110.0, RATE, VOL)
        call = OptionSpec.vanilla(OptionType.CALL, STRIKE, 1e-10)
        engine = AnalyticalEngine(call, market)
        assert np.isclose(engine.price(), 10.0, atol=1e-6)
        assert np.isclose(engine.delta(), 1.0, atol=1e-6)

    def test_zero_volatility_is_immediate_payoff(self):
        market = MarketParameters(SPOT, RATE, 0.0)
        call = AnalyticalEngine(OptionSpec.vanilla(OptionType.CALL, STRIKE, EXPIRY), market)
        put = AnalyticalEngine(OptionSpec.vanilla(OptionType.PUT, STRIKE, EXPIRY), market)
        assert call.price() == 0.0
        assert put.price() == 0.0
        assert call.delta() == 0.0
        assert put.delta() == 0.0

    @pytest.mark.parametrize(
        "spot, call_price, call_delta, put_price, put_delta",
        [(110.0, 10.0, 1.0, 0.0, 0.0), (90.0, 0.0, 0.0, 10.0, -1.0)],
    )
    def test_zero_volatility_step_at_spot(
        self, spot, call_price, call_delta, put_price, put_delta
    ):
        market = MarketParameters(spot, RATE, 0.0)
        call = AnalyticalEngine(OptionSpec.vanilla(OptionType.CALL, STRIKE, EXPIRY), market)
        put = AnalyticalEngine(OptionSpec.vanilla(OptionType.PUT, STRIKE, EXPIRY), market)
        assert call.price() == call_price
        assert call.delta() == call_delta
        assert put.price() == put_price
        assert put.delta() == put_delta

    def test_volatility_below_floor_is_deterministic(self):
        market = MarketParameters(110.0, RATE, 1e-6)
        params = AnalyticalParams(min_volatility=1e-4)
        option = OptionSpec.vanilla(OptionType.CALL, STRIKE, EXPIRY)
        call = AnalyticalEngine(option, market, params)
        assert call.price() == 10.0
        assert call.delta() == 1.0

    def test_zero_volatility_digital(self):
        market = MarketParameters(SPOT, RATE, 0.0)
        call = AnalyticalEngine(OptionSpec.digital(OptionType.CALL, STRIKE, EXPIRY), market)
        put = AnalyticalEngine(OptionSpec.digital(OptionType.PUT, STRIKE, EXPIRY), market)
        below = AnalyticalEngine(
            OptionSpec.digital(OptionType.CALL, STRIKE, EXPIRY), MarketParameters(90.0, RATE, 0.0)
        )
        assert call.price() == 1.0
        assert put.price() == 1.0
        assert below.price() == 0.0
        assert call.delta() == 0.0

    def test_results_are_finite_near_floors(self):
        market = MarketParameters(SPOT, RATE, 1e-9)
        engine = AnalyticalEngine(OptionSpec.vanilla(OptionType.CALL, STRIKE, 1e-9), market)
        assert np.isfinite(engine.price())
        assert np.isfinite(engine.delta())

    def test_zero_strike_call_is_worth_spot(self, market):
        call = AnalyticalEngine(OptionSpec.vanilla(OptionType.CALL, 0.0, EXPIRY), market)
        assert np.isclose(call.price(), SPOT)


class TestBSMConfiguration:
    def test_missing_option(self, market):
        with pytest.raises(ConfigurationError, match="requires an option"):
            AnalyticalEngine(None, market)

    def test_path_dependent_rejected(self, market, asian_call):
        with pytest.raises(UnsupportedFeatureError):
            AnalyticalEngine(asian_call, market)

    def test_american_rejected(self, market, american_put):
        with pytest.raises(UnsupportedFeatureError):
            AnalyticalEngine(american_put, market)

    def test_wrong_params_type(self, market, euro_call):
        with pytest.raises(ConfigurationError):
            AnalyticalEngine(euro_call, market, params={"min_volatility": 1e-8})

    def test_invalid_floor(self):
        with pytest.raises(ValidationError):
            AnalyticalParams(min_volatility=0.0)

    def test_invalid_market(self):
        with pytest.raises(ValidationError):
            MarketParameters(spot=0.0, rate=RATE, volatility=VOL)
        with pytest.raises(ValidationError):
            MarketParameters(spot=SPOT, rate=RATE, volatility=-0.1)
