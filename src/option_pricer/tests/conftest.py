"""Shared pytest fixtures for option_pricer tests."""

import pytest

from option_pricer.enums import OptionType
from option_pricer.market_environment import MarketParameters
from option_pricer.options import OptionSpec

from option_pricer.tests.helpers import EXPIRY, RATE, SPOT, STRIKE, VOL


@pytest.fixture()
def market() -> MarketParameters:
    return MarketParameters(spot=SPOT, rate=RATE, volatility=VOL)


# ---------------------------------------------------------------------------
# Option specs
# ---------------------------------------------------------------------------


@pytest.fixture()
def euro_call() -> OptionSpec:
    return OptionSpec.vanilla(OptionType.CALL, strike=STRIKE, expiry=EXPIRY)


@pytest.fixture()
def euro_put() -> OptionSpec:
    return OptionSpec.vanilla(OptionType.PUT, strike=STRIKE, expiry=EXPIRY)


@pytest.fixture()
def american_put() -> OptionSpec:
    return OptionSpec.american(OptionType.PUT, strike=STRIKE, expiry=EXPIRY)


@pytest.fixture()
def digital_call() -> OptionSpec:
    return OptionSpec.digital(OptionType.CALL, strike=STRIKE, expiry=EXPIRY)


@pytest.fixture()
def asian_call() -> OptionSpec:
    return OptionSpec.asian(
        OptionType.CALL, strike=STRIKE, observation_times=[0.25, 0.5, 0.75, 1.0]
    )
