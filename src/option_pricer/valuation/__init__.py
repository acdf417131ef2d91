"""Option valuation and pricing engines.

This module provides three independent engines for European, American,
digital and Asian options: closed-form Black-Scholes, the Cox-Ross-Rubinstein
binomial lattice and multi-threaded Monte Carlo simulation.

Public API
----------
Engines:
    AnalyticalEngine: Closed-form price and delta (European vanilla / digital)
    LatticeEngine: CRR binomial tree with American early exercise
    MonteCarloEngine: Antithetic Monte Carlo with control variate
    OptionValuation: Dispatcher selecting one engine by PricingMethod

Supporting types:
    LatticeFactors: One-period up / down / growth factors
    RunningEstimate: Welford running mean / variance

Parameter classes:
    AnalyticalParams: Numerical floors for the closed form
    BinomialParams: Configuration for Binomial tree pricing
    MonteCarloParams: Configuration for Monte Carlo pricing
    ValuationParams: Union type for all parameter classes
"""

from .bsm import AnalyticalEngine
from .binomial import LatticeEngine, LatticeFactors
from .monte_carlo import MonteCarloEngine, RunningEstimate
from .core import OptionValuation
from .params import (
    AnalyticalParams,
    BinomialParams,
    MonteCarloParams,
    ValuationParams,
)

__all__ = [
    # Engines
    "AnalyticalEngine",
    "LatticeEngine",
    "MonteCarloEngine",
    "OptionValuation",
    # Supporting types
    "LatticeFactors",
    "RunningEstimate",
    # Parameter classes
    "AnalyticalParams",
    "BinomialParams",
    "MonteCarloParams",
    "ValuationParams",
]
