from .enums import ExerciseType, OptionType, PayoffStyle, PricingMethod
from .exceptions import PricingError
from .lattice import TriangularLattice
from .market_environment import MarketParameters
from .options import Option, OptionSpec
from .random_source import RandomSource
from .valuation import (
    AnalyticalEngine,
    LatticeEngine,
    LatticeFactors,
    MonteCarloEngine,
    OptionValuation,
)


__all__ = [
    "ExerciseType",
    "OptionType",
    "PayoffStyle",
    "PricingMethod",
    "PricingError",
    "TriangularLattice",
    "MarketParameters",
    "Option",
    "OptionSpec",
    "RandomSource",
    "AnalyticalEngine",
    "LatticeEngine",
    "LatticeFactors",
    "MonteCarloEngine",
    "OptionValuation",
]
