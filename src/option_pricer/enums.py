"""Enums for option valuation."""

from enum import Enum

__all__ = [
    "OptionType",
    "ExerciseType",
    "PayoffStyle",
    "PricingMethod",
]


class OptionType(Enum):
    CALL = "call"
    PUT = "put"


class ExerciseType(Enum):
    EUROPEAN = "european"
    AMERICAN = "american"


class PayoffStyle(Enum):
    VANILLA = "vanilla"
    DIGITAL = "digital"
    ASIAN = "asian"


class PricingMethod(Enum):
    MONTE_CARLO = "monte_carlo"
    BINOMIAL = "binomial"
    BSM = "bsm"
