"""Market data container shared by all pricing engines."""

from __future__ import annotations
from dataclasses import dataclass
import numpy as np
from .exceptions import ValidationError


@dataclass(frozen=True, slots=True)
class MarketParameters:
    """Flat Black-Scholes market seen by an engine.

    The valuation-to-expiry horizon is not stored here: every engine reads
    it from the option's ``expiry``.

    Attributes
    ==========
    spot:
        Current price of the underlying, strictly positive.
    rate:
        Continuously compounded risk-free rate.
    volatility:
        Annualised volatility, non-negative.
    """

    spot: float
    rate: float
    volatility: float

    def __post_init__(self) -> None:
        for name in ("spot", "rate", "volatility"):
            try:
                value = float(getattr(self, name))
            except (TypeError, ValueError) as exc:
                raise ValidationError(f"MarketParameters.{name} must be numeric") from exc
            if not np.isfinite(value):
                raise ValidationError(f"MarketParameters.{name} must be finite, got {value}")
            object.__setattr__(self, name, value)

        if self.spot <= 0.0:
            raise ValidationError(f"MarketParameters.spot must be positive, got {self.spot}")
        if self.volatility < 0.0:
            raise ValidationError(
                f"MarketParameters.volatility must be >= 0, got {self.volatility}"
            )
