"""Option contracts consumed by the pricing engines.

The engines only rely on the :class:`Option` capability: a payoff at a spot
price, a payoff along a price path, the exercise style, path dependence,
strike, expiry and the observation schedule. :class:`OptionSpec` is the
concrete closed variant shipped with the library::

    OptionSpec.vanilla(OptionType.CALL, strike=100.0, expiry=1.0)
    OptionSpec.digital(OptionType.PUT, strike=100.0, expiry=1.0)
    OptionSpec.american(OptionType.PUT, strike=101.0, expiry=5.0)
    OptionSpec.asian(OptionType.CALL, strike=100.0, observation_times=[0.25, 0.5, 0.75, 1.0])
"""

from __future__ import annotations
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol
import numpy as np
from .enums import ExerciseType, OptionType, PayoffStyle
from .exceptions import ConfigurationError, UnsupportedFeatureError, ValidationError

__all__ = ["Option", "OptionSpec"]


class Option(Protocol):
    """Capability interface every engine prices against."""

    @property
    def option_type(self) -> OptionType: ...

    @property
    def strike(self) -> float: ...

    @property
    def expiry(self) -> float: ...

    @property
    def is_american(self) -> bool: ...

    @property
    def is_path_dependent(self) -> bool: ...

    @property
    def is_digital(self) -> bool: ...

    @property
    def observation_times(self) -> tuple[float, ...]: ...

    def payoff(self, spot: np.ndarray | float) -> np.ndarray | float: ...

    def payoff_path(self, path: np.ndarray | Sequence[float]) -> np.ndarray | float | None: ...


def _as_nonnegative_float(value, label: str) -> float:
    try:
        out = float(value)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"OptionSpec.{label} must be numeric") from exc
    if not np.isfinite(out):
        raise ValidationError(f"OptionSpec.{label} must be finite")
    if out < 0.0:
        raise ValidationError(f"OptionSpec.{label} must be >= 0, got {out}")
    return out


@dataclass(frozen=True, slots=True)
class OptionSpec:
    """Contract specification for vanilla, digital, American and Asian options.

    Parameters
    ----------
    style : PayoffStyle
        VANILLA, DIGITAL or ASIAN payoff.
    option_type : OptionType
        OptionType.CALL or OptionType.PUT.
    strike : float
        Strike price (>= 0).
    expiry : float, optional
        Time to expiry in years (>= 0). Derived from ``observation_times``
        for Asian contracts.
    exercise_type : ExerciseType
        EUROPEAN (default) or AMERICAN. American exercise is only available
        for vanilla payoffs.
    observation_times : sequence of float, optional
        Fixing schedule of an Asian contract. Non-Asian contracts observe
        only at expiry.

    Notes
    -----
    - Vanilla / American / Asian call: max(S - K, 0), put: max(K - S, 0)
    - Digital call pays 1 when S >= K, digital put pays 1 when S <= K
    - Asian payoffs apply to the arithmetic mean of the observed prices
    """

    style: PayoffStyle
    option_type: OptionType
    strike: float
    expiry: float | None = None
    exercise_type: ExerciseType = ExerciseType.EUROPEAN
    observation_times: tuple[float, ...] | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.style, PayoffStyle):
            raise ConfigurationError(
                f"style must be PayoffStyle enum, got {type(self.style).__name__}"
            )
        if not isinstance(self.option_type, OptionType):
            raise ConfigurationError(
                f"option_type must be OptionType enum, got {type(self.option_type).__name__}"
            )
        if not isinstance(self.exercise_type, ExerciseType):
            raise ConfigurationError(
                f"exercise_type must be ExerciseType enum, got {type(self.exercise_type).__name__}"
            )
        if self.exercise_type is ExerciseType.AMERICAN and self.style is not PayoffStyle.VANILLA:
            raise UnsupportedFeatureError(
                f"American exercise is only supported for vanilla payoffs, got {self.style.value}"
            )

        object.__setattr__(self, "strike", _as_nonnegative_float(self.strike, "strike"))

        if self.style is PayoffStyle.ASIAN:
            if self.observation_times is None:
                raise ValidationError("Asian options require observation_times")
            times = tuple(
                _as_nonnegative_float(t, "observation_times") for t in self.observation_times
            )
            if not times:
                raise ValidationError("Asian option observation_times cannot be empty")
            if self.expiry is not None and not np.isclose(float(self.expiry), times[-1]):
                raise ValidationError(
                    "Asian option expiry must equal the last observation time"
                )
            object.__setattr__(self, "observation_times", times)
            object.__setattr__(self, "expiry", times[-1])
            return

        if self.observation_times is not None:
            raise ValidationError("observation_times is only used by Asian options")
        if self.expiry is None:
            raise ValidationError("OptionSpec.expiry must be provided")
        expiry = _as_nonnegative_float(self.expiry, "expiry")
        object.__setattr__(self, "expiry", expiry)
        object.__setattr__(self, "observation_times", (expiry,))

    # ------------------------------------------------------------------
    # Constructors
    # ------------------------------------------------------------------

    @classmethod
    def vanilla(cls, option_type: OptionType, strike: float, expiry: float) -> OptionSpec:
        return cls(PayoffStyle.VANILLA, option_type, strike, expiry)

    @classmethod
    def digital(cls, option_type: OptionType, strike: float, expiry: float) -> OptionSpec:
        return cls(PayoffStyle.DIGITAL, option_type, strike, expiry)

    @classmethod
    def american(cls, option_type: OptionType, strike: float, expiry: float) -> OptionSpec:
        return cls(
            PayoffStyle.VANILLA, option_type, strike, expiry, exercise_type=ExerciseType.AMERICAN
        )

    @classmethod
    def asian(
        cls, option_type: OptionType, strike: float, observation_times: Sequence[float]
    ) -> OptionSpec:
        return cls(
            PayoffStyle.ASIAN,
            option_type,
            strike,
            observation_times=tuple(observation_times),
        )

    # ------------------------------------------------------------------
    # Capability
    # ------------------------------------------------------------------

    @property
    def is_american(self) -> bool:
        return self.exercise_type is ExerciseType.AMERICAN

    @property
    def is_path_dependent(self) -> bool:
        return self.style is PayoffStyle.ASIAN

    @property
    def is_digital(self) -> bool:
        return self.style is PayoffStyle.DIGITAL

    def payoff(self, spot: np.ndarray | float) -> np.ndarray | float:
        """Vectorized payoff as a function of spot (float in, float out)."""
        s = np.asarray(spot, dtype=float)
        K = self.strike
        if self.style is PayoffStyle.DIGITAL:
            if self.option_type is OptionType.CALL:
                out = np.where(s >= K, 1.0, 0.0)
            else:
                out = np.where(s <= K, 1.0, 0.0)
        elif self.option_type is OptionType.CALL:
            out = np.maximum(s - K, 0.0)
        else:
            out = np.maximum(K - s, 0.0)
        if out.ndim == 0:
            return float(out)
        return out

    def payoff_path(self, path: np.ndarray | Sequence[float]) -> np.ndarray | float | None:
        """Payoff of one path, or of a stack of paths with observations on the last axis.

        Returns None for an empty path.
        """
        prices = np.asarray(path, dtype=float)
        if prices.ndim == 0:
            raise ValidationError("path must be a sequence of prices")
        if prices.shape[-1] == 0:
            return None
        if self.style is PayoffStyle.ASIAN:
            return self.payoff(prices.mean(axis=-1))
        return self.payoff(prices[..., -1])
