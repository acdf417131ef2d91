"""Custom exception hierarchy for the option_pricer library.

All library-specific exceptions inherit from :class:`PricingError`,
enabling callers to catch *any* library error with a single ``except`` clause::

    try:
        engine = LatticeEngine.from_market(option, 150, market)
        pv = engine.price()
    except PricingError as exc:
        log.error("Library error: %s", exc)

Numerical edge cases (zero volatility, zero time to expiry, zero standard
error) are handled in-band by the engines and never raise.
"""

from __future__ import annotations


class PricingError(Exception):
    """Base exception for all library errors."""


# ── Input validation ────────────────────────────────────────────────


class ValidationError(PricingError, ValueError):
    """Invalid input values (out-of-range, non-finite, negative depth, etc.)."""


class ConfigurationError(PricingError, TypeError):
    """Missing or wrongly typed collaborator passed to a public API (e.g. ``option=None``)."""


class UnsupportedFeatureError(ValidationError):
    """Requested engine/contract combination is not supported."""


class ArbitrageViolationError(ValidationError):
    """Lattice factors violate the no-arbitrage ordering ``D < R < U``."""


# ── Misuse ──────────────────────────────────────────────────────────


class PreconditionError(PricingError, RuntimeError):
    """An operation was requested before the engine reached the required state."""


class LatticeIndexError(PricingError, IndexError):
    """A lattice node ``(n, i)`` outside ``0 <= i <= n <= depth`` was addressed."""


# ── Numerical issues ────────────────────────────────────────────────


class NumericalError(PricingError):
    """A computation produced a non-finite result."""
