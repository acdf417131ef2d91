"""Helper functions for derivatives valuation."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Callable
from collections.abc import Iterator
import time
import numpy as np

from .exceptions import ValidationError

__all__ = [
    "log_timing",
    "binomial_coefficient",
    "binomial_pmf",
    "expected_binomial",
    "put_call_parity_rhs",
    "put_call_parity_gap",
]


@contextmanager
def log_timing(logger, label: str, enabled: bool) -> Iterator[None]:
    """Log timing for a code block when enabled is True."""
    if not enabled:
        yield
        return
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        logger.debug("Timing %s: %.6fs", label, elapsed)


def binomial_coefficient(n: int, k: int) -> np.longdouble:
    """Binomial coefficient C(n, k) in extended precision.

    Uses the symmetry C(n, k) = C(n, n - k) and builds the value by iterative
    multiplication, so no factorial is ever formed:

        C(n, m) = prod_{j=1}^{m} (n - m + j) / j,   m = min(k, n - k)
    """
    if k < 0 or k > n:
        return np.longdouble(0.0)
    m = min(k, n - k)
    c = np.longdouble(1.0)
    for j in range(1, m + 1):
        c = c * np.longdouble(n - m + j) / np.longdouble(j)
    return c


def binomial_pmf(k: np.ndarray | int, n: int, p: float) -> np.ndarray:
    """Binomial(n, p) probability mass function, evaluated in extended precision.

    Parameters
    ==========
    k:
        Success count(s). Can be an int or a numpy array of ints.
    n:
        Number of trials (>= 0).
    p:
        Success probability in [0, 1].
    """
    if n < 0:
        raise ValidationError("n must be >= 0")

    p = float(p)
    if not (0.0 <= p <= 1.0):
        raise ValidationError("p must be in [0, 1]")

    k_arr = np.asarray(k, dtype=int)
    out = np.zeros(k_arr.shape, dtype=np.longdouble)

    in_support = (k_arr >= 0) & (k_arr <= n)
    if not np.any(in_support):
        return out

    ks = k_arr[in_support]
    combs = np.array([binomial_coefficient(n, int(kk)) for kk in ks], dtype=np.longdouble)
    p_ld = np.longdouble(p)
    out[in_support] = combs * (p_ld**ks) * ((np.longdouble(1.0) - p_ld) ** (n - ks))
    return out


def expected_binomial(
    n: int,
    p: float,
    f: Callable[[np.ndarray], np.ndarray],
) -> np.longdouble:
    """Compute $\\mathbb{E}[f(K)]$ where $K \\sim \\text{Binomial}(n, p)$.

    This is a small convenience wrapper around the explicit sum
    $\\sum_{k=0}^n \\binom{n}{k} p^k (1-p)^{n-k} f(k)$, accumulated in
    extended precision.
    """
    ks = np.arange(n + 1)
    pmf = binomial_pmf(ks, n=n, p=p)
    vals = np.asarray(f(ks), dtype=np.longdouble)
    if vals.shape != ks.shape:
        raise ValidationError("f(k) must return an array with same shape as k")
    return np.sum(pmf * vals)


def put_call_parity_rhs(*, spot: float, strike: float, rate: float, expiry: float) -> float:
    """Compute the RHS of put-call parity for European options: S - K e^{-rT}."""
    if expiry < 0:
        raise ValidationError("expiry must be >= 0")
    return float(spot - strike * np.exp(-rate * expiry))


def put_call_parity_gap(
    *,
    call_price: float,
    put_price: float,
    spot: float,
    strike: float,
    rate: float,
    expiry: float,
) -> float:
    """Return call-put parity residual: (C - P) - RHS."""
    rhs = put_call_parity_rhs(spot=spot, strike=strike, rate=rate, expiry=expiry)
    return float(call_price - put_price - rhs)
