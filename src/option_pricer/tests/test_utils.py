"""Tests for valuation helpers and the random source."""

import logging
import math

import numpy as np
import pytest

from option_pricer.exceptions import ValidationError
from option_pricer.random_source import RandomSource
from option_pricer.utils import (
    binomial_coefficient,
    binomial_pmf,
    expected_binomial,
    log_timing,
    put_call_parity_gap,
    put_call_parity_rhs,
)


class TestBinomialHelpers:
    @pytest.mark.parametrize("n, k", [(0, 0), (5, 2), (10, 3), (30, 15), (60, 7)])
    def test_coefficient_matches_comb(self, n, k):
        assert float(binomial_coefficient(n, k)) == pytest.approx(math.comb(n, k), rel=1e-14)

    def test_coefficient_symmetry(self):
        for k in range(0, 41):
            assert binomial_coefficient(40, k) == binomial_coefficient(40, 40 - k)

    def test_coefficient_outside_support(self):
        assert binomial_coefficient(5, -1) == 0
        assert binomial_coefficient(5, 6) == 0

    def test_coefficient_large_n_is_finite(self):
        assert np.isfinite(binomial_coefficient(1000, 500))

    @pytest.mark.parametrize("n, p", [(1, 0.3), (25, 0.5), (300, 0.51)])
    def test_pmf_sums_to_one(self, n, p):
        pmf = binomial_pmf(np.arange(n + 1), n=n, p=p)
        assert float(pmf.sum()) == pytest.approx(1.0, abs=1e-12)

    def test_pmf_rejects_bad_probability(self):
        with pytest.raises(ValidationError):
            binomial_pmf(1, n=3, p=1.5)

    def test_expected_binomial_mean(self):
        value = expected_binomial(40, 0.3, lambda ks: ks.astype(float))
        assert float(value) == pytest.approx(12.0, rel=1e-12)

    def test_expected_binomial_shape_check(self):
        with pytest.raises(ValidationError):
            expected_binomial(4, 0.5, lambda ks: np.zeros(2))


class TestParity:
    def test_rhs(self):
        rhs = put_call_parity_rhs(spot=100.0, strike=100.0, rate=0.05, expiry=1.0)
        assert rhs == pytest.approx(100.0 - 100.0 * np.exp(-0.05))

    def test_gap(self):
        gap = put_call_parity_gap(
            call_price=10.0, put_price=4.0, spot=100.0, strike=100.0, rate=0.0, expiry=1.0
        )
        assert gap == pytest.approx(6.0)

    def test_negative_expiry(self):
        with pytest.raises(ValidationError):
            put_call_parity_rhs(spot=100.0, strike=100.0, rate=0.05, expiry=-1.0)


class TestRandomSource:
    def test_reproducible(self):
        first = RandomSource(42).normal(5)
        second = RandomSource(42).normal(5)
        np.testing.assert_array_equal(first, second)

    def test_uniform_range(self):
        draws = RandomSource(1).uniform(10_000)
        assert draws.min() >= 0.0
        assert draws.max() < 1.0

    def test_scalar_draw(self):
        assert isinstance(RandomSource(0).normal(), float)

    def test_spawned_streams_differ(self):
        children = RandomSource(7).spawn(3)
        draws = [child.normal(4) for child in children]
        assert len(children) == 3
        assert not np.array_equal(draws[0], draws[1])
        assert not np.array_equal(draws[1], draws[2])

    def test_spawn_is_deterministic(self):
        left = [child.uniform(3) for child in RandomSource(7).spawn(2)]
        right = [child.uniform(3) for child in RandomSource(7).spawn(2)]
        for a, b in zip(left, right):
            np.testing.assert_array_equal(a, b)


def test_log_timing_emits_debug(caplog):
    logger = logging.getLogger("option_pricer.tests")
    with caplog.at_level(logging.DEBUG, logger="option_pricer.tests"):
        with log_timing(logger, "block", True):
            pass
        with log_timing(logger, "silent", False):
            pass
    assert "Timing block" in caplog.text
    assert "silent" not in caplog.text
