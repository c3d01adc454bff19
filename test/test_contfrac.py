import numpy as np
import jax.numpy as jnp
import pytest

import cfyield
from cfyield.contfrac import ContinuedFraction, evaluate_cf
from cfyield.quotdiff import quotdiff, reciprocal_series


def log1p_series(n):
    """Coefficients of log(1+x)/x."""
    return np.array([(-1.0) ** j / (j + 1) for j in range(n)])


class TestContinuedFraction:
    def test_invariants(self):
        ps = log1p_series(10)

        cf = ContinuedFraction(ps, 0, 8)
        assert len(cf.offset_coeffs) == 0
        assert len(cf.cf_coeffs) == len(ps)
        assert cf.degree == 8

        for diagonal_idx in [-3, -1, 1, 3]:
            cf = ContinuedFraction(ps, diagonal_idx, 6)
            assert len(cf.offset_coeffs) == abs(diagonal_idx)
            assert len(cf.cf_coeffs) + len(cf.offset_coeffs) == len(cf.ps_coeffs)

    def test_immutable(self):
        cf = ContinuedFraction(log1p_series(6), 1, 4)
        with pytest.raises(ValueError):
            cf.cf_coeffs[0] = 1.0
        with pytest.raises(ValueError):
            cf.offset_coeffs[0] = 1.0
        with pytest.raises(ValueError):
            cf.ps_coeffs[0] = 1.0

    def test_input_not_aliased(self):
        ps = log1p_series(6)
        cf = ContinuedFraction(ps, 0, 6)
        ps[0] = 100.0
        assert cf.ps_coeffs[0] == 1.0

    @pytest.mark.parametrize(
        "ps, diagonal_idx, degree",
        [
            ([], 0, 1),
            (log1p_series(6), 0, 0),
            (log1p_series(6), 0, 7),
            (log1p_series(6), 2, 5),
            (log1p_series(6), -6, 1),
        ],
    )
    def test_bad_arguments(self, ps, diagonal_idx, degree):
        with pytest.raises(ValueError):
            ContinuedFraction(ps, diagonal_idx, degree)

    def test_degenerate_series(self):
        with pytest.raises(cfyield.DegenerateSeriesError):
            ContinuedFraction([1.0, 0.0, 1.0], 0, 3)
        # Coefficients past the degree are never evaluated
        cf = ContinuedFraction([1.0, 0.0, 1.0], 0, 2)
        assert cf(2.0) == 2.0

    def test_str(self):
        cf = ContinuedFraction([1.0, -2.0, 3.0, -4.0], 0, 4)
        expected = (
            "OFFSET_COEFFS\n"
            "CF_COEFFS\n"
            "        1.00\t        1.00\n"
            "        2.00\t       -2.00\n"
            "       -0.50\t        3.00\n"
            "        0.50\t       -4.00\n"
        )
        assert str(cf) == expected

    def test_str_offset(self):
        ps = [1.0, -2.0, 3.0, -4.0, 5.0]
        cf = ContinuedFraction(ps, 1, 4)
        lines = str(cf).splitlines()
        assert lines[0] == "OFFSET_COEFFS"
        assert lines[1] == "        1.00\t        1.00"
        assert lines[2] == "CF_COEFFS"
        assert lines[3] == "       -2.00\t       -2.00"
        assert len(lines) == 2 + len(ps)


class TestEvaluate:
    @pytest.mark.parametrize("degree", [2, 3])
    @pytest.mark.parametrize("val", [0.0, 0.1, 1.0, 10.0, 123.4])
    def test_geometric_series(self, degree, val):
        r = 0.5
        cf = ContinuedFraction([1.0, -r, r * r], 0, degree)
        assert np.allclose(cf(val), val / (1.0 + r * val))

    def test_inverse_square(self):
        cf = ContinuedFraction([1.0, -2.0, 3.0, -4.0], 0, 4)
        for x in [0.25, 1.0, 7.5]:
            assert np.allclose(cf(x), x / (1.0 + x) ** 2)

    def test_log1p(self):
        cf = ContinuedFraction(log1p_series(12), 0, 12)
        for x in [0.5, 1.0, 2.0]:
            assert np.allclose(cf(x), np.log1p(x), rtol=1e-5)

    def test_rescaling_large_coefficients(self):
        """A huge overall scale must not overflow the recurrence."""
        scale = 2.0 ** 900
        ps = log1p_series(12)
        cf = ContinuedFraction(ps, 0, 12)
        cf_big = ContinuedFraction(scale * ps, 0, 12)
        for x in [1e-3, 1.0, 1e3, 1e6]:
            big = cf_big(x)
            assert np.isfinite(big)
            assert np.allclose(big / scale, cf(x), rtol=1e-10)

    def test_rescaling_deep_recurrence(self):
        """Twenty steps at |val| = 1e6 stay finite for any overall scale."""
        coeffs = np.full(20, 0.25)
        ref_coeffs = np.full(20, 0.25)
        empty = jnp.zeros(0)
        for scale in [2.0 ** -900, 1.0, 2.0 ** 900]:
            coeffs[0] = scale
            for x in [1e-6, 1.0, 1e6]:
                val = evaluate_cf(jnp.asarray(coeffs), empty, x, 0)
                ref = evaluate_cf(jnp.asarray(ref_coeffs), empty, x, 0)
                assert np.isfinite(val)
                assert np.allclose(float(val) / scale, float(ref) / 0.25, rtol=1e-10)

    def test_above_diagonal_zero_offset(self):
        """An empty offset reproduces the on-diagonal evaluation."""
        cf_coeffs = jnp.asarray(quotdiff(log1p_series(8)))
        empty = jnp.zeros(0)
        for x in [0.3, 1.0, 4.0]:
            on = evaluate_cf(cf_coeffs, empty, x, 0)
            above = evaluate_cf(cf_coeffs, empty, x, 1)
            assert np.allclose(above, on, rtol=1e-14)

    @pytest.mark.parametrize("offset", [1, 2])
    def test_above_diagonal(self, offset):
        ps = log1p_series(10)
        cf = ContinuedFraction(ps, offset, 6)
        tail = ContinuedFraction(ps[offset:], 0, 6)
        for x in [0.5, 1.0, 2.0]:
            expected = x * (np.polyval(ps[:offset][::-1], x) + x ** offset * tail(x) / x)
            assert np.allclose(cf(x), expected, rtol=1e-12)
        for x in [0.5, 1.0]:
            assert np.allclose(cf(x), np.log1p(x), rtol=1e-3)

    def test_below_diagonal_rational(self):
        """f = 2/(1 - x/2) is reproduced exactly from its reciprocal."""
        f = [2.0, 1.0, 0.5, 0.25, 0.125, 0.0625]
        cf = ContinuedFraction(f, -1, 2)
        for x in [0.5, 1.0, 1.5, 3.0]:
            assert np.allclose(cf(x), x * 2.0 / (1.0 - 0.5 * x))

    @pytest.mark.parametrize("offset", [1, 2])
    def test_below_diagonal(self, offset):
        ps = log1p_series(10)
        recip = reciprocal_series(ps)
        cf = ContinuedFraction(ps, -offset, 6)
        g_tail = ContinuedFraction(recip[offset:], 0, 6)
        for x in [0.5, 1.0, 3.0]:
            g = np.polyval(recip[:offset][::-1], x) + x ** offset * g_tail(x) / x
            assert np.allclose(cf(x), x / g, rtol=1e-12)
        assert np.allclose(cf(0.5), np.log1p(0.5), rtol=1e-4)

    def test_complex_matches_real(self):
        for diagonal_idx in [-2, 0, 2]:
            cf = ContinuedFraction(log1p_series(10), diagonal_idx, 6)
            for x in [0.5, 2.0]:
                assert np.allclose(cf(complex(x, 0.0)), cf(x))

    def test_complex_geometric(self):
        r = 0.5
        cf = ContinuedFraction([1.0, -r, r * r], 0, 2)
        z = 1.0 + 1.0j
        assert np.allclose(cf(z), z / (1.0 + r * z))

    def test_complex_zero(self):
        for diagonal_idx in [-2, 0, 2]:
            cf = ContinuedFraction(log1p_series(10), diagonal_idx, 6)
            assert cf(0j) == 0j


class TestComplexDeriv:
    def test_inverse_square(self):
        """d/dx x/(1+x)^2 = (1-x)/(1+x)^3"""
        cf = ContinuedFraction([1.0, -2.0, 3.0, -4.0], 0, 4)
        for x in [0.0, 0.5, 1.0, 3.0]:
            assert np.allclose(cf.complex_deriv(x), (1.0 - x) / (1.0 + x) ** 3,
                               rtol=1e-10, atol=1e-14)

    def test_log1p(self):
        for diagonal_idx in [-1, 0, 1]:
            cf = ContinuedFraction(log1p_series(12), diagonal_idx, 10)
            for x in [0.5, 1.0]:
                assert np.allclose(cf.complex_deriv(x), 1.0 / (1.0 + x), rtol=1e-4)


class TestExtrapolate:
    def test_extrapolate_distinct(self):
        r = 0.5
        cf = ContinuedFraction([1.0, -r, r * r], 0, 2)
        counts_hist = [0.0, 4.0, 2.0, 1.0]
        estimates = cf.extrapolate_distinct(counts_hist, 3.0, 1.0)

        assert len(estimates) == 4
        assert estimates[0] == 7.0
        for t, est in zip([1.0, 2.0, 3.0], estimates[1:]):
            assert np.allclose(est, 7.0 + t / (1.0 + r * t))

    def test_extrapolate_short_range(self):
        cf = ContinuedFraction([1.0, -0.5, 0.25], 0, 2)
        assert cf.extrapolate_distinct([0.0, 3.0], 0.5, 1.0) == [3.0]

    @pytest.mark.parametrize("step_size", [0.0, -1.0])
    def test_extrapolate_nonpositive_step(self, step_size):
        cf = ContinuedFraction([1.0, -0.5, 0.25], 0, 2)
        with pytest.raises(ValueError):
            cf.extrapolate_distinct([0.0, 3.0], 10.0, step_size)
