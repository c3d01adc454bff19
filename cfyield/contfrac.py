""" Finite continued fraction approximants via Euler's recurrence.

This module uses JAX so that evaluation can be jit-compiled, vectorized
with :func:`jax.vmap` and differentiated with :func:`jax.grad`.
"""

from __future__ import division, print_function, absolute_import

from functools import partial

import numpy as np
import jax
import jax.numpy as jnp
from jax import jit, lax

from .quotdiff import quotdiff, quotdiff_above_diagonal, quotdiff_below_diagonal
from .errors import DegenerateSeriesError

TOLERANCE = 1e-20
"""Bounds outside of which the recurrence state is rescaled."""

DERIV_DELTA = 1e-8
"""Imaginary step used by :meth:`ContinuedFraction.complex_deriv`."""


def _rescale_value(num, den):
    """Factor that brings (num, den) back into [TOLERANCE, 1/TOLERANCE]."""
    if jnp.iscomplexobj(num):
        rescale_val = jnp.abs(num) ** 2 + jnp.abs(den) ** 2
    else:
        rescale_val = jnp.abs(num) + jnp.abs(den)

    out_of_range = (rescale_val > 1.0 / TOLERANCE) | (rescale_val < TOLERANCE)
    return jnp.where(out_of_range, 1.0 / rescale_val, 1.0)


def euler_recurrence(cf_coeffs, val):
    """Run Euler's three-term recurrence for the convergents.

    Computes the last numerator and denominator of

      c_0 / (1 + c_1 val / (1 + c_2 val / (1 + ...)))

    truncated after ``len(cf_coeffs)`` coefficients, with the state
    rescaled after every step to avoid over- and underflow.  The ratio
    num/den is unaffected by the rescaling.

    Parameters
    ----------
    cf_coeffs: array of float, shape (degree,)
    val: float or complex

    Returns
    -------
    (num, den)
      Same dtype as `val`.
    """
    dtype = jnp.result_type(val, jnp.float64)
    val = jnp.asarray(val, dtype=dtype)
    coeffs = jnp.asarray(cf_coeffs, dtype=dtype)

    def step(carry, coeff):
        num1, num2, den1, den2 = carry

        num = num1 + coeff * val * num2
        den = den1 + coeff * val * den2

        scale = _rescale_value(num, den)
        return (num * scale, num1 * scale, den * scale, den1 * scale), None

    init_carry = (
        coeffs[0],  # num[0]
        jnp.zeros((), dtype),  # num[-1]
        jnp.ones((), dtype),  # den[0]
        jnp.ones((), dtype),  # den[-1]
    )

    (num, _, den, _), _ = lax.scan(step, init_carry, coeffs[1:])
    return num, den


def _offset_poly(offset_coeffs, val, k):
    """sum_{i<k} offset_coeffs[i] val^i"""
    total = jnp.zeros((), jnp.result_type(val, jnp.float64))
    for i in range(k):
        total = total + offset_coeffs[i] * val ** i
    return total


@partial(jit, static_argnums=(3,))
def evaluate_cf(cf_coeffs, offset_coeffs, val, diagonal_idx):
    """Evaluate a continued fraction approximant at a point.

    The number of recurrence steps is the length of `cf_coeffs`, so
    callers pass the coefficients already truncated to the degree.

    Parameters
    ----------
    cf_coeffs: array of float, shape (degree,)
    offset_coeffs: array of float
      Leading series coefficients kept verbatim (empty on-diagonal).
    val: float or complex
      Evaluation point.  A complex argument of zero magnitude gives 0.
    diagonal_idx: int (static)
      0 on-diagonal, >0 above, <0 below the diagonal.

    Returns
    -------
    float or complex
    """
    val = jnp.asarray(val, dtype=jnp.result_type(val, jnp.float64))
    num, den = euler_recurrence(cf_coeffs, val)
    ratio = num / den

    if diagonal_idx == 0:
        result = val * ratio
    else:
        degree = cf_coeffs.shape[0]
        k = min(offset_coeffs.shape[0], degree)
        offset_part = _offset_poly(offset_coeffs, val, k) + val ** k * ratio
        if diagonal_idx > 0:
            result = val * offset_part
        else:
            # built on the reciprocal series, so invert back
            result = val / offset_part

    if jnp.iscomplexobj(val):
        result = jnp.where(jnp.abs(val) == 0.0, jnp.zeros_like(result), result)
    return result


class ContinuedFraction(object):
    """Continued fraction approximant of a power series.

    The coefficients are computed once, at construction, and never
    change afterwards.

    Parameters
    ----------
    ps_coeffs: array_like of float
      Power series coefficients, lowest order first.

    diagonal_idx: int
      Which diagonal of the Padé table to follow.  0 gives equal
      numerator and denominator degrees, a positive value a numerator
      degree excess, and a negative value a denominator degree excess.

    degree: int
      Number of continued fraction coefficients used when evaluating,
      1 <= degree <= len(cf_coeffs).

    Raises
    ------
    ValueError
      If the arguments are inconsistent.
    DegenerateSeriesError
      If a coefficient needed for evaluation is not finite.
    """

    def __init__(self, ps_coeffs, diagonal_idx, degree):
        ps_coeffs = np.array(ps_coeffs, dtype=np.float64)
        diagonal_idx = int(diagonal_idx)
        degree = int(degree)

        if len(ps_coeffs) == 0:
            raise ValueError("ps_coeffs must not be empty")
        if abs(diagonal_idx) >= len(ps_coeffs):
            raise ValueError(
                "|diagonal_idx|={} must be < len(ps_coeffs)={}".format(
                    abs(diagonal_idx), len(ps_coeffs)
                )
            )

        if diagonal_idx == 0:
            offset_coeffs = np.array([], dtype=np.float64)
            cf_coeffs = quotdiff(ps_coeffs)
        elif diagonal_idx > 0:
            offset_coeffs, cf_coeffs = quotdiff_above_diagonal(ps_coeffs, diagonal_idx)
        else:
            offset_coeffs, cf_coeffs = quotdiff_below_diagonal(ps_coeffs, -diagonal_idx)

        if not (1 <= degree <= len(cf_coeffs)):
            raise ValueError(
                "degree={} must be in [1, {}]".format(degree, len(cf_coeffs))
            )

        for arr in (ps_coeffs, cf_coeffs, offset_coeffs):
            arr.flags.writeable = False

        self.ps_coeffs = ps_coeffs
        self.cf_coeffs = cf_coeffs
        self.offset_coeffs = offset_coeffs
        self.diagonal_idx = diagonal_idx
        self.degree = degree

        n_offset = min(len(offset_coeffs), degree)
        if not (np.all(np.isfinite(cf_coeffs[:degree]))
                and np.all(np.isfinite(offset_coeffs[:n_offset]))):
            raise DegenerateSeriesError(
                "non-finite continued fraction coefficients at degree={}, "
                "diagonal_idx={}".format(degree, diagonal_idx)
            )

        self._cf_eval = jnp.asarray(cf_coeffs[:degree])
        self._offset_eval = jnp.asarray(offset_coeffs)

    def evaluate(self, val):
        """Evaluate at `val` (real or complex), returning a JAX scalar.

        Traceable, so it can be used under :func:`jax.grad`,
        :func:`jax.vmap` and :func:`jax.jit`.
        """
        return evaluate_cf(self._cf_eval, self._offset_eval, val, self.diagonal_idx)

    def __call__(self, val):
        result = self.evaluate(val)
        if jnp.iscomplexobj(result):
            return complex(result)
        return float(result)

    def complex_deriv(self, val):
        """Derivative at a real point via the complex-step method.

          df/dx = lim_{delta -> 0} Im(f(x + i delta)) / delta

        Unlike a finite difference there is no subtractive
        cancellation, so a tiny delta is accurate to machine precision.
        """
        df = self.evaluate(complex(val, DERIV_DELTA))
        return float(jnp.imag(df)) / DERIV_DELTA

    def extrapolate_distinct(self, counts_hist, max_value, step_size):
        """Extrapolate the number of distinct items over a grid.

        Parameters
        ----------
        counts_hist: array_like of float
          counts_hist[j] is the number of items observed exactly j times.
        max_value: float
          Largest grid point.
        step_size: float
          Grid spacing.

        Returns
        -------
        list of float
          [hist_sum, hist_sum + f(step_size), hist_sum + f(2 step_size), ...]

        Raises
        ------
        ValueError
          If step_size is not positive.
        """
        if not (step_size > 0.0):
            raise ValueError("step_size={} must be > 0".format(step_size))

        hist_sum = float(np.sum(counts_hist))
        vals = []
        t = step_size
        while t <= max_value:
            vals.append(t)
            t += step_size

        estimates = [hist_sum]
        if vals:
            extrap = jax.vmap(self.evaluate)(jnp.asarray(vals))
            estimates.extend(hist_sum + float(y) for y in np.asarray(extrap))
        return estimates

    def __str__(self):
        lines = ["OFFSET_COEFFS"]
        for i, coeff in enumerate(self.offset_coeffs):
            lines.append("{:12.2f}\t{:12.2f}".format(coeff, self.ps_coeffs[i]))
        lines.append("CF_COEFFS")
        offset = len(self.offset_coeffs)
        for i, coeff in enumerate(self.cf_coeffs):
            lines.append("{:12.2f}\t{:12.2f}".format(coeff, self.ps_coeffs[i + offset]))
        return "\n".join(lines) + "\n"

    def __repr__(self):
        return "ContinuedFraction(diagonal_idx={}, degree={}, n_coeffs={})".format(
            self.diagonal_idx, self.degree, len(self.ps_coeffs)
        )
