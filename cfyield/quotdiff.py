"""Continued fraction coefficients from power series coefficients.

The quotient-difference (qd) algorithm of Rutishauser turns the
coefficients of a power series into the coefficients of the
corresponding Stieltjes-type continued fraction

  c_0 / (1 + c_1 x / (1 + c_2 x / (1 + ...)))

whose convergents walk the diagonal (or a parallel off-diagonal) of the
Padé table.

References
----------
.. [1] P Henrici, "Applied and Computational Complex Analysis," Vol. 1,
   Wiley 1974, Ch. 7.
"""

from __future__ import division, print_function, absolute_import

import numpy as np


def quotdiff(ps_coeffs):
    """Compute on-diagonal continued fraction coefficients via the qd algorithm.

    Parameters
    ----------
    ps_coeffs: array_like of float
      Power series coefficients, lowest order first.

    Returns
    -------
    ndarray
      Continued fraction coefficients, one per input coefficient.
      Zero divisors in the qd table are not guarded against, so
      degenerate series give NaN or Inf entries.
    """
    ps = np.asarray(ps_coeffs, dtype=np.float64)
    depth = len(ps)
    if depth == 0:
        return np.array([], dtype=np.float64)

    q_table = np.zeros((depth, depth))
    e_table = np.zeros((depth, depth))

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        # Row i of q holds j <= depth - 2i, row i of e holds j <= depth - 2i - 1
        if depth > 1:
            q_table[1, :depth - 1] = ps[1:] / ps[:-1]
        if depth > 2:
            e_table[1, :depth - 2] = q_table[1, 1:depth - 1] - q_table[1, :depth - 2]

        for i in range(2, depth // 2 + 1):
            n_q = depth - 2 * i + 1
            q_table[i, :n_q] = (q_table[i - 1, 1:n_q + 1] * e_table[i - 1, 1:n_q + 1]
                                / e_table[i - 1, :n_q])

            n_e = depth - 2 * i
            if n_e > 0:
                e_table[i, :n_e] = (q_table[i, 1:n_e + 1] - q_table[i, :n_e]
                                    + e_table[i - 1, 1:n_e + 1])

    cf_coeffs = np.empty(depth)
    cf_coeffs[0] = ps[0]
    for i in range(1, depth):
        if i % 2 == 0:
            cf_coeffs[i] = -e_table[i // 2, 0]
        else:
            cf_coeffs[i] = -q_table[(i + 1) // 2, 0]

    return cf_coeffs


def reciprocal_series(coeffs):
    """Coefficients of the power series of 1/f, given those of f.

    Uses the convolution identity f*g = 1, so that
    g_0 = 1/f_0 and g_i = -(1/f_0) sum_{j<i} f_{i-j} g_j.
    """
    coeffs = np.asarray(coeffs, dtype=np.float64)
    recip = np.zeros(len(coeffs))
    if len(coeffs) == 0:
        return recip

    with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
        recip[0] = 1.0 / coeffs[0]
        for i in range(1, len(coeffs)):
            recip[i] = -np.dot(coeffs[i:0:-1], recip[:i]) / coeffs[0]

    return recip


def quotdiff_above_diagonal(coeffs, offset):
    """Continued fraction for a numerator degree excess of `offset`.

    The first `offset` series coefficients are kept verbatim and the qd
    algorithm runs on the rest.

    Returns
    -------
    (ndarray, ndarray)
      offset_coeffs, cf_coeffs
    """
    coeffs = np.asarray(coeffs, dtype=np.float64)
    offset_coeffs = coeffs[:offset].copy()
    cf_coeffs = quotdiff(coeffs[offset:])
    return offset_coeffs, cf_coeffs


def quotdiff_below_diagonal(coeffs, offset):
    """Continued fraction for a denominator degree excess of `offset`.

    Works with the reciprocal series g = 1/f: the first `offset`
    coefficients of g are kept verbatim and the qd algorithm runs on the
    rest.  Evaluation must invert the result again.

    Returns
    -------
    (ndarray, ndarray)
      offset_coeffs, cf_coeffs
    """
    recip = reciprocal_series(coeffs)
    offset_coeffs = recip[:offset].copy()
    cf_coeffs = quotdiff(recip[offset:])
    return offset_coeffs, cf_coeffs
