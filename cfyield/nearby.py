"""Find a nearby stationary point of a continued fraction by bisection.

The derivative is supplied as a callable, typically
:meth:`cfyield.contfrac.ContinuedFraction.complex_deriv`.
"""

from __future__ import division, print_function, absolute_import

import logging
import sys

from .contfrac import TOLERANCE

_logger = logging.getLogger(__name__)


def _relative_change(old, new):
    """|(old - new)/old|, with x/0 -> inf and 0/0 -> 0."""
    if old == 0.0:
        return float("inf") if new != 0.0 else 0.0
    return abs((old - new) / old)


def movement(a, b):
    """Relative width of the interval between `a` and `b`."""
    return _relative_change(max(a, b), min(a, b))


def is_bracketed(deriv, val_low, val_high):
    """True if `deriv` changes sign strictly between the two endpoints."""
    deriv_low = deriv(val_low)
    deriv_high = deriv(val_high)
    return (deriv_low < 0.0 < deriv_high) or (deriv_high < 0.0 < deriv_low)


def bisect_stationary_point(deriv, val_low, val_high, tol=TOLERANCE, max_iter=2000,
                            logger=None):
    """Locate a zero of `deriv` in (val_low, val_high) by bisection.

    Iterates until either the relative change between successive
    midpoint derivatives or the relative width of the interval falls
    below `tol`.  The interval is assumed to bracket a sign change; if
    it does not, the search still terminates but the returned point has
    no meaning.  Use :func:`is_bracketed` to check beforehand.

    Parameters
    ----------
    deriv: callable
      Derivative, deriv(x) -> float.

    val_low: float
      Lower end of the interval.

    val_high: float
      Upper end of the interval.

    tol: float [default: 1e-20]
      Relative tolerance for termination.

    max_iter: int [default: 2000]
      Maximum number of bisection steps.

    logger: logging.Logger [default: logging.getLogger(__name__)]
      Receives a debug record when max_iter is reached.

    Returns
    -------
    (float, float, int)
      The first element of the tuple is the final midpoint.  The second
      is the last relative change of the midpoint derivative.  The third
      is the number of bisection steps.
    """
    if logger is None:
        logger = _logger

    deriv_low = deriv(val_low)

    val_mid = 0.5 * (val_low + val_high)
    prev_deriv = sys.float_info.max
    diff = sys.float_info.max

    n_iter = 0
    while (diff > tol and movement(val_low, val_high) > tol
           and n_iter < max_iter):
        val_mid = 0.5 * (val_low + val_high)
        deriv_mid = deriv(val_mid)

        if (deriv_mid > 0 and deriv_low < 0) or (deriv_mid < 0 and deriv_low > 0):
            val_high = val_mid
        else:
            val_low = val_mid
            deriv_low = deriv_mid

        diff = _relative_change(prev_deriv, deriv_mid)
        prev_deriv = deriv_mid
        n_iter += 1

    if n_iter >= max_iter:
        logger.debug(
            "bisection stopped after max_iter={} steps at x={}".format(max_iter, val_mid)
        )

    return val_mid, diff, n_iter
