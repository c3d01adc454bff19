"""Select a continued fraction approximant for a count histogram.

The yield curve of a sequencing library, i.e. the expected number of
distinct reads as a function of the amount of additional sequencing t,
has a power series whose coefficients are, up to sign, the counts
histogram.  The continued fraction of that series gives a rational
approximant that can be evaluated far beyond its radius of convergence.
A degree is accepted only if its extrapolation looks like a yield curve:
increasing, with non-increasing increments.
"""

from __future__ import division, print_function, absolute_import

import logging
import sys
from collections import namedtuple

import numpy as np

from .contfrac import ContinuedFraction
from .errors import DegenerateSeriesError, FitFailureError
from .nearby import bisect_stationary_point, is_bracketed

MIN_ALLOWED_DEGREE = 6


def power_series_coeffs(counts_hist, n_terms):
    """Power series coefficients of the yield curve from a histogram.

      ps[j] = counts_hist[j+1] * (-1)^(j+2),  j = 0 .. n_terms-1

    Entries beyond the end of `counts_hist` count as zero.
    """
    counts_hist = np.asarray(counts_hist, dtype=np.float64)
    ps_coeffs = np.zeros(n_terms)
    n_avail = max(0, min(n_terms, len(counts_hist) - 1))
    ps_coeffs[:n_avail] = counts_hist[1:n_avail + 1]
    ps_coeffs[1::2] *= -1.0
    return ps_coeffs


def check_estimates_stability(estimates):
    """Check that a sequence of estimates looks like a yield curve.

    The estimates must be finite and non-decreasing, with non-increasing
    increments (a discrete form of concavity).
    """
    estimates = np.asarray(estimates, dtype=np.float64)
    if not np.all(np.isfinite(estimates)):
        return False
    for i in range(1, len(estimates)):
        if estimates[i] < estimates[i - 1]:
            return False
        if i >= 2 and (estimates[i] - estimates[i - 1]
                       > estimates[i - 1] - estimates[i - 2]):
            return False
    return True


FitFailure = namedtuple(
    "FitFailure", ["message", "unstable_degrees", "degenerate_degrees"]
)
FitFailure.__doc__ = """Why no continued fraction was selected.

unstable_degrees: degrees whose extrapolation failed the stability check.
degenerate_degrees: degrees with non-finite coefficients.
"""


class FitResult(namedtuple("FitResult", ["continued_fraction", "failure"])):
    """Outcome of :meth:`ContinuedFractionApproximation.optimal_continued_fraction`.

    Exactly one of `continued_fraction` and `failure` is not None.
    """

    __slots__ = ()

    @property
    def ok(self):
        return self.continued_fraction is not None

    def unwrap(self):
        """Return the continued fraction, or raise FitFailureError."""
        if not self.ok:
            raise FitFailureError(self.failure.message, self.failure)
        return self.continued_fraction


class ContinuedFractionApproximation(object):
    """Search over continued fraction degrees for a histogram.

    Holds configuration only, so one instance can be reused for any
    number of histograms.

    Parameters
    ----------
    diagonal_idx: int [default: 0]
      Diagonal of the Padé table to work on.  See
      :class:`cfyield.contfrac.ContinuedFraction`.

    max_terms: int [default: 100]
      Maximum number of power series terms, and so the largest degree,
      to try.  Rounded down to an even number.

    step_size: float [default: 1.0]
      Spacing of the grid on which extrapolations are checked.

    max_value: float [default: 100.0]
      Largest grid point.

    logger: logging.Logger [default: logging.getLogger(__name__)]
      Where diagnostics go.
    """

    def __init__(self, diagonal_idx=0, max_terms=100, step_size=1.0,
                 max_value=100.0, logger=None):
        self.diagonal_idx = diagonal_idx
        self.max_terms = max_terms
        self.step_size = step_size
        self.max_value = max_value
        self.logger = logger if logger is not None else logging.getLogger(__name__)

        self.set_params()
        self.logger.debug("max_terms={}".format(self.max_terms))

    def set_params(self, **kwargs):
        """Set the configuration, keeping current values for missing keys.

        Nothing is changed if any of the new values is rejected.
        """
        diagonal_idx = int(kwargs.get("diagonal_idx", self.diagonal_idx))
        max_terms = int(kwargs.get("max_terms", self.max_terms))
        step_size = float(kwargs.get("step_size", self.step_size))
        max_value = float(kwargs.get("max_value", self.max_value))

        if not (step_size > 0.0):
            raise ValueError("step_size={} must be > 0".format(step_size))
        if not (max_value >= step_size):
            raise ValueError(
                "max_value={} must be >= step_size={}".format(max_value, step_size)
            )
        if max_terms - (max_terms % 2) - abs(diagonal_idx) < MIN_ALLOWED_DEGREE:
            raise ValueError(
                "max_terms={} must be >= {} + |diagonal_idx|".format(
                    max_terms, MIN_ALLOWED_DEGREE
                )
            )

        self.diagonal_idx = diagonal_idx
        self.max_terms = max_terms
        self.step_size = step_size
        self.max_value = max_value
        self.logger = kwargs.get("logger", self.logger)

    @property
    def local_max_terms(self):
        """max_terms rounded down to even, so the estimate is an underestimate."""
        return self.max_terms - (self.max_terms % 2)

    def candidate_degrees(self):
        """Degrees to try, largest first.

        Off the diagonal the first |diagonal_idx| series terms become
        offset coefficients, which leaves fewer continued fraction
        coefficients, so larger degrees are left out.
        """
        n_cf_coeffs = self.local_max_terms - abs(self.diagonal_idx)
        return [n_terms for n_terms in
                range(self.local_max_terms, MIN_ALLOWED_DEGREE - 1, -2)
                if n_terms <= n_cf_coeffs]

    def _grid(self):
        vals = []
        val = self.step_size
        while val <= self.max_value:
            vals.append(val)
            val += self.step_size
        return vals

    def optimal_continued_fraction(self, counts_hist):
        """Largest degree whose extrapolation is stable.

        Parameters
        ----------
        counts_hist: array_like of float
          counts_hist[j] is the number of distinct items seen j times.

        Returns
        -------
        FitResult
          Holds the selected :class:`ContinuedFraction`, or a
          :class:`FitFailure` if no degree in the sweep was stable.
        """
        ps_coeffs = power_series_coeffs(counts_hist, self.local_max_terms)

        unstable = []
        degenerate = []
        for n_terms in self.candidate_degrees():
            try:
                cf = ContinuedFraction(ps_coeffs, self.diagonal_idx, n_terms)
            except DegenerateSeriesError as err:
                self.logger.debug("degree={} rejected: {}".format(n_terms, err))
                degenerate.append(n_terms)
                continue

            estimates = cf.extrapolate_distinct(counts_hist, self.max_value,
                                                self.step_size)
            if check_estimates_stability(estimates):
                self.logger.info("selected continued fraction degree={}".format(n_terms))
                return FitResult(cf, None)

            if not np.all(np.isfinite(estimates)):
                self.logger.debug("degree={} rejected: non-finite estimates".format(n_terms))
                degenerate.append(n_terms)
            else:
                self.logger.debug("degree={} rejected: unstable estimates".format(n_terms))
                unstable.append(n_terms)

        failure = FitFailure("unable to fit continued fraction", unstable, degenerate)
        self.logger.warning(
            "{} (unstable degrees: {}, degenerate degrees: {})".format(
                failure.message, unstable, degenerate
            )
        )
        return FitResult(None, failure)

    def locate_zero_cf_deriv(self, cf, val, prev_val):
        """Stationary point of `cf` in (prev_val, val) by bisection."""
        if (self.logger.isEnabledFor(logging.DEBUG)
                and not is_bracketed(cf.complex_deriv, prev_val, val)):
            self.logger.debug(
                "derivative does not change sign in ({}, {})".format(prev_val, val)
            )
        val_mid, _, _ = bisect_stationary_point(cf.complex_deriv, prev_val, val,
                                                logger=self.logger)
        return val_mid

    def local_max(self, cf):
        """Largest value of `cf` at a stationary point on the grid, or f(0).

        Every grid interval (val - step_size, val) up to max_value is
        bisected for a zero of the derivative.
        """
        current_max = cf(0.0)
        for val in self._grid():
            current_max = max(
                current_max, cf(self.locate_zero_cf_deriv(cf, val, val - self.step_size))
            )
        return current_max

    def lowerbound_librarysize(self, counts_hist):
        """Conservative lower bound on the total number of distinct items.

        The yield curve approximant x p(x)/q(x) goes to zero when the
        denominator degree exceeds the numerator degree by more than one,
        so it has a global maximum, which bounds the library size from
        below.  Any single degree can overshoot, so the minimum over all
        tried degrees is returned.

        Raises
        ------
        FitFailureError
          If no degree gave a finite local maximum.
        """
        ps_coeffs = power_series_coeffs(counts_hist, self.local_max_terms)

        best = sys.float_info.max
        unusable = []
        for n_terms in self.candidate_degrees():
            try:
                cf = ContinuedFraction(ps_coeffs, self.diagonal_idx, n_terms)
            except DegenerateSeriesError as err:
                self.logger.debug("degree={} skipped: {}".format(n_terms, err))
                unusable.append(n_terms)
                continue

            candidate_best = self.local_max(cf)
            self.logger.debug("{}\t{}".format(n_terms, candidate_best))
            if not np.isfinite(candidate_best):
                unusable.append(n_terms)
                continue
            best = min(best, candidate_best)

        if len(unusable) == len(self.candidate_degrees()):
            raise FitFailureError(
                "no finite local maximum for degrees {}".format(unusable),
                FitFailure("no finite local maximum", [], unusable),
            )
        return best
