"""Exception types raised by cfyield."""

from __future__ import division, print_function, absolute_import


class CFYieldError(Exception):
    """Base class for errors raised by this package."""


class DegenerateSeriesError(CFYieldError, ValueError):
    """A power series produced non-finite continued fraction coefficients.

    This happens when the quotient-difference table divides by zero (or
    something that rounds to it), e.g. for series that are exactly
    rational of low order.
    """


class FitFailureError(CFYieldError, RuntimeError):
    """No candidate degree produced a usable continued fraction.

    Parameters
    ----------
    message: str
    failure: FitFailure or None
      The record describing which degrees were rejected and why.
    """

    def __init__(self, message, failure=None):
        super(FitFailureError, self).__init__(message)
        self.failure = failure
