"""cfyield - continued fraction extrapolation of yield curves.

Turns the counts histogram of a sequencing experiment into a continued
fraction approximant of the library's yield curve (expected distinct
reads versus sequencing effort), extrapolates it beyond the observed
data, and gives a conservative lower bound on the library size.

Evaluation runs in JAX, so approximants can be jit-compiled, vectorized
and differentiated.

Examples
--------

>>> import cfyield
>>> approx = cfyield.ContinuedFractionApproximation(
...     diagonal_idx=0, max_terms=12, step_size=1.0, max_value=10.0)
>>> result = approx.optimal_continued_fraction(counts_hist)
>>> if result.ok:
...     estimates = result.continued_fraction.extrapolate_distinct(
...         counts_hist, 10.0, 1.0)

**Members**

.. autosummary::

   cfyield.ContinuedFraction
   cfyield.ContinuedFractionApproximation

"""

from __future__ import print_function, division, absolute_import

# Enable 64-bit precision in JAX
import jax
jax.config.update("jax_enable_x64", True)

from ._version import __version__

__status__ = "beta"
__license__ = """
MIT License

Permission is hereby granted, free of charge, to any person obtaining a copy
of this software and associated documentation files (the "Software"), to deal
in the Software without restriction, including without limitation the rights
to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
copies of the Software, and to permit persons to whom the Software is
furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in
all copies or substantial portions of the Software.

THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN
THE SOFTWARE.
"""

__credits__ = """
The continued fraction method follows the preseq software by Timothy
Daley and Andrew D. Smith.

If you use this package in academic work, please cite:
  Daley, T. and Smith, A.D. (2013). "Predicting the molecular complexity
  of sequencing libraries." Nature Methods, 10(4), 325-327.
  doi:10.1038/nmeth.2375
"""

from . import errors
from . import quotdiff
from . import contfrac
from . import nearby
from . import approximation

from .errors import CFYieldError, DegenerateSeriesError, FitFailureError
from .contfrac import ContinuedFraction
from .approximation import (
    ContinuedFractionApproximation,
    FitFailure,
    FitResult,
    check_estimates_stability,
    power_series_coeffs,
)
