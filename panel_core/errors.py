"""Error taxonomy for the panel-method engine.

Validation failures are raised before any influence coefficient is
computed. Numerical failures come out of the linear solve. Consistency
problems are advisory and travel through ``warnings``.
"""


class PanelValidationError(ValueError):
    """Caller-supplied geometry or freestream is unusable."""


class NumericalSolveError(RuntimeError):
    """The assembled influence matrix could not be solved reliably."""


class KuttaConsistencyWarning(UserWarning):
    """Pressure-integrated lift disagrees with the trailing doublet jump."""
