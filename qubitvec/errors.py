# qubitvec/errors.py


class QubitvecError(Exception):
    """Base class for state and gate misuse errors."""


class ZeroNormError(QubitvecError, ValueError):
    """Amplitudes have zero (or non-finite) norm and cannot be normalized."""


class DimensionMismatchError(QubitvecError, ValueError):
    """Gate matrix and state vector sizes do not agree."""


class BasisIndexError(QubitvecError, IndexError):
    """Basis index outside [0, 2**n)."""


class NotUnitaryError(QubitvecError, ValueError):
    """Gate matrix U does not satisfy U^dagger U = I."""
