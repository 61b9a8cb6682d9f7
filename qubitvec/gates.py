# qubitvec/gates.py
import logging
from typing import TypeVar

import numpy as np

from . import apply_serial
from .errors import DimensionMismatchError, NotUnitaryError
from .state import DEFAULT_ATOL, DEFAULT_DTYPE, Register

logger = logging.getLogger(__name__)

S = TypeVar("S", bound=Register)


def H(dtype=DEFAULT_DTYPE) -> np.ndarray:
    s = np.sqrt(0.5)
    return np.array([[s, s],
                     [s, -s]], dtype=dtype)

def X(dtype=DEFAULT_DTYPE) -> np.ndarray:
    return np.array([[0, 1],
                     [1, 0]], dtype=dtype)


def _backend(name: str, num_threads=None):
    if name == "serial":
        return apply_serial
    if name == "numba":
        try:
            from . import apply_numba
        except Exception as e:
            raise RuntimeError("Numba backend not available. Did you `pip install numba`?") from e
        if num_threads is not None:
            apply_numba.set_threads(int(num_threads))
        return apply_numba
    raise NotImplementedError(f"Unknown backend: {name}")


class Gate:
    """
    Linear operator on a full state vector, stored as a read-only square matrix.

    Construction checks U^dagger U = I within `atol` (at least the rounding
    of the matrix dtype, so complex64 matrices pass); pass check_unitary=False
    to accept an arbitrary matrix. Application renormalizes the result either
    way, so states stay unit-norm.
    """

    def __init__(self, matrix, check_unitary: bool = True, atol: float = DEFAULT_ATOL):
        U = np.array(matrix, dtype=np.result_type(np.asarray(matrix).dtype, np.complex64))
        if U.ndim != 2 or U.shape[0] != U.shape[1]:
            raise DimensionMismatchError(f"Gate matrix must be square, got shape {U.shape}")
        U.setflags(write=False)
        self._U = U
        if not self.is_unitary(atol):
            if check_unitary:
                raise NotUnitaryError(f"Matrix of shape {U.shape} is not unitary (atol={atol})")
            logger.warning("Building gate from non-unitary %dx%d matrix", *U.shape)

    @classmethod
    def from_matrix(cls, matrix, check_unitary: bool = True) -> "Gate":
        return cls(matrix, check_unitary=check_unitary)

    @classmethod
    def hadamard(cls) -> "Gate":
        return cls(H())

    @classmethod
    def not_(cls) -> "Gate":
        return cls(X())

    x = not_

    @property
    def matrix(self) -> np.ndarray:
        return self._U

    @property
    def dim(self) -> int:
        return self._U.shape[0]

    def is_unitary(self, atol: float = DEFAULT_ATOL) -> bool:
        """U^dagger U = I within atol, widened to the rounding of the matrix dtype."""
        U = self._U
        atol = max(atol, 10 * self.dim * np.finfo(U.real.dtype).eps)
        return bool(np.allclose(U.conj().T @ U, np.eye(self.dim), atol=atol, rtol=0))

    def __matmul__(self, other: "Gate") -> "Gate":
        """Composition: (A @ B) applies B first, then A."""
        if not isinstance(other, Gate):
            return NotImplemented
        if other.dim != self.dim:
            raise DimensionMismatchError(f"Cannot compose gates of dimension {self.dim} and {other.dim}")
        return Gate(self._U @ other._U, check_unitary=False)

    def _evolve(self, state: Register, backend: str, num_threads) -> np.ndarray:
        psi = _backend(backend, num_threads).evolve(self._U, state.psi)
        logger.debug("applied %dx%d gate on %s backend", self.dim, self.dim, backend)
        return psi

    def apply(self, state: S, backend: str = "serial", num_threads=None) -> S:
        """Return U|state> renormalized as a new state; `state` is left untouched."""
        return type(state)(self._evolve(state, backend, num_threads))

    def apply_mut(self, state: Register, backend: str = "serial", num_threads=None):
        """Overwrite `state` with U|state> renormalized."""
        state.psi[:] = self._evolve(state, backend, num_threads)

    def __eq__(self, other):
        if not isinstance(other, Gate):
            return NotImplemented
        return self._U.shape == other._U.shape and bool(np.all(self._U == other._U))

    def __repr__(self):
        return f"Gate({np.array2string(self._U, precision=6)})"
