# qubitvec/state.py
import logging
from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from .apply_serial import normalize
from .errors import BasisIndexError

logger = logging.getLogger(__name__)

DEFAULT_DTYPE = np.complex128
DEFAULT_ATOL = 1e-9


def _rng(rng: Optional[np.random.Generator]) -> np.random.Generator:
    return np.random.default_rng() if rng is None else rng


@dataclass(eq=False)
class Register:
    """
    Joint state of n qubits as a unit vector of 2**n complex amplitudes.

    Basis index ordering is big-endian: in ``a.tensor_product(b)`` the
    amplitudes of ``a`` select the high-order bits.
    """

    psi: np.ndarray  # shape (dim,), dtype complex64/128, unit norm

    def __post_init__(self):
        psi = np.asarray(self.psi)
        if psi.ndim != 1 or psi.shape[0] == 0:
            raise ValueError(f"State vector must be 1-D and non-empty, got shape {psi.shape}")
        if not np.issubdtype(psi.dtype, np.complexfloating):
            psi = psi.astype(np.result_type(psi.dtype, np.complex64))
        # zero or non-finite norms fail inside normalize
        if not abs(1.0 - float(np.vdot(psi, psi).real)) <= DEFAULT_ATOL:
            psi = normalize(psi)
        self.psi = psi

    # ---------------------------- constructors ----------------------------

    @classmethod
    def from_slice(cls, values: Sequence[complex], dtype=DEFAULT_DTYPE) -> "Register":
        """Build a register from raw amplitudes, normalizing them."""
        psi = np.asarray(values, dtype=dtype).reshape(-1)
        return cls(normalize(psi))

    @classmethod
    def from_int(cls, n: int, i: int, dtype=DEFAULT_DTYPE) -> "Register":
        """Basis register |i> on n qubits, e.g. from_int(3, 4) is |100>."""
        if n < 0:
            raise BasisIndexError(f"Number of qubits must be non-negative, got {n}")
        N = 1 << n
        if not 0 <= i < N:
            raise BasisIndexError(f"Basis index {i} out of range for {n} qubits (0..{N - 1})")
        psi = np.zeros(N, dtype=dtype)
        psi[i] = 1.0 + 0.0j
        return cls(psi)

    @classmethod
    def from_qubit(cls, q: "Qubit") -> "Register":
        """Embed a qubit's two amplitudes unchanged."""
        return cls(q.psi.copy())

    def tensor_product(self, other: "Register") -> "Register":
        """Kronecker product self (x) other as a new Register."""
        return Register(normalize(np.kron(self.psi, other.psi)))

    # ------------------------------ accessors -----------------------------

    @property
    def dim(self) -> int:
        return self.psi.shape[0]

    @property
    def n(self) -> int:
        """Number of qubits. Only defined for power-of-two dimensions."""
        d = self.dim
        if d & (d - 1):
            raise ValueError(f"Dimension {d} is not a power of two")
        return d.bit_length() - 1

    @property
    def dtype(self):
        return self.psi.dtype

    def norm2(self) -> float:
        return float(np.vdot(self.psi, self.psi).real)

    def check_normalized(self, tol=1e-6):
        n2 = self.norm2()
        if not (abs(1.0 - n2) <= tol):
            raise AssertionError(f"Normalization failed: ||psi||^2={n2}")

    def probabilities(self) -> np.ndarray:
        return np.abs(self.psi) ** 2

    def copy(self) -> "Register":
        return type(self)(self.psi.copy())

    def as_numpy(self) -> np.ndarray:
        return self.psi

    # ------------------------------ equality ------------------------------

    def __eq__(self, other):
        if not isinstance(other, Register):
            return NotImplemented
        return self.psi.shape == other.psi.shape and bool(np.all(self.psi == other.psi))

    def isclose(self, other: "Register", atol=DEFAULT_ATOL, rtol=0.0) -> bool:
        """Equality up to floating rounding."""
        if self.psi.shape != other.psi.shape:
            return False
        return bool(np.allclose(self.psi, other.psi, atol=atol, rtol=rtol))

    # ----------------------------- measurement ----------------------------

    def _collapse(self, index: int):
        self.psi[:] = 0.0
        self.psi[index] = 1.0 + 0.0j

    def measure(self, rng: Optional[np.random.Generator] = None) -> int:
        """
        Collapse to one basis state with Born-rule probability |psi_i|^2.

        Mutates the register in place and returns the basis index.
        """
        u = _rng(rng).random()
        p = self.probabilities()
        index = int(np.searchsorted(np.cumsum(p), u, side="right"))
        if index >= self.dim:
            # u >= cdf[-1] by rounding: last index with nonzero probability
            index = int(np.flatnonzero(p)[-1])
        self._collapse(index)
        logger.debug("measured index %d (u=%.6f)", index, u)
        return index

    def sample(self, shots: int, rng: Optional[np.random.Generator] = None) -> np.ndarray:
        """Counts per basis index over `shots` draws, without collapsing."""
        if shots < 0:
            raise ValueError(f"shots must be non-negative, got {shots}")
        p = self.probabilities()
        outcomes = _rng(rng).choice(self.dim, size=shots, p=p / p.sum())
        return np.bincount(outcomes, minlength=self.dim)

    def __repr__(self):
        return f"{type(self).__name__}({np.array2string(self.psi, precision=6)})"


class Qubit(Register):
    """A single qubit: a Register of dimension 2."""

    def __post_init__(self):
        if np.shape(self.psi) != (2,):
            raise ValueError(f"Qubit needs exactly 2 amplitudes, got shape {np.shape(self.psi)}")
        super().__post_init__()

    @staticmethod
    def zero(dtype=DEFAULT_DTYPE) -> "Qubit":
        return Qubit(np.array([1, 0], dtype=dtype))

    @staticmethod
    def one(dtype=DEFAULT_DTYPE) -> "Qubit":
        return Qubit(np.array([0, 1], dtype=dtype))

    @staticmethod
    def from_re(x: float, y: float, dtype=DEFAULT_DTYPE) -> "Qubit":
        return Qubit.from_complex(complex(x), complex(y), dtype=dtype)

    @staticmethod
    def from_complex(x: complex, y: complex, dtype=DEFAULT_DTYPE) -> "Qubit":
        return Qubit(normalize(np.array([x, y], dtype=dtype)))

    def to_register(self) -> Register:
        return Register.from_qubit(self)

    def measure(self, rng: Optional[np.random.Generator] = None) -> int:
        """Collapse to |0> with probability |a|^2, else |1>. Returns the bit."""
        u = _rng(rng).random()
        p0 = float(abs(self.psi[0]) ** 2)
        bit = 0 if u < p0 else 1
        self._collapse(bit)
        logger.debug("measured bit %d (p0=%.6f, u=%.6f)", bit, p0, u)
        return bit
