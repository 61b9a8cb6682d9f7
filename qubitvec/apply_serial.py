# qubitvec/apply_serial.py
import numpy as np

from .errors import DimensionMismatchError, ZeroNormError


def normalize(psi: np.ndarray) -> np.ndarray:
    """Return psi / ||psi||. Raises ZeroNormError on a zero vector."""
    norm = float(np.linalg.norm(psi))
    if norm == 0.0 or not np.isfinite(norm):
        raise ZeroNormError(f"Cannot normalize state with norm {norm}")
    return psi / norm


def check_dims(U: np.ndarray, psi: np.ndarray):
    if U.shape != (psi.shape[0], psi.shape[0]):
        raise DimensionMismatchError(
            f"Gate of shape {U.shape} cannot act on a state of dimension {psi.shape[0]}")


def evolve(U: np.ndarray, psi: np.ndarray) -> np.ndarray:
    """Dense U @ psi followed by renormalization. psi is not modified."""
    check_dims(U, psi)
    out = U.astype(psi.dtype, copy=False) @ psi
    return normalize(out)
