# qubitvec/apply_numba.py
import numpy as np
from numba import njit, prange, set_num_threads, get_num_threads

from .apply_serial import check_dims, normalize

# ---------- low-level kernel (Numba JIT) ----------

@njit(parallel=True, fastmath=True)
def _matvec_kernel(U, psi, out):
    N = psi.shape[0]
    for i in prange(N):
        acc = 0j
        for j in range(N):
            acc += U[i, j] * psi[j]
        out[i] = acc

# ---------- user-facing helpers ----------

def set_threads(n: int):
    set_num_threads(n)

def get_threads() -> int:
    return get_num_threads()

def evolve(U: np.ndarray, psi: np.ndarray) -> np.ndarray:
    """Same contract as apply_serial.evolve, product computed by the JIT kernel."""
    check_dims(U, psi)
    out = np.empty_like(psi)
    _matvec_kernel(np.ascontiguousarray(U, dtype=psi.dtype), np.ascontiguousarray(psi), out)
    return normalize(out)
