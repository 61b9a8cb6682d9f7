import time

import numpy as np
import pytest

pytest.importorskip("numba")

from qubitvec.gates import Gate
from qubitvec.state import Register

def hadamard_all(n):
    U = np.ones((1, 1))
    for _ in range(n):
        U = np.kron(U, Gate.hadamard().matrix)
    return Gate(U)

def best_time(g, st, backend, repeats=5):
    best = float("inf")
    for _ in range(repeats):
        t0 = time.perf_counter()
        out = g.apply(st, backend=backend)
        best = min(best, time.perf_counter() - t0)
    return out, best

def test_apply_runs_and_times():
    n = 10
    g = hadamard_all(n)
    st = Register.from_int(n, 0)
    g.apply(st, backend="numba")  # JIT warmup

    s1, t1 = best_time(g, st, "serial")
    s2, t2 = best_time(g, st, "numba")

    # correctness
    assert np.allclose(s1.as_numpy(), s2.as_numpy(), atol=1e-10, rtol=0)
    assert np.allclose(s1.probabilities(), np.full(1 << n, 1.0 / (1 << n)), atol=1e-12)
    # sanity: both timings are positive
    assert t1 > 0 and t2 > 0
    # don't hard-assert speedup (machines vary); just ensure it isn't catastrophically slower
    assert t2 < 5.0 * t1
