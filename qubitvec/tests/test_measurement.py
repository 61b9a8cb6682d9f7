import numpy as np
import pytest

from qubitvec.gates import Gate
from qubitvec.state import Qubit, Register

def test_measure_basis_qubits():
    for _ in range(100):
        assert Qubit.zero().measure() == 0
        assert Qubit.one().measure() == 1

def test_measure_collapses_and_repeats():
    rng = np.random.default_rng(7)
    q = Gate.hadamard().apply(Qubit.zero())
    bit = q.measure(rng)
    assert q == (Qubit.one() if bit else Qubit.zero())
    for _ in range(10):
        assert q.measure(rng) == bit

def test_measure_seeded_is_reproducible():
    def run(seed):
        rng = np.random.default_rng(seed)
        return [Gate.hadamard().apply(Qubit.zero()).measure(rng) for _ in range(50)]
    assert run(11) == run(11)

def test_hadamard_measurement_statistics():
    rng = np.random.default_rng(1234)
    h = Gate.hadamard()
    N = 20_000
    ones = 0
    for _ in range(N):
        q = Qubit.zero()
        h.apply_mut(q)
        ones += q.measure(rng)
    # 5 sigma for p=0.5
    assert abs(ones / N - 0.5) < 5 * 0.5 / np.sqrt(N)

def test_register_measure_basis():
    r = Register.from_int(3, 5)
    assert r.measure() == 5
    assert r == Register.from_int(3, 5)

def test_register_measure_collapses_to_support():
    rng = np.random.default_rng(3)
    for _ in range(50):
        r = Register.from_slice([1, 0, 0, 1])
        k = r.measure(rng)
        assert k in (0, 3)
        assert r == Register.from_int(2, k)
        assert abs(1.0 - r.norm2()) < 1e-12

def test_sample_does_not_collapse():
    rng = np.random.default_rng(5)
    r = Register.from_slice([1, 0, 0, 1])
    before = r.copy()
    counts = r.sample(4000, rng)
    assert r == before
    assert counts.shape == (4,)
    assert counts.sum() == 4000
    assert counts[1] == 0 and counts[2] == 0
    assert abs(counts[0] / 4000 - 0.5) < 0.05

def test_sample_negative_shots():
    with pytest.raises(ValueError):
        Register.from_int(1, 0).sample(-1)

class FixedDraw:
    def __init__(self, u):
        self.u = u

    def random(self):
        return self.u

def test_measure_draw_past_cdf_picks_last_supported_index():
    r = Register.from_slice([1, 0, 1, 0])
    assert r.measure(FixedDraw(1.0)) == 2
    assert r == Register.from_int(2, 2)

def test_measure_draw_boundaries():
    assert Register.from_slice([1, 0, 1, 0]).measure(FixedDraw(0.0)) == 0
    assert Register.from_slice([0, 1]).measure(FixedDraw(0.0)) == 1
