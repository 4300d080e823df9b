"""
Unit tests for canonical circuit builders.
"""

import math

import pytest

from quantummesh.circuits import (
    bell_circuit,
    benchmark_circuit,
    ghz_circuit,
    qft_circuit,
    random_circuit,
)
from quantummesh.io.formats import CNOT, Hadamard, PauliX, Phase, RotationZ


class TestFixedCircuits:
    def test_bell(self):
        circuit = bell_circuit()
        assert circuit.num_qubits == 2
        assert circuit.gates == (Hadamard(0), CNOT(control=0, target=1))

    @pytest.mark.parametrize("n", [1, 2, 3, 6])
    def test_ghz_structure(self, n):
        circuit = ghz_circuit(n)
        assert circuit.num_qubits == n
        assert circuit.gates[0] == Hadamard(0)
        assert list(circuit.gates[1:]) == [CNOT(0, k) for k in range(1, n)]

    @pytest.mark.parametrize("n", [1, 2, 3, 5, 8])
    def test_qft_gate_count(self, n):
        assert qft_circuit(n).num_gates() == n + n * (n - 1) // 2

    def test_qft_order_and_angles(self):
        gates = qft_circuit(3).gates
        assert gates == (
            Hadamard(2),
            Phase(2, math.pi / 2),
            Phase(2, math.pi / 4),
            Hadamard(1),
            Phase(1, math.pi / 2),
            Hadamard(0),
        )

    def test_benchmark(self):
        circuit = benchmark_circuit(4)
        assert circuit.gates[:4] == tuple(Hadamard(q) for q in range(4))
        assert circuit.gates[4:] == (CNOT(0, 1), CNOT(1, 2), CNOT(2, 3))

    @pytest.mark.parametrize("builder", [ghz_circuit, qft_circuit, benchmark_circuit])
    def test_zero_width_rejected(self, builder):
        with pytest.raises(ValueError, match="at least 1"):
            builder(0)


class TestRandomCircuit:
    def test_seed_reproducible(self):
        assert random_circuit(4, 6, seed=3) == random_circuit(4, 6, seed=3)

    def test_gate_vocabulary(self):
        circuit = random_circuit(5, 8, seed=1)
        for gate in circuit.gates:
            assert isinstance(gate, (Hadamard, PauliX, RotationZ, CNOT))

    def test_layer_sizes(self):
        circuit = random_circuit(5, 4, seed=0)
        # Two single-qubit layers of 5 gates, two CNOT layers of 2 gates
        assert circuit.num_single_qubit_gates() == 10
        assert circuit.num_multi_qubit_gates() == 4

    def test_zero_depth(self):
        assert random_circuit(3, 0).num_gates() == 0

    def test_negative_depth(self):
        with pytest.raises(ValueError):
            random_circuit(3, -1)
