"""
Unit tests for the peephole optimizer.
"""

import pytest

from quantummesh.circuits.optimizer import (
    CircuitOptimizer,
    OptimizationReport,
    optimize,
    reduction_percentage,
)
from quantummesh.errors import EmptyCircuitError
from quantummesh.io.formats import CNOT, Circuit, Hadamard, PauliX, PauliZ, Phase


def gates_after(num_qubits, gates):
    return list(optimize(Circuit(num_qubits, tuple(gates))).gates)


class TestCancellation:
    def test_adjacent_hadamards_cancel(self):
        assert gates_after(1, [Hadamard(0), Hadamard(0)]) == []

    def test_adjacent_pauli_x_cancel(self):
        assert gates_after(2, [PauliX(1), PauliX(1), Hadamard(0)]) == [Hadamard(0)]

    def test_different_qubits_do_not_cancel(self):
        gates = [Hadamard(0), Hadamard(1)]
        assert gates_after(2, gates) == gates

    def test_different_types_do_not_cancel(self):
        gates = [Hadamard(0), PauliX(0)]
        assert gates_after(1, gates) == gates

    def test_other_self_inverse_gates_are_kept(self):
        gates = [PauliZ(0), PauliZ(0), CNOT(0, 1), CNOT(0, 1)]
        assert gates_after(2, gates) == gates

    def test_non_adjacent_pair_kept(self):
        gates = [Hadamard(0), Phase(1, 0.5), Hadamard(0)]
        assert gates_after(2, gates) == gates


class TestSinglePass:
    """The rewrite is one left-to-right pass, not a fixpoint."""

    def test_odd_run_leaves_one(self):
        assert gates_after(1, [Hadamard(0)] * 3) == [Hadamard(0)]

    def test_even_run_cancels_fully(self):
        assert gates_after(1, [Hadamard(0)] * 4) == []

    def test_no_cascade(self):
        gates = [Hadamard(0), PauliX(0), PauliX(0), Hadamard(0)]
        assert gates_after(1, gates) == [Hadamard(0), Hadamard(0)]

    def test_second_pass_finishes_cascade(self):
        circuit = Circuit(1, (Hadamard(0), PauliX(0), PauliX(0), Hadamard(0)))
        assert optimize(optimize(circuit)).num_gates() == 0


class TestOptimizerContract:
    def test_width_preserved_and_order_kept(self):
        circuit = Circuit(3, (PauliX(2), Hadamard(0), Hadamard(0), CNOT(1, 2), Phase(0, 0.1)))
        optimized = optimize(circuit)

        assert optimized.num_qubits == 3
        assert optimized.gates == (PauliX(2), CNOT(1, 2), Phase(0, 0.1))
        assert circuit.num_gates() == 5

    def test_empty_circuit(self):
        assert optimize(Circuit(2)).num_gates() == 0

    def test_report(self):
        optimizer = CircuitOptimizer()
        original = Circuit(1, (Hadamard(0), Hadamard(0), PauliX(0)))
        optimized = optimizer.optimize(original)

        report = optimizer.report(original, optimized)
        assert report == OptimizationReport(original_gates=3, optimized_gates=1)
        assert report.removed_gates == 2
        assert report.reduction_percent == 66


class TestReductionPercentage:
    @pytest.mark.parametrize(
        "original, optimized, expected",
        [(4, 0, 100), (4, 4, 0), (3, 2, 33), (7, 2, 71), (10, 5, 50)],
    )
    def test_floor_percentage(self, original, optimized, expected):
        assert reduction_percentage(original, optimized) == expected

    def test_empty_original_raises(self):
        with pytest.raises(EmptyCircuitError):
            reduction_percentage(0, 0)
        with pytest.raises(EmptyCircuitError):
            OptimizationReport(0, 0).reduction_percent
