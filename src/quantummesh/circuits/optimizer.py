"""
Peephole optimizer for gate sequences.

Removes adjacent pairs of self-inverse single-qubit gates (H H, X X on the
same qubit) in one left-to-right pass.
"""

from dataclasses import dataclass
from typing import List, Tuple, Type
import logging

from quantummesh.errors import EmptyCircuitError
from quantummesh.io.formats import Circuit, Gate, Hadamard, PauliX

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OptimizationReport:
    """Gate counts before and after an optimizer pass."""

    original_gates: int
    optimized_gates: int

    @property
    def removed_gates(self) -> int:
        return self.original_gates - self.optimized_gates

    @property
    def reduction_percent(self) -> int:
        return reduction_percentage(self.original_gates, self.optimized_gates)


def reduction_percentage(original_gates: int, optimized_gates: int) -> int:
    """
    Integer percentage of gates removed, rounded down.

    Raises:
        EmptyCircuitError: If the original circuit had no gates
    """
    if original_gates == 0:
        raise EmptyCircuitError("Cannot compute a reduction for a circuit with no gates")
    return ((original_gates - optimized_gates) * 100) // original_gates


class CircuitOptimizer:
    """
    Single-pass peephole rewriter.

    At each position, if the current gate and the next one are the same
    self-cancelling gate type on the same qubit, both are dropped and the
    scan resumes after them; otherwise the current gate is kept. The pass
    is not repeated, so a pair that only becomes adjacent after a removal
    survives (``H0 X0 X0 H0`` becomes ``H0 H0``).
    """

    cancelling_types: Tuple[Type, ...] = (Hadamard, PauliX)

    def _cancels(self, gate: Gate, following: Gate) -> bool:
        return (
            type(gate) is type(following)
            and isinstance(gate, self.cancelling_types)
            and gate.qubit == following.qubit
        )

    def optimize(self, circuit: Circuit) -> Circuit:
        """
        Return a new circuit with cancelling neighbours removed.

        The result has the same ``num_qubits``, never more gates, and keeps
        the relative order of the surviving gates.
        """
        gates = circuit.gates
        kept: List[Gate] = []

        i = 0
        while i < len(gates):
            if i + 1 < len(gates) and self._cancels(gates[i], gates[i + 1]):
                i += 2
                continue
            kept.append(gates[i])
            i += 1

        optimized = circuit.with_gates(kept)
        logger.debug(
            f"Optimizer removed {len(gates) - len(kept)} of {len(gates)} gates"
        )
        return optimized

    def report(self, original: Circuit, optimized: Circuit) -> OptimizationReport:
        return OptimizationReport(
            original_gates=len(original.gates),
            optimized_gates=len(optimized.gates),
        )


def optimize(circuit: Circuit) -> Circuit:
    """Run one :class:`CircuitOptimizer` pass over ``circuit``."""
    return CircuitOptimizer().optimize(circuit)
