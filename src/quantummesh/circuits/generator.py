"""
Canonical circuit builders.

Deterministic, side-effect free constructors for the standard entangling and
transform circuits, plus the benchmark workloads used by the CLI.
"""

import math
from typing import List, Optional

import numpy as np

from quantummesh.io.formats import CNOT, Circuit, Gate, Hadamard, PauliX, Phase, RotationZ


def _check_width(num_qubits: int) -> None:
    if num_qubits < 1:
        raise ValueError(f"num_qubits must be at least 1, got {num_qubits}")


def bell_circuit() -> Circuit:
    """(|00> + |11>)/sqrt(2) on two qubits: H(0), CNOT(0, 1)."""
    return Circuit(
        num_qubits=2,
        gates=(Hadamard(0), CNOT(control=0, target=1)),
    )


def ghz_circuit(num_qubits: int) -> Circuit:
    """
    GHZ state (|0...0> + |1...1>)/sqrt(2).

    Hadamard on qubit 0 followed by CNOT(0, k) for every other qubit k.
    """
    _check_width(num_qubits)
    gates: List[Gate] = [Hadamard(0)]
    for k in range(1, num_qubits):
        gates.append(CNOT(control=0, target=k))
    return Circuit(num_qubits=num_qubits, gates=tuple(gates))


def qft_circuit(num_qubits: int) -> Circuit:
    """
    Quantum Fourier transform without the final qubit reversal.

    For j from n-1 down to 0: Hadamard(j), then Phase(j, pi / 2^(j-k)) for
    k from j-1 down to 0. Contains n + n(n-1)/2 gates.
    """
    _check_width(num_qubits)
    gates: List[Gate] = []
    for j in reversed(range(num_qubits)):
        gates.append(Hadamard(j))
        for k in reversed(range(j)):
            gates.append(Phase(qubit=j, angle=math.pi / 2.0 ** (j - k)))
    return Circuit(num_qubits=num_qubits, gates=tuple(gates))


def benchmark_circuit(num_qubits: int) -> Circuit:
    """Hadamard on every qubit, then a CNOT(i, i+1) ladder."""
    _check_width(num_qubits)
    gates: List[Gate] = [Hadamard(q) for q in range(num_qubits)]
    gates.extend(CNOT(control=q, target=q + 1) for q in range(num_qubits - 1))
    return Circuit(num_qubits=num_qubits, gates=tuple(gates))


def random_circuit(num_qubits: int, depth: int, seed: Optional[int] = None) -> Circuit:
    """
    Layered random circuit for benchmarking.

    Even layers put H, X or RZ(theta) on every qubit; odd layers put CNOTs
    on neighbouring pairs with a random direction.

    Args:
        num_qubits: Register width
        depth: Number of layers
        seed: Random seed for reproducibility
    """
    _check_width(num_qubits)
    if depth < 0:
        raise ValueError(f"depth must be non-negative, got {depth}")

    rng = np.random.default_rng(seed)
    gates: List[Gate] = []

    for layer in range(depth):
        if layer % 2 == 0:
            for q in range(num_qubits):
                choice = rng.integers(0, 3)
                if choice == 0:
                    gates.append(Hadamard(q))
                elif choice == 1:
                    gates.append(PauliX(q))
                else:
                    gates.append(RotationZ(qubit=q, angle=float(rng.uniform(0, 2 * np.pi))))
        else:
            for q in range(0, num_qubits - 1, 2):
                if rng.integers(0, 2) == 0:
                    gates.append(CNOT(control=q, target=q + 1))
                else:
                    gates.append(CNOT(control=q + 1, target=q))

    return Circuit(num_qubits=num_qubits, gates=tuple(gates))
