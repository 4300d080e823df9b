"""
Plain-text rendering of simulation and optimizer results.

The engine only returns data; everything a user reads on the terminal is
built here.
"""

from typing import List

import numpy as np

from quantummesh.circuits.optimizer import OptimizationReport
from quantummesh.io.formats import Circuit, GateDescriptor, int_to_bitstring

BAR_WIDTH = 40


def _width_for(size: int) -> int:
    return max(1, int(size - 1).bit_length())


def format_probabilities(probs: np.ndarray, limit: int = 10) -> str:
    """
    Text table of the first ``limit`` basis-state probabilities.

    Each row shows the basis state as a ket (qubit n-1 leftmost), the
    probability as a percentage and a bar proportional to it.
    """
    probs = np.asarray(probs, dtype=float)
    width = _width_for(probs.size)

    lines = ["Qubit State Probabilities:"]
    for index, prob in enumerate(probs[:limit]):
        bar = "#" * int(prob * BAR_WIDTH)
        lines.append(f"  |{int_to_bitstring(index, width)}> {prob * 100.0:6.2f}% {bar}")

    if probs.size > limit:
        lines.append(f"  ... ({probs.size - limit} more states)")
    return "\n".join(lines)


def format_counts(counts: dict, shots: int) -> str:
    """Sampled outcomes, most frequent first."""
    lines = [f"Sampled outcomes ({shots} shots):"]
    for bitstring, count in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0])):
        lines.append(f"  {bitstring}: {count}")
    return "\n".join(lines)


def describe_gate(gate: GateDescriptor) -> str:
    """Compact one-line form, e.g. ``CNOT(control=0, target=1)``."""
    fields = [f"{name}={getattr(gate, name)}" for name in gate.qubit_fields]
    fields += [f"{name}={getattr(gate, name):.6g}" for name in gate.param_fields]
    return f"{gate.type_name}({', '.join(fields)})"


def format_circuit(circuit: Circuit, limit: int = 20) -> str:
    """Summary header plus the first ``limit`` gates, numbered from 1."""
    lines: List[str] = [
        "Circuit Visualization:",
        f"  Qubits: {circuit.num_qubits}",
        f"  Gates: {circuit.num_gates()}",
    ]

    counts = circuit.gate_counts()
    if counts:
        lines.append("  Gate counts: " + ", ".join(f"{k}={v}" for k, v in counts.items()))

    lines.append("")
    lines.append("  Gate Sequence:")
    for i, gate in enumerate(circuit.gates[:limit], start=1):
        lines.append(f"  {i:3d}. {describe_gate(gate)}")

    if circuit.num_gates() > limit:
        lines.append(f"  ... ({circuit.num_gates() - limit} more gates)")
    return "\n".join(lines)


def format_optimization(report: OptimizationReport) -> str:
    lines = [
        f"Original circuit: {report.original_gates} gates",
        f"Optimized circuit: {report.optimized_gates} gates",
    ]
    # Percentage is undefined for an empty circuit
    if report.original_gates > 0:
        lines.append(f"Reduction: {report.reduction_percent}%")
    else:
        lines.append("Reduction: n/a (empty circuit)")
    return "\n".join(lines)
