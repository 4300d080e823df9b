"""
Exception taxonomy for the quantummesh engine.

Every error is recoverable and raised to the caller; the engine never exits
the process. The command-line front end is the only place that turns these
into an exit status.
"""

from typing import Optional


class QuantumMeshError(Exception):
    """Base class for all engine errors."""


class ParseError(QuantumMeshError, ValueError):
    """Malformed or incomplete circuit description."""


class OutOfRangeError(QuantumMeshError, IndexError):
    """
    Qubit index outside ``[0, num_qubits)``, repeated index on a multi-qubit
    gate, or a circuit whose width does not match the simulator.
    """


class OutOfMemoryError(QuantumMeshError, MemoryError):
    """Allocation request exceeds what is left in a ResourcePool."""

    def __init__(self, requested: int, available: int, message: Optional[str] = None):
        self.requested = requested
        self.available = available
        if message is None:
            message = (
                f"Out of memory: requested {requested} bytes, "
                f"available {available} bytes"
            )
        super().__init__(message)


class EmptyCircuitError(QuantumMeshError, ValueError):
    """Operation is undefined on a circuit without gates."""


class NormalizationError(QuantumMeshError, ArithmeticError):
    """State vector norm drifted away from 1."""
