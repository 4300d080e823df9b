"""
Circuit simulator.

Owns one StateVector sized for a fixed qubit count, applies gate descriptors
to it in order and exposes measurement probabilities. The amplitude memory is
drawn from a ResourcePool before the array is created.
"""

from typing import Dict, List, Optional
import logging
import math

import numpy as np

from quantummesh.circuits.optimizer import optimize
from quantummesh.config import Config
from quantummesh.errors import OutOfRangeError
from quantummesh.io.formats import (
    CNOT,
    SWAP,
    Circuit,
    GateDescriptor,
    Hadamard,
    Measurement,
    PauliX,
    PauliY,
    PauliZ,
    Phase,
    RotationX,
    RotationY,
    RotationZ,
    Toffoli,
    check_gate_qubits,
    int_to_bitstring,
)
from quantummesh.sim.amplitude import Amplitude
from quantummesh.sim.backend import ExecutionStrategy, create_strategy
from quantummesh.sim.resources import ResourcePool, state_vector_bytes
from quantummesh.sim.statevector import StateVector

logger = logging.getLogger(__name__)

PROGRESS_INTERVAL = 100


class Simulator:
    """
    State-vector simulator for a fixed-width register.

    Example:
        >>> from quantummesh.circuits import bell_circuit
        >>> with Simulator(2) as sim:
        ...     sim.run(bell_circuit())
        ...     probs = sim.measure_all()
        >>> probs.round(3).tolist()
        [0.5, 0.0, 0.0, 0.5]
    """

    def __init__(
        self,
        num_qubits: int,
        pool: Optional[ResourcePool] = None,
        strategy: Optional[ExecutionStrategy] = None,
        config: Optional[Config] = None,
    ):
        """
        Initialize simulator in |0...0>.

        Args:
            num_qubits: Register width (>= 1)
            pool: Memory budget to allocate the state from. If None, one is
                created from ``config.simulation.memory_capacity_bytes`` or,
                when that is unset, from available system memory.
            strategy: Kernel scheduler. If None, built from ``config.execution``
                and closed together with the simulator.
            config: Settings; defaults to ``Config()``

        Raises:
            OutOfMemoryError: If the pool cannot hold 2^n amplitudes
        """
        if num_qubits < 1:
            raise ValueError(f"num_qubits must be at least 1, got {num_qubits}")

        self.num_qubits = num_qubits
        self.config = config if config is not None else Config()

        if pool is None:
            capacity = self.config.simulation.memory_capacity_bytes
            pool = ResourcePool(capacity) if capacity is not None else ResourcePool.from_system()
        self.pool = pool

        self._owns_strategy = strategy is None
        if strategy is None:
            execution = self.config.execution
            strategy = create_strategy(
                execution.strategy,
                unit_size=execution.unit_size,
                max_workers=execution.max_workers,
            )
        self.strategy = strategy

        self._allocated = state_vector_bytes(num_qubits)
        self.pool.allocate(self._allocated)
        try:
            self._state = StateVector(num_qubits, strategy=self.strategy)
        except Exception:
            self.pool.free(self._allocated)
            raise

        self._closed = False
        logger.debug(
            f"Simulator ready: {num_qubits} qubits, {self._allocated} bytes, "
            f"strategy={self.strategy.name}"
        )

    # ------------------------------------------------------------------
    # Gate application
    # ------------------------------------------------------------------

    def apply_gate(self, gate: GateDescriptor) -> None:
        """
        Apply one gate descriptor to the state.

        Raises:
            OutOfRangeError: A qubit index is outside the register or repeated.
                The state is not modified.
        """
        self._ensure_open()
        if not isinstance(gate, GateDescriptor):
            raise TypeError(f"Expected a gate descriptor, got {type(gate).__name__}")
        check_gate_qubits(gate, self.num_qubits)

        if isinstance(gate, Hadamard):
            self.apply_hadamard(gate.qubit)
        elif isinstance(gate, PauliX):
            self._state.pauli_x(gate.qubit)
        elif isinstance(gate, PauliY):
            self._state.pauli_y(gate.qubit)
        elif isinstance(gate, PauliZ):
            self._state.pauli_z(gate.qubit)
        elif isinstance(gate, Phase):
            self._state.phase(gate.qubit, gate.angle)
        elif isinstance(gate, CNOT):
            self.apply_cnot(gate.control, gate.target)
        elif isinstance(gate, SWAP):
            self._swap(gate.qubit1, gate.qubit2)
        elif isinstance(gate, Toffoli):
            self._toffoli(gate.control1, gate.control2, gate.target)
        elif isinstance(gate, RotationX):
            self._state.rotation_x(gate.qubit, gate.angle)
        elif isinstance(gate, RotationY):
            self._state.rotation_y(gate.qubit, gate.angle)
        elif isinstance(gate, RotationZ):
            self.apply_rz(gate.qubit, gate.angle)
        elif isinstance(gate, Measurement):
            # Read-only: measurement never collapses the vector here
            logger.debug(f"Measurement on qubit {gate.qubit} leaves the state untouched")
        else:
            raise TypeError(f"Unsupported gate type: {gate.type_name}")

    def apply_hadamard(self, qubit: int) -> None:
        self._ensure_open()
        self._state.hadamard(qubit)

    def apply_cnot(self, control: int, target: int) -> None:
        self._ensure_open()
        self._state.cnot(control, target)

    def apply_rz(self, qubit: int, angle: float) -> None:
        self._ensure_open()
        self._state.rotation_z(qubit, angle)

    def apply_swap(self, qubit1: int, qubit2: int) -> None:
        """
        SWAP as three alternating CNOTs.

        Raises:
            OutOfRangeError: Before any CNOT runs, if an index is bad.
        """
        self._ensure_open()
        check_gate_qubits(SWAP(qubit1, qubit2), self.num_qubits)
        self._swap(qubit1, qubit2)

    def apply_toffoli(self, control1: int, control2: int, target: int) -> None:
        """
        Toffoli via H, CNOT and RZ(+-pi/4) on the target.

        With RZ acting as diag(1, e^{i*theta}) this sequence equals CCX
        followed by a controlled-S^dagger on the two controls: basis states
        are permuted exactly like CCX, and the flipped branch carries an
        extra factor of -i.

        Raises:
            OutOfRangeError: Before the first kernel runs, if an index is
                outside the register or two indices coincide.
        """
        self._ensure_open()
        check_gate_qubits(Toffoli(control1, control2, target), self.num_qubits)
        self._toffoli(control1, control2, target)

    # Decompositions below assume validated, distinct indices
    def _swap(self, qubit1: int, qubit2: int) -> None:
        self._state.cnot(qubit1, qubit2)
        self._state.cnot(qubit2, qubit1)
        self._state.cnot(qubit1, qubit2)

    def _toffoli(self, control1: int, control2: int, target: int) -> None:
        quarter = math.pi / 4.0
        psi = self._state
        psi.hadamard(target)
        psi.cnot(control2, target)
        psi.rotation_z(target, -quarter)
        psi.cnot(control1, target)
        psi.rotation_z(target, quarter)
        psi.cnot(control2, target)
        psi.rotation_z(target, -quarter)
        psi.cnot(control1, target)
        psi.rotation_z(target, quarter)
        psi.hadamard(target)

    def run(self, circuit: Circuit) -> None:
        """
        Apply every gate of ``circuit`` in order.

        Raises:
            OutOfRangeError: If the circuit width differs from the simulator's
            NormalizationError: If ``config.simulation.check_norm`` is set and
                the final norm is off by more than the tolerance
        """
        self._ensure_open()
        if not isinstance(circuit, Circuit):
            raise TypeError(f"Expected Circuit, got {type(circuit).__name__}")
        if circuit.num_qubits != self.num_qubits:
            raise OutOfRangeError(
                f"Circuit width {circuit.num_qubits} does not match "
                f"simulator qubits {self.num_qubits}"
            )

        total = len(circuit.gates)
        context = {"num_qubits": self.num_qubits, "strategy": self.strategy.name}
        logger.info(f"Applying {total} gates on {self.num_qubits} qubits", extra=context)
        for i, gate in enumerate(circuit.gates, start=1):
            self.apply_gate(gate)
            if i % PROGRESS_INTERVAL == 0:
                logger.info(
                    f"  Progress: {i}/{total} gates",
                    extra={**context, "gate": gate.type_name},
                )

        if self.config.simulation.check_norm:
            self._state.check_normalized(tol=self.config.simulation.norm_tolerance)

    # ------------------------------------------------------------------
    # Measurement
    # ------------------------------------------------------------------

    def measure_all(self) -> np.ndarray:
        """Probabilities of all 2^n basis states, indexed by basis state."""
        self._ensure_open()
        return self._state.probabilities()

    def measure_qubit(self, qubit: int) -> float:
        """Marginal probability that ``qubit`` reads 1."""
        self._ensure_open()
        if not 0 <= qubit < self.num_qubits:
            raise OutOfRangeError(f"Qubit {qubit} out of range [0, {self.num_qubits})")

        probs = self.measure_all()
        indices = np.arange(probs.size)
        return float(probs[(indices & (1 << qubit)) != 0].sum())

    def sample(self, shots: int, seed: Optional[int] = None) -> Dict[str, int]:
        """
        Draw measurement outcomes without collapsing the state.

        Args:
            shots: Number of samples
            seed: Random seed (default: ``config.simulation.seed``)

        Returns:
            Dictionary mapping bitstrings (qubit n-1 leftmost) to counts,
            omitting outcomes that never occurred
        """
        if shots < 1:
            raise ValueError(f"shots must be positive, got {shots}")
        if seed is None:
            seed = self.config.simulation.seed

        probs = self.measure_all()
        probs = probs / probs.sum()
        rng = np.random.default_rng(seed)
        outcomes = rng.multinomial(shots, probs)

        counts = {}
        for idx in np.flatnonzero(outcomes):
            counts[int_to_bitstring(int(idx), self.num_qubits)] = int(outcomes[idx])
        return counts

    # ------------------------------------------------------------------
    # State access and lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> np.ndarray:
        """Read-only view of the amplitude array."""
        self._ensure_open()
        return self._state.as_numpy()

    def amplitudes(self) -> List[Amplitude]:
        self._ensure_open()
        return self._state.amplitudes()

    def reset(self) -> None:
        """Return the register to |0...0>."""
        self._ensure_open()
        self._state.init_state()

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Give the state memory back to the pool. Safe to call twice."""
        if self._closed:
            return
        self.pool.free(self._allocated)
        if self._owns_strategy:
            self.strategy.close()
        self._closed = True
        logger.debug(f"Simulator closed, released {self._allocated} bytes")

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("Simulator has been closed")

    def __enter__(self) -> "Simulator":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(num_qubits={self.num_qubits}, strategy={self.strategy!r})"


def simulate(
    circuit: Circuit,
    config: Optional[Config] = None,
    pool: Optional[ResourcePool] = None,
    strategy: Optional[ExecutionStrategy] = None,
) -> np.ndarray:
    """
    Run a circuit from |0...0> and return its output distribution.

    Applies the peephole optimizer first when ``config.simulation.optimize``
    is set.
    """
    config = config if config is not None else Config()
    if config.simulation.optimize:
        circuit = optimize(circuit)

    with Simulator(circuit.num_qubits, pool=pool, strategy=strategy, config=config) as sim:
        sim.run(circuit)
        return sim.measure_all()
