"""
Dense state-vector storage and bit-masked gate kernels.

Implements in-place gate application with:
- Pair kernels for single-qubit gates (indices ``i`` and ``i | 1 << q``)
- Quad addressing for controlled gates
- Partitioned execution through a pluggable ExecutionStrategy

Convention: little-endian, bit ``q`` of basis index ``i`` is the value of
qubit ``q``.

Memory: the amplitude array is never reallocated or resized by a kernel.
Each partition does build scratch arrays (its index vector from
``np.arange`` and the gathered pair values), so the transient allocation per
kernel call is O(unit_size) per worker, never O(2^n).
"""

from typing import Callable, Iterable, List, Optional, Tuple
import math

import numpy as np

from quantummesh.errors import NormalizationError, OutOfRangeError
from quantummesh.sim.amplitude import Amplitude
from quantummesh.sim.backend import ExecutionStrategy, SequentialStrategy
from quantummesh.sim.resources import AMPLITUDE_BYTES


_INV_SQRT2 = 1.0 / math.sqrt(2.0)

PairUpdate = Callable[[np.ndarray, np.ndarray], Tuple[np.ndarray, np.ndarray]]


def insert_zero_bits(units: np.ndarray, positions: Iterable[int]) -> np.ndarray:
    """
    Spread work-unit numbers over basis indices with the given bits cleared.

    For ``positions = (q,)`` unit ``k`` maps to the ``k``-th index whose bit
    ``q`` is 0; with two positions, to the ``k``-th index with both bits 0.
    The map is a bijection onto that subset, so disjoint unit ranges always
    address disjoint amplitudes.
    """
    idx = units
    for pos in sorted(positions):
        low = idx & ((1 << pos) - 1)
        idx = ((idx >> pos) << (pos + 1)) | low
    return idx


class StateVector:
    """
    Amplitude array of an n-qubit register.

    Holds 2^n ``complex128`` amplitudes and mutates them in place; the
    array is allocated once and never replaced.

    Memory requirement: 16 * 2^n bytes
    Example: n=20 qubits -> 16 MB, n=24 -> 256 MB, n=28 -> 4 GB
    """

    def __init__(self, n_qubits: int, strategy: Optional[ExecutionStrategy] = None):
        """
        Initialize to |0...0>.

        Args:
            n_qubits: Number of qubits (>= 1)
            strategy: Partition scheduler for kernels (default: sequential)
        """
        if n_qubits < 1:
            raise ValueError(f"n_qubits must be at least 1, got {n_qubits}")

        self.n_qubits = n_qubits
        self.size = 1 << n_qubits
        self.strategy = strategy if strategy is not None else SequentialStrategy()

        self._data = np.zeros(self.size, dtype=np.complex128)
        self._data[0] = 1.0

    @property
    def nbytes(self) -> int:
        return self.size * AMPLITUDE_BYTES

    def init_state(self, state: Optional[np.ndarray] = None) -> None:
        """
        Reset the register.

        Args:
            state: Optional amplitudes of shape (2^n,). Renormalized if its
                norm is off by more than 1e-10. If None, reset to |0...0>.
        """
        if state is None:
            self._data[:] = 0.0
            self._data[0] = 1.0
            return

        state = np.asarray(state, dtype=np.complex128)
        if state.shape != (self.size,):
            raise ValueError(
                f"State shape {state.shape} does not match "
                f"expected (2^{self.n_qubits},) = ({self.size},)"
            )

        norm = np.linalg.norm(state)
        if norm == 0.0:
            raise NormalizationError("Cannot initialize from the zero vector")
        if abs(norm - 1.0) > 1e-10:
            state = state / norm
        self._data[:] = state

    # ------------------------------------------------------------------
    # Single-qubit kernels
    # ------------------------------------------------------------------

    def hadamard(self, qubit: int) -> None:
        self._apply_pair(
            qubit,
            lambda a, b: ((a + b) * _INV_SQRT2, (a - b) * _INV_SQRT2),
        )

    def pauli_x(self, qubit: int) -> None:
        self._apply_pair(qubit, lambda a, b: (b, a))

    def pauli_y(self, qubit: int) -> None:
        # (b.im, -b.re) == -i*b and (-a.im, a.re) == i*a
        self._apply_pair(qubit, lambda a, b: (-1j * b, 1j * a))

    def pauli_z(self, qubit: int) -> None:
        self._apply_diagonal(qubit, -1.0)

    def phase(self, qubit: int, angle: float) -> None:
        """Multiply amplitudes with bit ``qubit`` set by e^{i*angle}."""
        self._apply_diagonal(qubit, complex(math.cos(angle), math.sin(angle)))

    def rotation_x(self, qubit: int, angle: float) -> None:
        c = math.cos(angle / 2.0)
        s = math.sin(angle / 2.0)
        self._apply_pair(qubit, lambda a, b: (c * a - 1j * s * b, c * b - 1j * s * a))

    def rotation_y(self, qubit: int, angle: float) -> None:
        c = math.cos(angle / 2.0)
        s = math.sin(angle / 2.0)
        self._apply_pair(qubit, lambda a, b: (c * a - s * b, s * a + c * b))

    def rotation_z(self, qubit: int, angle: float) -> None:
        # Same convention as phase(): only the |1> branch picks up e^{i*angle}
        self.phase(qubit, angle)

    # ------------------------------------------------------------------
    # Two-qubit kernels
    # ------------------------------------------------------------------

    def cnot(self, control: int, target: int) -> None:
        """Swap |c=1,t=0> and |c=1,t=1> amplitudes."""
        self._check_qubit(control)
        self._check_qubit(target)
        if control == target:
            raise OutOfRangeError(f"CNOT control and target must differ, got {control}")

        control_mask = 1 << control
        target_mask = 1 << target
        psi = self._data

        def kernel(start: int, stop: int) -> None:
            base = insert_zero_bits(np.arange(start, stop, dtype=np.int64), (control, target))
            i10 = base | control_mask
            i11 = i10 | target_mask
            a10 = psi[i10]
            psi[i10] = psi[i11]
            psi[i11] = a10

        self.strategy.launch(kernel, self.size >> 2)

    # ------------------------------------------------------------------
    # Readout
    # ------------------------------------------------------------------

    def probabilities(self) -> np.ndarray:
        """Born-rule probabilities |<i|psi>|^2 for every basis index."""
        return np.abs(self._data) ** 2

    def norm_squared(self) -> float:
        return float(np.vdot(self._data, self._data).real)

    def check_normalized(self, tol: float = 1e-9) -> None:
        n2 = self.norm_squared()
        if not abs(1.0 - n2) <= tol:
            raise NormalizationError(f"Normalization failed: ||psi||^2={n2}")

    def amplitude(self, index: int) -> Amplitude:
        if not 0 <= index < self.size:
            raise OutOfRangeError(f"Basis index {index} out of range [0, {self.size})")
        return Amplitude.from_complex(self._data[index])

    def amplitudes(self) -> List[Amplitude]:
        return [Amplitude(float(z.real), float(z.imag)) for z in self._data]

    def as_numpy(self) -> np.ndarray:
        """Read-only view of the amplitude array."""
        view = self._data.view()
        view.flags.writeable = False
        return view

    def copy(self) -> "StateVector":
        clone = StateVector(self.n_qubits, strategy=self.strategy)
        clone._data[:] = self._data
        return clone

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _check_qubit(self, qubit: int) -> None:
        if not 0 <= qubit < self.n_qubits:
            raise OutOfRangeError(f"Qubit {qubit} out of range [0, {self.n_qubits})")

    def _apply_pair(self, qubit: int, update: PairUpdate) -> None:
        """
        Run ``update(a, b)`` over every (i, i | mask) pair, reads before writes.

        ``a`` and ``b`` are gathered copies sized to one partition; results
        are scattered back into the shared array.
        """
        self._check_qubit(qubit)
        mask = 1 << qubit
        psi = self._data

        def kernel(start: int, stop: int) -> None:
            lo = insert_zero_bits(np.arange(start, stop, dtype=np.int64), (qubit,))
            hi = lo | mask
            a = psi[lo]
            b = psi[hi]
            psi[lo], psi[hi] = update(a, b)

        self.strategy.launch(kernel, self.size >> 1)

    def _apply_diagonal(self, qubit: int, factor: complex) -> None:
        """Scale every amplitude whose bit ``qubit`` is set."""
        self._check_qubit(qubit)
        mask = 1 << qubit
        psi = self._data

        def kernel(start: int, stop: int) -> None:
            hi = insert_zero_bits(np.arange(start, stop, dtype=np.int64), (qubit,)) | mask
            psi[hi] *= factor

        self.strategy.launch(kernel, self.size >> 1)

    def __len__(self) -> int:
        return self.size

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(n_qubits={self.n_qubits}, strategy={self.strategy!r})"
