"""
Unit tests for StateVector basic functionality.

Tests initialization, single-qubit and CNOT kernels against dense matrix
references, and readout helpers.
"""

import math

import pytest
import numpy as np

from quantummesh.errors import NormalizationError, OutOfRangeError
from quantummesh.sim import Amplitude, StateVector, SequentialStrategy
from quantummesh.sim.statevector import insert_zero_bits


def random_state(n_qubits, seed=7):
    rng = np.random.default_rng(seed)
    psi = rng.normal(size=2 ** n_qubits) + 1j * rng.normal(size=2 ** n_qubits)
    return psi / np.linalg.norm(psi)


def apply_single_qubit_matrix(psi, matrix, qubit, n_qubits):
    """Dense reference: kron(I, ..., U, ..., I) with qubit 0 least significant."""
    ops = [np.eye(2)] * n_qubits
    ops[qubit] = matrix
    full = np.array([[1.0]])
    for op in reversed(ops):
        full = np.kron(full, op)
    return full @ psi


H = np.array([[1, 1], [1, -1]], dtype=np.complex128) / math.sqrt(2)
X = np.array([[0, 1], [1, 0]], dtype=np.complex128)
Y = np.array([[0, -1j], [1j, 0]], dtype=np.complex128)
Z = np.array([[1, 0], [0, -1]], dtype=np.complex128)


def phase_matrix(theta):
    return np.array([[1, 0], [0, np.exp(1j * theta)]], dtype=np.complex128)


def rx_matrix(theta):
    c, s = math.cos(theta / 2), math.sin(theta / 2)
    return np.array([[c, -1j * s], [-1j * s, c]], dtype=np.complex128)


def ry_matrix(theta):
    c, s = math.cos(theta / 2), math.sin(theta / 2)
    return np.array([[c, -s], [s, c]], dtype=np.complex128)


class TestStateVectorInitialization:
    """Tests for register setup."""

    def test_init_default_state(self):
        """Test that default initialization creates |0...0>."""
        sv = StateVector(3)

        expected = np.zeros(8, dtype=np.complex128)
        expected[0] = 1.0

        np.testing.assert_allclose(sv.as_numpy(), expected, atol=1e-15)
        assert len(sv) == 8
        assert sv.nbytes == 8 * 16

    def test_rejects_zero_qubits(self):
        with pytest.raises(ValueError, match="at least 1"):
            StateVector(0)

    def test_init_custom_state(self):
        """Test initialization with custom statevector."""
        custom = np.array([0.6, 0.8, 0, 0], dtype=np.complex128)

        sv = StateVector(2)
        sv.init_state(custom)

        np.testing.assert_allclose(sv.as_numpy(), custom, atol=1e-15)

    def test_init_normalizes_state(self):
        """Test that unnormalized states are automatically normalized."""
        unnormalized = np.array([2.0, 2.0, 0, 0], dtype=np.complex128)

        sv = StateVector(2)
        sv.init_state(unnormalized)

        expected = unnormalized / np.linalg.norm(unnormalized)
        np.testing.assert_allclose(sv.as_numpy(), expected, atol=1e-15)
        assert abs(sv.norm_squared() - 1.0) < 1e-12

    def test_init_rejects_zero_vector(self):
        sv = StateVector(2)
        with pytest.raises(NormalizationError):
            sv.init_state(np.zeros(4))

    def test_init_rejects_wrong_shape(self):
        sv = StateVector(2)
        with pytest.raises(ValueError, match="does not match"):
            sv.init_state(np.ones(8))

    def test_init_none_resets(self):
        sv = StateVector(2)
        sv.hadamard(0)
        sv.init_state()

        assert sv.amplitude(0) == Amplitude(1.0, 0.0)
        assert sv.probabilities()[1:].sum() == 0.0


class TestSingleQubitGates:
    """Kernels against dense matrix references on a random 3-qubit state."""

    @pytest.mark.parametrize("qubit", [0, 1, 2])
    @pytest.mark.parametrize(
        "method, matrix",
        [
            ("hadamard", H),
            ("pauli_x", X),
            ("pauli_y", Y),
            ("pauli_z", Z),
        ],
    )
    def test_fixed_gates_match_matrix(self, method, matrix, qubit):
        psi = random_state(3)
        sv = StateVector(3)
        sv.init_state(psi)

        getattr(sv, method)(qubit)

        expected = apply_single_qubit_matrix(psi, matrix, qubit, 3)
        np.testing.assert_allclose(sv.as_numpy(), expected, atol=1e-12)

    @pytest.mark.parametrize("qubit", [0, 2])
    @pytest.mark.parametrize(
        "method, matrix_fn",
        [
            ("phase", phase_matrix),
            ("rotation_x", rx_matrix),
            ("rotation_y", ry_matrix),
            ("rotation_z", phase_matrix),
        ],
    )
    def test_parametric_gates_match_matrix(self, method, matrix_fn, qubit):
        theta = 0.731
        psi = random_state(3, seed=11)
        sv = StateVector(3)
        sv.init_state(psi)

        getattr(sv, method)(qubit, theta)

        expected = apply_single_qubit_matrix(psi, matrix_fn(theta), qubit, 3)
        np.testing.assert_allclose(sv.as_numpy(), expected, atol=1e-12)

    def test_hadamard_creates_equal_superposition(self):
        sv = StateVector(1)
        sv.hadamard(0)

        np.testing.assert_allclose(sv.probabilities(), [0.5, 0.5], atol=1e-15)

    def test_hadamard_is_self_inverse(self):
        psi = random_state(4)
        sv = StateVector(4)
        sv.init_state(psi)

        sv.hadamard(2)
        sv.hadamard(2)

        np.testing.assert_allclose(sv.as_numpy(), psi, atol=1e-12)

    def test_pauli_y_on_zero(self):
        """Y|0> = i|1>."""
        sv = StateVector(1)
        sv.pauli_y(0)

        assert sv.amplitude(0) == Amplitude(0.0, 0.0)
        z = complex(sv.amplitude(1))
        assert abs(z - 1j) < 1e-15

    def test_qubit_out_of_range(self):
        sv = StateVector(2)
        with pytest.raises(OutOfRangeError):
            sv.hadamard(2)
        with pytest.raises(OutOfRangeError):
            sv.pauli_x(-1)


class TestCNOT:
    """Tests for the controlled-NOT quad kernel."""

    @pytest.mark.parametrize("control, target", [(0, 1), (1, 0), (0, 2), (2, 0), (1, 2)])
    def test_cnot_permutes_basis_states(self, control, target):
        n = 3
        for index in range(2 ** n):
            sv = StateVector(n)
            state = np.zeros(2 ** n, dtype=np.complex128)
            state[index] = 1.0
            sv.init_state(state)

            sv.cnot(control, target)

            expected_index = index ^ (1 << target) if index & (1 << control) else index
            assert sv.probabilities()[expected_index] == pytest.approx(1.0)

    def test_cnot_on_superposition(self):
        psi = random_state(3, seed=3)
        sv = StateVector(3)
        sv.init_state(psi)

        sv.cnot(2, 0)

        expected = psi.copy()
        for i in range(8):
            if i & 0b100 and not i & 0b001:
                expected[i], expected[i | 1] = psi[i | 1], psi[i]
        np.testing.assert_allclose(sv.as_numpy(), expected, atol=1e-15)

    def test_cnot_same_qubit_rejected(self):
        sv = StateVector(2)
        with pytest.raises(OutOfRangeError, match="must differ"):
            sv.cnot(1, 1)


class TestPartitionedKernels:
    """Kernels must not depend on how the index space is chopped up."""

    @pytest.mark.parametrize("unit_size", [1, 2, 3, 5, 1024])
    def test_unit_size_does_not_change_result(self, unit_size):
        psi = random_state(5, seed=21)

        reference = StateVector(5)
        reference.init_state(psi)
        chunked = StateVector(5, strategy=SequentialStrategy(unit_size=unit_size))
        chunked.init_state(psi)

        for sv in (reference, chunked):
            sv.hadamard(4)
            sv.cnot(4, 1)
            sv.rotation_y(0, 0.3)
            sv.cnot(0, 3)
            sv.phase(2, 1.1)

        np.testing.assert_allclose(chunked.as_numpy(), reference.as_numpy(), atol=1e-15)

    def test_buffer_kept_and_partitions_bounded(self):
        """Kernels write into the original buffer, one unit_size slice at a time."""
        spans = []

        class RecordingStrategy(SequentialStrategy):
            def launch(self, kernel, total_work):
                def traced(start, stop):
                    spans.append(stop - start)
                    kernel(start, stop)
                super().launch(traced, total_work)

        sv = StateVector(6, strategy=RecordingStrategy(unit_size=4))
        buffer = sv._data

        sv.hadamard(0)
        sv.cnot(0, 5)
        sv.rotation_x(3, 0.2)
        sv.phase(2, 0.7)

        assert sv._data is buffer
        assert spans and max(spans) <= 4

    def test_insert_zero_bits_single(self):
        units = np.arange(4)
        np.testing.assert_array_equal(insert_zero_bits(units, (1,)), [0, 1, 4, 5])

    def test_insert_zero_bits_pair(self):
        units = np.arange(2)
        np.testing.assert_array_equal(insert_zero_bits(units, (2, 0)), [0b000, 0b010])
        units = np.arange(4)
        np.testing.assert_array_equal(insert_zero_bits(units, (0, 1)), [0, 4, 8, 12])


class TestReadout:
    """Tests for probabilities and amplitude access."""

    def test_probabilities_sum_to_one(self):
        sv = StateVector(3)
        sv.hadamard(0)
        sv.hadamard(2)

        probs = sv.probabilities()
        assert abs(probs.sum() - 1.0) < 1e-12
        assert np.all(probs >= 0)

    def test_amplitude_out_of_range(self):
        sv = StateVector(2)
        with pytest.raises(OutOfRangeError):
            sv.amplitude(4)

    def test_amplitudes_list(self):
        sv = StateVector(1)
        sv.hadamard(0)

        amps = sv.amplitudes()
        assert len(amps) == 2
        assert all(isinstance(a, Amplitude) for a in amps)
        assert sum(a.magnitude_squared() for a in amps) == pytest.approx(1.0)

    def test_as_numpy_is_read_only(self):
        sv = StateVector(2)
        view = sv.as_numpy()
        with pytest.raises(ValueError):
            view[0] = 0.0

    def test_check_normalized(self):
        sv = StateVector(2)
        sv.check_normalized()

        sv._data[0] = 2.0
        with pytest.raises(NormalizationError, match="Normalization failed"):
            sv.check_normalized()

    def test_copy_is_independent(self):
        sv = StateVector(2)
        clone = sv.copy()
        clone.pauli_x(0)

        assert sv.probabilities()[0] == 1.0
        assert clone.probabilities()[1] == 1.0


class TestAmplitude:
    def test_from_complex_and_back(self):
        a = Amplitude.from_complex(0.3 - 0.4j)
        assert a.re == 0.3
        assert a.im == -0.4
        assert complex(a) == 0.3 - 0.4j
        assert a.magnitude_squared() == pytest.approx(0.25)

    def test_conjugate(self):
        assert Amplitude(1.0, 2.0).conjugate() == Amplitude(1.0, -2.0)

    def test_default_is_zero(self):
        assert Amplitude() == Amplitude(0.0, 0.0)
