"""
Gate descriptors, circuits and their JSON serialization.

Defines the canonical JSON schema for circuits:

    {"num_qubits": 3,
     "gates": [{"type": "Hadamard", "qubit": 0},
               {"type": "CNOT", "control": 0, "target": 1}, ...]}

Gate field names are the wire keys, so ``to_dict`` and ``gate_from_dict``
are mirror images of each other.
"""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, Tuple, Type, Union
import json
import logging
import math

from quantummesh.errors import OutOfRangeError, ParseError

logger = logging.getLogger(__name__)


class GateDescriptor:
    """Behaviour shared by every gate dataclass."""

    type_name = "Gate"
    qubit_fields: Tuple[str, ...] = ("qubit",)
    param_fields: Tuple[str, ...] = ()

    @property
    def qubits(self) -> Tuple[int, ...]:
        return tuple(getattr(self, name) for name in self.qubit_fields)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": self.type_name}
        data.update(asdict(self))
        return data


@dataclass(frozen=True)
class Hadamard(GateDescriptor):
    qubit: int
    type_name = "Hadamard"


@dataclass(frozen=True)
class PauliX(GateDescriptor):
    qubit: int
    type_name = "PauliX"


@dataclass(frozen=True)
class PauliY(GateDescriptor):
    qubit: int
    type_name = "PauliY"


@dataclass(frozen=True)
class PauliZ(GateDescriptor):
    qubit: int
    type_name = "PauliZ"


@dataclass(frozen=True)
class Phase(GateDescriptor):
    qubit: int
    angle: float
    type_name = "Phase"
    param_fields = ("angle",)


@dataclass(frozen=True)
class CNOT(GateDescriptor):
    control: int
    target: int
    type_name = "CNOT"
    qubit_fields = ("control", "target")


@dataclass(frozen=True)
class SWAP(GateDescriptor):
    qubit1: int
    qubit2: int
    type_name = "SWAP"
    qubit_fields = ("qubit1", "qubit2")


@dataclass(frozen=True)
class Toffoli(GateDescriptor):
    control1: int
    control2: int
    target: int
    type_name = "Toffoli"
    qubit_fields = ("control1", "control2", "target")


@dataclass(frozen=True)
class RotationX(GateDescriptor):
    qubit: int
    angle: float
    type_name = "RotationX"
    param_fields = ("angle",)


@dataclass(frozen=True)
class RotationY(GateDescriptor):
    qubit: int
    angle: float
    type_name = "RotationY"
    param_fields = ("angle",)


@dataclass(frozen=True)
class RotationZ(GateDescriptor):
    qubit: int
    angle: float
    type_name = "RotationZ"
    param_fields = ("angle",)


@dataclass(frozen=True)
class Measurement(GateDescriptor):
    qubit: int
    type_name = "Measurement"


Gate = Union[
    Hadamard, PauliX, PauliY, PauliZ, Phase, CNOT, SWAP, Toffoli,
    RotationX, RotationY, RotationZ, Measurement,
]

GATE_TYPES: Dict[str, Type[GateDescriptor]] = {
    cls.type_name: cls
    for cls in (
        Hadamard, PauliX, PauliY, PauliZ, Phase, CNOT, SWAP, Toffoli,
        RotationX, RotationY, RotationZ, Measurement,
    )
}


def check_gate_qubits(gate: GateDescriptor, num_qubits: int) -> None:
    """
    Validate a gate against a register width.

    Raises:
        OutOfRangeError: If an index is outside ``[0, num_qubits)`` or a
            multi-qubit gate repeats an index.
    """
    qubits = gate.qubits
    for name, q in zip(gate.qubit_fields, qubits):
        if not 0 <= q < num_qubits:
            raise OutOfRangeError(
                f"{gate.type_name}.{name}={q} out of range [0, {num_qubits})"
            )
    if len(set(qubits)) != len(qubits):
        raise OutOfRangeError(
            f"{gate.type_name} qubits must be distinct, got {list(qubits)}"
        )


def gate_from_dict(data: Dict[str, Any], index: int = 0) -> Gate:
    """
    Build a gate from its JSON object.

    Unknown keys are ignored.

    Raises:
        ParseError: On a missing or unknown ``type``, missing fields,
            fields of the wrong type, or an angle that is not a finite float.
    """
    tag = f"gates[{index}]"
    if not isinstance(data, dict):
        raise ParseError(f"{tag}: expected an object, got {type(data).__name__}")

    gate_type = data.get("type")
    if gate_type is None:
        raise ParseError(f"{tag}: missing 'type'")
    if not isinstance(gate_type, str) or gate_type not in GATE_TYPES:
        raise ParseError(f"{tag}: unknown gate type {gate_type!r}")

    cls = GATE_TYPES[gate_type]
    kwargs: Dict[str, Any] = {}

    for name in cls.qubit_fields:
        if name not in data:
            raise ParseError(f"{tag}: {gate_type} is missing '{name}'")
        value = data[name]
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ParseError(
                f"{tag}: '{name}' must be a non-negative integer, got {value!r}"
            )
        kwargs[name] = value

    for name in cls.param_fields:
        if name not in data:
            raise ParseError(f"{tag}: {gate_type} is missing '{name}'")
        value = data[name]
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ParseError(f"{tag}: '{name}' must be a number, got {value!r}")
        try:
            value = float(value)
        except OverflowError as e:
            raise ParseError(f"{tag}: '{name}' is too large for a float") from e
        if not math.isfinite(value):
            raise ParseError(f"{tag}: '{name}' must be finite, got {value!r}")
        kwargs[name] = value

    return cls(**kwargs)


@dataclass(frozen=True)
class Circuit:
    """
    Ordered gate sequence on a fixed number of qubits.

    Immutable: transformations such as optimization return a new Circuit.
    Every gate is checked against ``num_qubits`` at construction.
    """

    num_qubits: int
    gates: Tuple[Gate, ...] = field(default_factory=tuple)

    def __post_init__(self):
        if isinstance(self.num_qubits, bool) or not isinstance(self.num_qubits, int):
            raise ValueError(f"num_qubits must be an integer, got {self.num_qubits!r}")
        if self.num_qubits < 1:
            raise ValueError(f"num_qubits must be at least 1, got {self.num_qubits}")

        gates = tuple(self.gates)
        for gate in gates:
            if not isinstance(gate, GateDescriptor):
                raise TypeError(f"Expected a gate descriptor, got {type(gate).__name__}")
            check_gate_qubits(gate, self.num_qubits)
        object.__setattr__(self, "gates", gates)

    def with_gates(self, gates: Iterable[Gate]) -> "Circuit":
        """New circuit on the same register with a different gate list."""
        return Circuit(self.num_qubits, tuple(gates))

    def num_gates(self) -> int:
        return len(self.gates)

    def num_single_qubit_gates(self) -> int:
        return sum(1 for g in self.gates if len(g.qubits) == 1)

    def num_multi_qubit_gates(self) -> int:
        return sum(1 for g in self.gates if len(g.qubits) > 1)

    def gate_counts(self) -> Dict[str, int]:
        """Gate count per type name, in first-seen order."""
        counts: Dict[str, int] = {}
        for gate in self.gates:
            counts[gate.type_name] = counts.get(gate.type_name, 0) + 1
        return counts

    def __len__(self) -> int:
        return len(self.gates)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "num_qubits": self.num_qubits,
            "gates": [gate.to_dict() for gate in self.gates],
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Circuit":
        """
        Load from a decoded JSON object.

        Raises:
            ParseError: Malformed description
            OutOfRangeError: A gate addresses a qubit outside the register
        """
        if not isinstance(data, dict):
            raise ParseError(f"Circuit must be a JSON object, got {type(data).__name__}")

        missing = {"num_qubits", "gates"} - set(data)
        if missing:
            raise ParseError(f"Circuit is missing required keys: {sorted(missing)}")

        num_qubits = data["num_qubits"]
        if isinstance(num_qubits, bool) or not isinstance(num_qubits, int) or num_qubits < 1:
            raise ParseError(f"num_qubits must be a positive integer, got {num_qubits!r}")

        raw_gates = data["gates"]
        if not isinstance(raw_gates, list):
            raise ParseError(f"gates must be a list, got {type(raw_gates).__name__}")

        gates = [gate_from_dict(g, i) for i, g in enumerate(raw_gates)]
        return cls(num_qubits=num_qubits, gates=tuple(gates))

    @classmethod
    def from_json(cls, json_str: str) -> "Circuit":
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid circuit JSON: {e}") from e
        return cls.from_dict(data)


def load_circuit(data: Union[bytes, str]) -> Circuit:
    """
    Parse a circuit description.

    Args:
        data: JSON text, or UTF-8 encoded JSON bytes

    Raises:
        ParseError: Malformed or incomplete description
        OutOfRangeError: Gate indices outside the declared register
    """
    if isinstance(data, (bytes, bytearray)):
        try:
            data = bytes(data).decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"Circuit description is not valid UTF-8: {e}") from e
    circuit = Circuit.from_json(data)
    logger.debug(f"Loaded circuit: {circuit.num_qubits} qubits, {len(circuit)} gates")
    return circuit


def read_circuit(path: Union[str, Path]) -> Circuit:
    """Load a circuit from a JSON file. I/O errors propagate as OSError."""
    return load_circuit(Path(path).read_bytes())


def write_circuit(circuit: Circuit, path: Union[str, Path]) -> None:
    """Save a circuit as pretty-printed JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(circuit.to_json(indent=2))
    logger.debug(f"Wrote circuit ({len(circuit)} gates) to {path}")


def int_to_bitstring(value: int, width: int) -> str:
    """Convert integer to binary string with fixed width."""
    return format(value, f'0{width}b')


def bitstring_to_int(bitstring: str) -> int:
    """Convert binary string to integer."""
    return int(bitstring, 2)
