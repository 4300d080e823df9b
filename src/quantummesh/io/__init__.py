"""Circuit descriptions and their JSON serialization."""

from .formats import (
    Circuit,
    GateDescriptor,
    load_circuit,
    read_circuit,
    write_circuit,
    bitstring_to_int,
    int_to_bitstring,
)

__all__ = [
    "Circuit",
    "GateDescriptor",
    "load_circuit",
    "read_circuit",
    "write_circuit",
    "bitstring_to_int",
    "int_to_bitstring",
]
