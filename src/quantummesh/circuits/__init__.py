"""Circuit construction and optimization utilities."""

from .generator import bell_circuit, ghz_circuit, qft_circuit, benchmark_circuit, random_circuit
from .optimizer import CircuitOptimizer, OptimizationReport, optimize, reduction_percentage

__all__ = [
    "bell_circuit",
    "ghz_circuit",
    "qft_circuit",
    "benchmark_circuit",
    "random_circuit",
    "CircuitOptimizer",
    "OptimizationReport",
    "optimize",
    "reduction_percentage",
]
