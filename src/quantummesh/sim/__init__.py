"""
State-vector simulation.

Provides the amplitude storage and gate kernels, the execution strategies
that schedule them, memory budgeting and the circuit-level simulator.
"""

from quantummesh.sim.amplitude import Amplitude
from quantummesh.sim.backend import (
    ExecutionStrategy,
    SequentialStrategy,
    ThreadPoolStrategy,
    create_strategy,
)
from quantummesh.sim.resources import ResourcePool, WorkPartitioner, state_vector_bytes
from quantummesh.sim.statevector import StateVector
from quantummesh.sim.simulator import Simulator, simulate

__all__ = [
    "Amplitude",
    "ExecutionStrategy",
    "SequentialStrategy",
    "ThreadPoolStrategy",
    "create_strategy",
    "ResourcePool",
    "WorkPartitioner",
    "state_vector_bytes",
    "StateVector",
    "Simulator",
    "simulate",
]
