"""
Performance profiling and memory estimation utilities.

Provides a context manager for timing and memory tracking of simulation
steps, and the state-vector sizing helper used for resource planning.
"""

import time
import logging
import psutil
from typing import Dict, Any, Optional
from dataclasses import dataclass, asdict

from quantummesh.sim.resources import state_vector_bytes

logger = logging.getLogger(__name__)

_MB = 1024 * 1024


@dataclass
class ResourceSnapshot:
    """Snapshot of process resource usage."""

    timestamp: float
    cpu_percent: float
    memory_mb: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PerformanceMetrics:
    """Performance metrics for a profiled block."""

    name: str
    wall_time_seconds: float
    cpu_time_seconds: float
    peak_memory_mb: float
    memory_delta_mb: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def format_summary(self) -> str:
        """Format human-readable summary."""
        lines = [
            f"Performance: {self.name}",
            f"  Wall time: {self.wall_time_seconds:.6f}s",
            f"  CPU time:  {self.cpu_time_seconds:.6f}s",
            f"  Peak memory: {self.peak_memory_mb:.1f} MB",
            f"  Memory delta: {self.memory_delta_mb:+.1f} MB",
        ]
        return "\n".join(lines)


class PerformanceProfiler:
    """
    Context manager for profiling code blocks.

    Example:
        with PerformanceProfiler("hadamard_layer") as prof:
            for q in range(n):
                sim.apply_hadamard(q)

        print(prof.metrics.format_summary())
    """

    def __init__(self, name: str = "block"):
        self.name = name
        self.metrics: Optional[PerformanceMetrics] = None

        self._start_time: float = 0.0
        self._start_cpu: float = 0.0
        self._start_snapshot: Optional[ResourceSnapshot] = None

    def __enter__(self) -> "PerformanceProfiler":
        self._start_time = time.perf_counter()
        self._start_cpu = time.process_time()
        self._start_snapshot = self._get_resource_snapshot()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        end_time = time.perf_counter()
        end_cpu = time.process_time()
        end_snapshot = self._get_resource_snapshot()

        self.metrics = PerformanceMetrics(
            name=self.name,
            wall_time_seconds=end_time - self._start_time,
            cpu_time_seconds=end_cpu - self._start_cpu,
            peak_memory_mb=max(self._start_snapshot.memory_mb, end_snapshot.memory_mb),
            memory_delta_mb=end_snapshot.memory_mb - self._start_snapshot.memory_mb,
        )
        logger.debug(self.metrics.format_summary())

        return False  # Don't suppress exceptions

    @staticmethod
    def _get_resource_snapshot() -> ResourceSnapshot:
        process = psutil.Process()

        with process.oneshot():
            cpu_percent = process.cpu_percent()
            memory_mb = process.memory_info().rss / _MB

        return ResourceSnapshot(
            timestamp=time.time(),
            cpu_percent=cpu_percent,
            memory_mb=memory_mb,
        )


def estimate_memory_requirements(n_qubits: int) -> Dict[str, float]:
    """
    Estimate memory needed to simulate ``n_qubits``.

    Returns:
        Dictionary with the state size in bytes and MB, and the share of
        currently available system memory it would take
    """
    state_bytes = state_vector_bytes(n_qubits)
    available = psutil.virtual_memory().available

    return {
        "state_bytes": float(state_bytes),
        "state_size_mb": state_bytes / _MB,
        "available_mb": available / _MB,
        "fraction_of_available": state_bytes / available if available else float("inf"),
    }
