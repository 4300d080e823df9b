"""
Execution strategies for gate kernels.

A gate kernel is a callable ``kernel(start, stop)`` that updates every work
unit in ``[start, stop)``. Work units of one gate never share an amplitude,
so a strategy is free to run partitions in any order or concurrently. Every
strategy must return from :meth:`ExecutionStrategy.launch` only after all
partitions have finished: that is the barrier between consecutive gates.
"""

from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, Optional
import logging
import os

from quantummesh.sim.resources import DEFAULT_UNIT_SIZE, WorkPartitioner

logger = logging.getLogger(__name__)

Kernel = Callable[[int, int], None]


class ExecutionStrategy(ABC):
    """
    Abstract base class for partitioned kernel execution.

    Implementations decide how the partitions produced by a
    :class:`WorkPartitioner` are scheduled (one after another, on a thread
    pool, on an accelerator); the per-index semantics of the kernel are not
    theirs to change.
    """

    name = "abstract"

    def __init__(self, unit_size: int = DEFAULT_UNIT_SIZE):
        """
        Args:
            unit_size: Number of work units per partition
        """
        if unit_size < 1:
            raise ValueError(f"unit_size must be positive, got {unit_size}")
        self.unit_size = unit_size

    def partitioner(self, total_work: int) -> WorkPartitioner:
        return WorkPartitioner(total_work, self.unit_size)

    @abstractmethod
    def launch(self, kernel: Kernel, total_work: int) -> None:
        """
        Run ``kernel`` over every partition of ``range(total_work)``.

        Args:
            kernel: Callable applied to each half-open ``(start, stop)`` range
            total_work: Size of the work-unit index space
        """
        pass

    def close(self) -> None:
        """Release any worker resources held by the strategy."""

    def __enter__(self) -> "ExecutionStrategy":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(unit_size={self.unit_size})"


class SequentialStrategy(ExecutionStrategy):
    """Reference strategy: partitions are processed one at a time, in order."""

    name = "sequential"

    def launch(self, kernel: Kernel, total_work: int) -> None:
        for start, stop in self.partitioner(total_work):
            kernel(start, stop)


class ThreadPoolStrategy(ExecutionStrategy):
    """
    Runs partitions concurrently on a thread pool.

    NumPy releases the GIL inside its vectorised loops, so large partitions
    overlap in practice. The pool is created on first use and shut down by
    :meth:`close`.
    """

    name = "threads"

    def __init__(
        self,
        unit_size: int = DEFAULT_UNIT_SIZE,
        max_workers: Optional[int] = None,
    ):
        """
        Args:
            unit_size: Number of work units per partition
            max_workers: Thread count (default: ``os.cpu_count()``)
        """
        super().__init__(unit_size)
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"max_workers must be positive, got {max_workers}")
        self.max_workers = max_workers or os.cpu_count() or 1
        self._executor: Optional[ThreadPoolExecutor] = None

    def _get_executor(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.max_workers,
                thread_name_prefix="quantummesh",
            )
            logger.debug(f"Started thread pool with {self.max_workers} workers")
        return self._executor

    def launch(self, kernel: Kernel, total_work: int) -> None:
        partitioner = self.partitioner(total_work)

        # Nothing to overlap
        if len(partitioner) <= 1 or self.max_workers == 1:
            for start, stop in partitioner:
                kernel(start, stop)
            return

        executor = self._get_executor()
        futures = [executor.submit(kernel, start, stop) for start, stop in partitioner]

        # Wait for every partition before surfacing the first failure
        wait(futures)
        for future in futures:
            future.result()

    def close(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None
            logger.debug("Thread pool shut down")

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(unit_size={self.unit_size}, "
            f"max_workers={self.max_workers})"
        )


_STRATEGIES = {
    SequentialStrategy.name: SequentialStrategy,
    ThreadPoolStrategy.name: ThreadPoolStrategy,
}


def create_strategy(
    name: str = "sequential",
    unit_size: int = DEFAULT_UNIT_SIZE,
    max_workers: Optional[int] = None,
) -> ExecutionStrategy:
    """
    Build an execution strategy by name.

    Args:
        name: ``"sequential"`` or ``"threads"``
        unit_size: Work units per partition
        max_workers: Thread count, only used by ``"threads"``
    """
    if name not in _STRATEGIES:
        raise ValueError(f"Strategy must be one of {sorted(_STRATEGIES)}, got '{name}'")

    if name == ThreadPoolStrategy.name:
        return ThreadPoolStrategy(unit_size=unit_size, max_workers=max_workers)
    return SequentialStrategy(unit_size=unit_size)
