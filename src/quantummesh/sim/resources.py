"""
Memory budgeting and work partitioning for state-vector simulation.

ResourcePool tracks a logical byte budget that a simulator draws from before
allocating its amplitude array. WorkPartitioner splits an index space into
fixed-size chunks that an execution strategy can hand out to workers.
"""

import logging
from typing import Iterator, Tuple

import psutil

from quantummesh.errors import OutOfMemoryError

logger = logging.getLogger(__name__)


AMPLITUDE_BYTES = 16  # complex128: 8 bytes real + 8 bytes imag
DEFAULT_UNIT_SIZE = 256


def state_vector_bytes(n_qubits: int) -> int:
    """Bytes needed to hold 2^n complex128 amplitudes."""
    if n_qubits < 0:
        raise ValueError(f"n_qubits must be non-negative, got {n_qubits}")
    return (1 << n_qubits) * AMPLITUDE_BYTES


class ResourcePool:
    """
    Byte budget for state-vector allocations.

    ``used`` only changes through :meth:`allocate` and :meth:`free` and
    always satisfies ``0 <= used <= capacity``.

    Example:
        >>> pool = ResourcePool(capacity=1024)
        >>> pool.allocate(512)
        >>> pool.available()
        512
    """

    def __init__(self, capacity: int):
        if capacity < 0:
            raise ValueError(f"capacity must be non-negative, got {capacity}")
        self.capacity = int(capacity)
        self.used = 0

    @classmethod
    def from_system(cls) -> "ResourcePool":
        """Pool sized to the memory currently available on this machine."""
        available = psutil.virtual_memory().available
        logger.debug(f"Sizing resource pool from system memory: {available} bytes")
        return cls(capacity=available)

    def allocate(self, size: int) -> None:
        """
        Reserve ``size`` bytes.

        Raises:
            OutOfMemoryError: If the request does not fit. ``used`` is left
                unchanged in that case.
        """
        if size < 0:
            raise ValueError(f"Allocation size must be non-negative, got {size}")
        if self.used + size > self.capacity:
            raise OutOfMemoryError(requested=size, available=self.available())
        self.used += size
        logger.debug(f"Allocated {size} bytes ({self.used}/{self.capacity} used)")

    def free(self, size: int) -> None:
        """Release ``size`` bytes; ``used`` never drops below zero."""
        if size < 0:
            raise ValueError(f"Free size must be non-negative, got {size}")
        self.used = max(0, self.used - size)
        logger.debug(f"Freed {size} bytes ({self.used}/{self.capacity} used)")

    def available(self) -> int:
        return self.capacity - self.used

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(capacity={self.capacity}, used={self.used})"


class WorkPartitioner:
    """
    Deterministic split of ``total_work`` units into chunks of ``unit_size``.

    Partition ``p`` covers ``[p * unit_size, min((p + 1) * unit_size,
    total_work))``; only the last one may be partial. Every index in
    ``[0, total_work)`` belongs to exactly one (partition, offset) pair.
    """

    def __init__(self, total_work: int, unit_size: int = DEFAULT_UNIT_SIZE):
        if total_work < 0:
            raise ValueError(f"total_work must be non-negative, got {total_work}")
        if unit_size < 1:
            raise ValueError(f"unit_size must be positive, got {unit_size}")
        self._total_work = int(total_work)
        self._unit_size = int(unit_size)
        self._partition_count = (self._total_work + self._unit_size - 1) // self._unit_size

    @property
    def total_work(self) -> int:
        return self._total_work

    @property
    def unit_size(self) -> int:
        return self._unit_size

    @property
    def partition_count(self) -> int:
        return self._partition_count

    def bounds(self, partition: int) -> Tuple[int, int]:
        """Half-open ``(start, stop)`` range of one partition."""
        if not 0 <= partition < self._partition_count:
            raise IndexError(
                f"Partition {partition} out of range [0, {self._partition_count})"
            )
        start = partition * self._unit_size
        return start, min(start + self._unit_size, self._total_work)

    def partitions(self) -> Iterator[Tuple[int, int]]:
        for partition in range(self._partition_count):
            yield self.bounds(partition)

    def global_index(self, partition: int, offset: int) -> int:
        """Map ``(partition, offset)`` to its index in ``[0, total_work)``."""
        start, stop = self.bounds(partition)
        if not 0 <= offset < stop - start:
            raise IndexError(
                f"Offset {offset} out of range for partition {partition} "
                f"of size {stop - start}"
            )
        return start + offset

    def locate(self, index: int) -> Tuple[int, int]:
        """Inverse of :meth:`global_index`."""
        if not 0 <= index < self._total_work:
            raise IndexError(f"Index {index} out of range [0, {self._total_work})")
        return divmod(index, self._unit_size)

    def __len__(self) -> int:
        return self._partition_count

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        return self.partitions()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}(total_work={self._total_work}, "
            f"unit_size={self._unit_size}, partition_count={self._partition_count})"
        )
