"""
Per-file and aggregate size limits for a discovery pass.

A single SizeBudgetTracker is created per discovery invocation and
shared by every walker of every workspace root: the aggregate cap is
global, not per root.
"""

import math
import os
import threading
from dataclasses import dataclass

import structlog

logger = structlog.get_logger()

__all__ = [
    "BYTES_PER_MB",
    "FileStatError",
    "SizeBudgetTracker",
    "SizeConstraints",
    "mb_to_bytes",
]

BYTES_PER_MB = 1024 * 1024


class FileStatError(OSError):
    """The size of a candidate file could not be read.

    Never raised out of the tracker: the file is treated as ineligible and
    the error is kept in ``SizeBudgetTracker.failures``.
    """

    def __init__(self, path: str, cause: OSError) -> None:
        super().__init__(f"Cannot read size of {path}: {cause}")
        self.path = path
        self.cause = cause


@dataclass
class SizeConstraints:
    """Byte limits of a pass. ``math.inf`` means unbounded."""

    max_file_size: float
    remaining_index_size: float


def mb_to_bytes(size_mb: float | None) -> float:
    """Convert a size in MB to bytes; None means unbounded (``math.inf``)."""
    if size_mb is None:
        return math.inf
    return size_mb * BYTES_PER_MB


class SizeBudgetTracker:
    """Enforces the per-file cap and the remaining aggregate budget.

    Check-and-deduct happens under a lock so concurrent walkers never
    commit more bytes than the budget allows.
    """

    def __init__(
        self,
        max_file_size_mb: float | None = None,
        max_index_size_mb: float | None = None,
    ) -> None:
        """Initialize the tracker.

        Args:
            max_file_size_mb: Per-file cap in MB, None for unbounded
            max_index_size_mb: Aggregate cap in MB, None for unbounded
        """
        self.bounded = max_file_size_mb is not None or max_index_size_mb is not None
        self.constraints = SizeConstraints(
            max_file_size=mb_to_bytes(max_file_size_mb),
            remaining_index_size=mb_to_bytes(max_index_size_mb),
        )
        self.accepted_bytes = 0
        self.failures: list[FileStatError] = []
        self._lock = threading.Lock()
        self.log = logger.bind(component="size_budget")

    @property
    def remaining(self) -> float:
        return self.constraints.remaining_index_size

    @property
    def exhausted(self) -> bool:
        """True once the aggregate budget has been used up."""
        return self.constraints.remaining_index_size <= 0

    def accepts(self, path: str) -> bool:
        """Decide whether ``path`` fits the limits, deducting its size if so.

        Args:
            path: Absolute path of the candidate file

        Returns:
            True if the file is accepted. Unreadable files are rejected.
        """
        if not self.bounded:
            return True

        try:
            size = os.stat(path).st_size
        except OSError as e:
            error = FileStatError(path, e)
            with self._lock:
                self.failures.append(error)
            self.log.error("budget.stat_failed", path=path, error=str(e))
            return False

        with self._lock:
            constraints = self.constraints
            if size > constraints.max_file_size or size > constraints.remaining_index_size:
                return False
            constraints.remaining_index_size -= size
            self.accepted_bytes += size
        return True
