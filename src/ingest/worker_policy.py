"""Parse worker sizing policy.

The coordinator only needs a ``(record_count) -> worker_count`` callable.
The default mirrors adaptive sizing: more records get more of the machine.
"""

from __future__ import annotations

import os
from typing import Callable

from core.config import SaaqConfig

WorkerCountPolicy = Callable[[int], int]

_ADAPTIVE_FACTORS = (
    (100_000, 0.25),
    (1_000_000, 0.5),
    (5_000_000, 0.75),
)


def adaptive_worker_count(record_count: int, max_workers: int, cpu_count: int) -> int:
    """Scale parse workers with the record count.

    Args:
        record_count: Data lines to parse.
        max_workers: Configured upper bound.
        cpu_count: Available processor cores.

    Returns:
        Worker count of at least 1.
    """
    factor = 1.0
    for threshold, threshold_factor in _ADAPTIVE_FACTORS:
        if record_count < threshold:
            factor = threshold_factor
            break
    minimum = max(1, record_count // 1_000_000)
    maximum = max(1, min(max_workers, cpu_count))
    return max(1, min(max(minimum, int(cpu_count * factor)), maximum))


def build_worker_policy(config: SaaqConfig) -> WorkerCountPolicy:
    """Build the worker policy for a runtime config."""
    if config.worker_count is not None:
        manual_count = config.worker_count
        return lambda record_count: manual_count
    cpu_count = os.cpu_count() or 1
    return lambda record_count: adaptive_worker_count(record_count, config.max_workers, cpu_count)
