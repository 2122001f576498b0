"""Small helpers shared by the facade and the command line."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, List, Sequence, Tuple, TypeVar

T = TypeVar("T")
R = TypeVar("R")

LOG = logging.getLogger(__name__)


def run_parallel(
    items: Sequence[T],
    worker: Callable[[T], R],
    *,
    jobs: int = 1,
    label: str = "items",
) -> Tuple[List[R], float]:
    """Apply ``worker`` to every item, on up to ``jobs`` threads.

    Returns ``(results, seconds)`` with results in input order.  Exceptions
    raised by ``worker`` propagate.
    """

    if not items:
        return [], 0.0

    workers = max(1, min(jobs, len(items)))
    start = time.perf_counter()
    if workers == 1:
        results = [worker(item) for item in items]
    else:
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="lolrofl") as pool:
            results = list(pool.map(worker, items))
    duration = time.perf_counter() - start
    LOG.debug("%s: %d done on %d thread(s) in %.3fs", label, len(items), workers, duration)
    return results, duration


def hex_preview(data: bytes | memoryview, limit: int = 20) -> str:
    """Return a space-separated hexadecimal dump of the first ``limit`` bytes."""

    return " ".join(f"{byte:02x}" for byte in bytes(data[:limit]))


__all__ = ["run_parallel", "hex_preview"]
