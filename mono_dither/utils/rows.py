"""Row-band partitioning and a bounded thread pool parallel-for."""

from __future__ import annotations

import os
from concurrent.futures import ThreadPoolExecutor
from typing import Callable

# Bands smaller than this are not worth a thread hop.
MIN_BAND_ROWS = 64


def resolve_workers(workers: int | None) -> int:
    """Map a worker setting to a positive count (None = all cores)."""
    if workers is None:
        return os.cpu_count() or 1
    return max(1, int(workers))


def row_bands(
    height: int, workers: int, min_rows: int = MIN_BAND_ROWS
) -> list[tuple[int, int]]:
    """Split ``range(height)`` into at most ``workers`` contiguous bands."""
    if height <= 0:
        return []
    count = max(1, min(workers, height // max(1, min_rows)))
    step = (height + count - 1) // count
    return [(s, min(height, s + step)) for s in range(0, height, step)]


def parallel_rows(
    fn: Callable[[int, int], None],
    height: int,
    workers: int | None = None,
    min_rows: int = MIN_BAND_ROWS,
) -> None:
    """Call ``fn(start, stop)`` once per row band.

    Bands run on a thread pool when there is more than one; ``fn`` must only
    write rows inside its own band. Worker exceptions propagate.
    """
    bands = row_bands(height, resolve_workers(workers), min_rows)
    if len(bands) <= 1:
        for start, stop in bands:
            fn(start, stop)
        return

    with ThreadPoolExecutor(max_workers=len(bands)) as ex:
        futs = [ex.submit(fn, start, stop) for start, stop in bands]
        for fu in futs:
            fu.result()
