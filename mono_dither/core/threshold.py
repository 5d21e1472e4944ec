"""Threshold maps for ordered dithering.

A threshold map is a square matrix tiled across the image. Each cell holds
the 0-255 brightness a pixel at that position must reach to become white.
Maps are built from fractional weights in [0, 1] or from integer ranks
plus a base; both are normalized to the same 0-255 integer form.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Sequence

import numpy as np

from mono_dither.core.errors import InvalidThresholdMapError, NullThresholdMapError

Matrix = Sequence[Sequence[float]]


# Bayer presets as (ranks, base). Bases are used verbatim.
BAYER_2X2 = (
    (
        (1, 3),
        (4, 2),
    ),
    5,
)

BAYER_3X3 = (
    (
        (3, 7, 4),
        (6, 1, 9),
        (2, 8, 5),
    ),
    10,
)

BAYER_4X4 = (
    (
        (1, 9, 3, 11),
        (13, 5, 15, 7),
        (4, 12, 2, 10),
        (16, 8, 14, 6),
    ),
    17,
)

BAYER_8X8 = (
    (
        (1, 49, 13, 61, 4, 52, 16, 64),
        (33, 17, 45, 29, 36, 20, 48, 32),
        (9, 57, 5, 53, 12, 60, 8, 56),
        (41, 25, 37, 21, 44, 28, 40, 24),
        (3, 51, 15, 63, 2, 50, 14, 62),
        (35, 19, 47, 31, 34, 18, 46, 30),
        (11, 59, 7, 55, 10, 58, 6, 54),
        (43, 27, 39, 23, 42, 26, 38, 22),
    ),
    64,
)

BAYER_PRESETS: dict[int, tuple[Matrix, int]] = {
    2: BAYER_2X2,
    3: BAYER_3X3,
    4: BAYER_4X4,
    8: BAYER_8X8,
}


def _square_rows(matrix: Matrix | None) -> list[list]:
    """Validate that ``matrix`` is a non-empty square and return its rows."""
    if matrix is None:
        raise NullThresholdMapError("Threshold matrix is None")
    try:
        rows = [list(row) for row in matrix]
    except TypeError as e:
        raise InvalidThresholdMapError(
            "Threshold matrix must be a sequence of rows"
        ) from e
    if not rows:
        raise InvalidThresholdMapError("Threshold matrix is empty")

    size = len(rows)
    for i, row in enumerate(rows):
        if len(row) != size:
            raise InvalidThresholdMapError(
                f"Threshold matrix must be square: row {i} has {len(row)} "
                f"cells, expected {size}"
            )
    return rows


@dataclass(frozen=True, eq=False)
class ThresholdMap:
    """Immutable square matrix of 0-255 thresholds."""

    cells: np.ndarray

    def __post_init__(self) -> None:
        cells = np.array(self.cells, dtype=np.int32)
        if cells.ndim != 2 or cells.shape[0] != cells.shape[1] or cells.size == 0:
            raise InvalidThresholdMapError(
                f"Threshold cells must form a non-empty square, got {cells.shape}"
            )
        if cells.min() < 0 or cells.max() > 255:
            raise InvalidThresholdMapError("Threshold cells must lie in 0-255")
        cells.flags.writeable = False
        object.__setattr__(self, "cells", cells)

    @property
    def size(self) -> int:
        return int(self.cells.shape[0])

    @classmethod
    def from_fractions(cls, matrix: Matrix | None) -> ThresholdMap:
        """Build a map from weights in [0, 1], each scaled to round(w * 255).

        Exact halves round down, so 0.5 maps to 127.
        """
        rows = _square_rows(matrix)
        try:
            weights = np.array(rows, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise InvalidThresholdMapError("Threshold weights must be numeric") from e
        if not np.all(np.isfinite(weights)) or weights.min() < 0 or weights.max() > 1:
            raise InvalidThresholdMapError("Threshold weights must lie in [0, 1]")
        return cls(np.ceil(weights * 255 - 0.5))

    @classmethod
    def from_integers(cls, matrix: Matrix | None, base: int) -> ThresholdMap:
        """Build a map from integer ranks, each scaled to cell * 255 // base."""
        rows = _square_rows(matrix)
        if isinstance(base, bool) or not isinstance(base, (int, np.integer)) or base <= 0:
            raise InvalidThresholdMapError(
                f"Threshold base must be a positive integer, got {base!r}"
            )
        ranks = np.array(rows)
        if not np.issubdtype(ranks.dtype, np.integer):
            raise InvalidThresholdMapError("Threshold ranks must be integers")
        if ranks.min() < 0 or ranks.max() > base:
            raise InvalidThresholdMapError(
                f"Threshold ranks must lie in 0-{base}"
            )
        return cls(ranks.astype(np.int64) * 255 // int(base))

    def threshold_at(self, x: int, y: int) -> int:
        """Threshold for pixel (x, y), with the map tiled across the image."""
        n = self.size
        return int(self.cells[y % n, x % n])

    def tile_rows(self, start: int, stop: int, width: int) -> np.ndarray:
        """Thresholds for rows ``start:stop`` of an image ``width`` wide."""
        n = self.size
        ys = np.arange(start, stop) % n
        xs = np.arange(width) % n
        return self.cells[ys[:, None], xs[None, :]]

    def tolist(self) -> list[list[int]]:
        return self.cells.tolist()


@lru_cache(maxsize=None)
def bayer_map(size: int) -> ThresholdMap:
    """Return the shared Bayer preset of side ``size`` (2, 3, 4 or 8)."""
    if size not in BAYER_PRESETS:
        raise InvalidThresholdMapError(
            f"No Bayer preset of size {size}; "
            f"choose from {sorted(BAYER_PRESETS)}"
        )
    ranks, base = BAYER_PRESETS[size]
    return ThresholdMap.from_integers(ranks, base)
