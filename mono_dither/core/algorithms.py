"""Named algorithm configurations and the one-call ``dither`` helper."""

from __future__ import annotations

from enum import Enum

from mono_dither.core.diffusion import FloydSteinbergDitherer
from mono_dither.core.ordered import OrderedDitherer
from mono_dither.core.pipeline import MonoDitherer
from mono_dither.core.raster import Raster


class Algorithm(str, Enum):
    FLOYD_STEINBERG = "floyd-steinberg"
    BAYER_2X2 = "bayer2x2"
    BAYER_3X3 = "bayer3x3"
    BAYER_4X4 = "bayer4x4"
    BAYER_8X8 = "bayer8x8"


BAYER_SIZES: dict[Algorithm, int] = {
    Algorithm.BAYER_2X2: 2,
    Algorithm.BAYER_3X3: 3,
    Algorithm.BAYER_4X4: 4,
    Algorithm.BAYER_8X8: 8,
}


def create_ditherer(
    algorithm: Algorithm | str, *, workers: int | None = None
) -> MonoDitherer:
    """Build the ditherer for ``algorithm``.

    ``workers`` only affects the parallel stages; error diffusion itself is
    always sequential.
    """
    algorithm = Algorithm(algorithm)
    if algorithm == Algorithm.FLOYD_STEINBERG:
        return FloydSteinbergDitherer(workers=workers)
    return OrderedDitherer.bayer(BAYER_SIZES[algorithm], workers=workers)


def dither(
    source: Raster,
    algorithm: Algorithm | str = Algorithm.FLOYD_STEINBERG,
    *,
    workers: int | None = None,
) -> Raster:
    """Dither ``source`` with a freshly configured ditherer."""
    return create_ditherer(algorithm, workers=workers).dither(source)
