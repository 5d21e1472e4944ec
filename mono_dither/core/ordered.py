"""Ordered (threshold map) dithering."""

from __future__ import annotations

import numpy as np

from mono_dither.core.errors import NullInputError
from mono_dither.core.pipeline import BLACK, WHITE, MonoDitherer, check_working_buffer
from mono_dither.core.raster import Raster
from mono_dither.core.threshold import ThresholdMap, bayer_map
from mono_dither.utils.rows import parallel_rows


class OrderedDitherer(MonoDitherer):
    """Compare each pixel against a tiled threshold map.

    A pixel becomes black when its value is below
    ``map[y % n][x % n]`` and white otherwise. Pixels are independent, so
    rows are quantized in parallel bands.
    """

    name = "ordered"

    def __init__(
        self, threshold_map: ThresholdMap, *, workers: int | None = None
    ) -> None:
        if threshold_map is None:
            raise NullInputError("Threshold map is None")
        super().__init__(workers=workers)
        self.threshold_map = threshold_map
        self.name = f"ordered{threshold_map.size}x{threshold_map.size}"

    @classmethod
    def bayer(cls, size: int, *, workers: int | None = None) -> OrderedDitherer:
        """Ditherer for one of the Bayer presets (2, 3, 4 or 8)."""
        ditherer = cls(bayer_map(size), workers=workers)
        ditherer.name = f"bayer{size}x{size}"
        return ditherer

    def quantize(self, buffer: Raster) -> Raster:
        check_working_buffer(buffer)
        pixels = buffer.pixels()
        height, width = pixels.shape
        if width == 0:
            return buffer

        def quantize_rows(start: int, stop: int) -> None:
            band = pixels[start:stop]
            thresholds = self.threshold_map.tile_rows(start, stop, width)
            band[...] = np.where(band < thresholds, BLACK, WHITE)

        parallel_rows(quantize_rows, height, self.workers)
        return buffer

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(size={self.threshold_map.size}, "
            f"workers={self.workers!r})"
        )
