"""Dithering pipeline: normalize a source raster, then quantize it.

Every call to ``MonoDitherer.dither`` allocates its own working buffer, so
one ditherer instance can serve concurrent callers. Subclasses implement
``quantize``, which turns the grayscale buffer into 0/255 values in place.
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod

from mono_dither.core.errors import NullInputError, UnsupportedFormatError
from mono_dither.core.luminance import normalize
from mono_dither.core.raster import PixelFormat, Raster

logger = logging.getLogger(__name__)

BLACK = 0
WHITE = 255


class MonoDitherer(ABC):
    """Base class for the black/white dithering engines."""

    name = "mono"

    def __init__(self, *, workers: int | None = None) -> None:
        self.workers = workers

    @abstractmethod
    def quantize(self, buffer: Raster) -> Raster:
        """Reduce an INDEXED8 buffer to 0/255 in place and return it."""

    def dither(self, source: Raster) -> Raster:
        """Dither ``source`` to an INDEXED8 raster holding only 0 and 255.

        The output has the source's width, height and resolution. The
        source raster is not modified.

        Raises:
            NullInputError: if ``source`` is None.
            UnsupportedFormatError: if the source pixel format is unsupported.
        """
        if source is None:
            raise NullInputError("Source raster is None")

        started = time.perf_counter()
        output = Raster.blank(
            source.width, source.height, PixelFormat.INDEXED8, dpi=source.dpi
        )
        normalize(source, output, workers=self.workers)
        self.quantize(output)

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.debug(
            f"{self.name}: dithered {source.width}x{source.height} "
            f"{source.pixel_format.value} in {elapsed_ms:.1f} ms"
        )
        return output

    def __repr__(self) -> str:
        return f"{type(self).__name__}(workers={self.workers!r})"


def check_working_buffer(buffer: Raster) -> None:
    """Reject anything that is not an INDEXED8 working buffer."""
    if buffer is None:
        raise NullInputError("Working buffer is None")
    if buffer.pixel_format != PixelFormat.INDEXED8:
        raise UnsupportedFormatError(
            f"Can only quantize indexed8 buffers, got {buffer.pixel_format.value}"
        )
