"""Color to luminance normalization.

Reduces any supported source raster to an 8-bit grayscale working buffer:

    L = 0.299*R + 0.587*G + 0.114*B               (RGB24, RGBX32)
    L = (A / 255) * (0.299*R + 0.587*G + 0.114*B) (RGBA32)

Arithmetic is single precision and the result is truncated, not rounded.
INDEXED8 sources are already grayscale and are copied verbatim.
"""

from __future__ import annotations

import numpy as np

from mono_dither.core.errors import (
    NullInputError,
    SizeMismatchError,
    UnsupportedFormatError,
)
from mono_dither.core.raster import PixelFormat, Raster
from mono_dither.utils.rows import parallel_rows

LUMA_R = np.float32(0.299)
LUMA_G = np.float32(0.587)
LUMA_B = np.float32(0.114)
ALPHA_MAX = np.float32(255.0)


def _check_target(source: Raster, target: Raster) -> None:
    if target.pixel_format != PixelFormat.INDEXED8:
        raise UnsupportedFormatError(
            f"Working buffer must be indexed8, got {target.pixel_format.value}"
        )
    if (target.width, target.height) != (source.width, source.height):
        raise SizeMismatchError(
            f"Working buffer is {target.width}x{target.height}, "
            f"source is {source.width}x{source.height}"
        )


def normalize(
    source: Raster,
    target: Raster | None = None,
    *,
    workers: int | None = None,
) -> Raster:
    """Write the luminance of ``source`` into an INDEXED8 raster.

    Args:
        source: raster in INDEXED8, RGB24, RGBA32 or RGBX32 format. Never
            modified.
        target: optional INDEXED8 raster of the same size to fill. A new one
            is allocated when omitted.
        workers: thread count for the per-row conversion (None = all cores).

    Returns:
        The filled working buffer.

    Raises:
        NullInputError: if ``source`` is None.
        UnsupportedFormatError: for any other pixel format.
    """
    if source is None:
        raise NullInputError("Source raster is None")
    if target is None:
        target = Raster.blank(
            source.width, source.height, PixelFormat.INDEXED8, dpi=source.dpi
        )
    else:
        _check_target(source, target)

    dst = target.pixels()

    if source.pixel_format == PixelFormat.INDEXED8:
        dst[...] = source.pixels()
        return target

    if not source.layout.is_color:
        raise UnsupportedFormatError(
            f"Image format not supported: {source.pixel_format.value}"
        )

    r, g, b, a = source.layout.offsets(source.byte_order)
    src = source.pixels()

    def convert(start: int, stop: int) -> None:
        band = src[start:stop]
        luma = LUMA_R * band[..., r] + LUMA_G * band[..., g] + LUMA_B * band[..., b]
        if a is not None:
            luma = (band[..., a] / ALPHA_MAX) * luma
        dst[start:stop] = np.clip(luma, 0, 255).astype(np.uint8)

    parallel_rows(convert, source.height, workers)
    return target
