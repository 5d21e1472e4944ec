"""1 bit per pixel packing of dithered rasters.

Eight pixels per byte, most significant bit first. White (255) is bit 1,
black (0) is bit 0. Each packed row is ceil(width / 8) bytes and unused
trailing bits are always zero.
"""

from __future__ import annotations

import numpy as np

from mono_dither.core.errors import (
    NullInputError,
    SizeMismatchError,
    UnsupportedFormatError,
)
from mono_dither.core.raster import PixelFormat, Raster, min_stride


def pack_mono(raster: Raster) -> Raster:
    """Pack an INDEXED8 raster of 0/255 values into an INDEXED1 raster.

    Raises:
        UnsupportedFormatError: if ``raster`` is not INDEXED8.
        ValueError: if any pixel is neither 0 nor 255.
    """
    if raster is None:
        raise NullInputError("Raster is None")
    if raster.pixel_format != PixelFormat.INDEXED8:
        raise UnsupportedFormatError(
            f"Only indexed8 rasters can be packed, got {raster.pixel_format.value}"
        )

    pixels = raster.pixels()
    if not np.isin(pixels, (0, 255)).all():
        raise ValueError("Monochrome raster may only contain 0 and 255")

    packed = Raster.blank(
        raster.width, raster.height, PixelFormat.INDEXED1, dpi=raster.dpi
    )
    if raster.width and raster.height:
        packed.pixels()[...] = np.packbits(pixels == 255, axis=1, bitorder="big")
    return packed


def unpack_mono(raster: Raster) -> Raster:
    """Expand an INDEXED1 raster back to INDEXED8 with values 0/255."""
    if raster is None:
        raise NullInputError("Raster is None")
    if raster.pixel_format != PixelFormat.INDEXED1:
        raise UnsupportedFormatError(
            f"Only indexed1 rasters can be unpacked, got {raster.pixel_format.value}"
        )

    out = Raster.blank(raster.width, raster.height, PixelFormat.INDEXED8, dpi=raster.dpi)
    if raster.width and raster.height:
        bits = np.unpackbits(
            raster.pixels(), axis=1, count=raster.width, bitorder="big"
        )
        out.pixels()[...] = bits * np.uint8(255)
    return out


def packed_from_bytes(
    data: bytes | bytearray,
    width: int,
    height: int,
    *,
    dpi: tuple[float, float] | None = None,
) -> Raster:
    """Wrap raw packed rows as an INDEXED1 raster.

    Raises:
        SizeMismatchError: if ``data`` is not ``height * ceil(width / 8)`` bytes.
    """
    if data is None:
        raise NullInputError("Packed data is None")
    stride = min_stride(PixelFormat.INDEXED1, width)
    if len(data) != height * stride:
        raise SizeMismatchError(
            f"Packed data holds {len(data)} bytes, expected {height * stride} "
            f"for {width}x{height}"
        )
    return Raster(
        width=width,
        height=height,
        stride=stride,
        pixel_format=PixelFormat.INDEXED1,
        data=bytearray(data),
        dpi=dpi,
    )
