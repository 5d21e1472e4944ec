"""In-memory raster buffers and the static pixel layout table.

A Raster is a contiguous byte buffer of ``height * stride`` bytes. Rows may
carry trailing padding when ``stride`` exceeds the bytes needed for
``width`` pixels. Multi-byte pixels store their channels in an order that
depends on the raster's byte order:

    little-endian  RGB24 = B G R      RGBA32/RGBX32 = B G R A
    big-endian     RGB24 = R G B      RGBA32/RGBX32 = A R G B
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, replace
from enum import Enum

import numpy as np

from mono_dither.core.errors import SizeMismatchError, UnsupportedFormatError

BYTE_ORDERS = ("little", "big")


class PixelFormat(str, Enum):
    INDEXED8 = "indexed8"
    INDEXED1 = "indexed1"
    RGB24 = "rgb24"
    RGBA32 = "rgba32"
    RGBX32 = "rgbx32"


# Byte offsets of (R, G, B, A) inside one pixel. A is None when the format
# carries no alpha, including RGBX32 whose fourth byte is padding.
Offsets = tuple[int, int, int, int | None]


@dataclass(frozen=True)
class ChannelLayout:
    bits_per_pixel: int
    little: Offsets | None = None
    big: Offsets | None = None

    @property
    def bytes_per_pixel(self) -> int:
        """Whole bytes per pixel; 0 for sub-byte formats."""
        return self.bits_per_pixel // 8

    @property
    def is_color(self) -> bool:
        return self.little is not None

    def offsets(self, byte_order: str) -> Offsets:
        if byte_order == "little":
            offsets = self.little
        elif byte_order == "big":
            offsets = self.big
        else:
            raise ValueError(f"Unknown byte order: {byte_order!r}")
        if offsets is None:
            raise UnsupportedFormatError("Format has no color channels")
        return offsets


FORMAT_LAYOUTS: dict[PixelFormat, ChannelLayout] = {
    PixelFormat.INDEXED8: ChannelLayout(8),
    PixelFormat.INDEXED1: ChannelLayout(1),
    PixelFormat.RGB24: ChannelLayout(24, little=(2, 1, 0, None), big=(0, 1, 2, None)),
    PixelFormat.RGBA32: ChannelLayout(32, little=(2, 1, 0, 3), big=(1, 2, 3, 0)),
    PixelFormat.RGBX32: ChannelLayout(32, little=(2, 1, 0, None), big=(1, 2, 3, None)),
}


def min_stride(pixel_format: PixelFormat, width: int) -> int:
    """Smallest row length in bytes that holds ``width`` pixels."""
    bits = FORMAT_LAYOUTS[PixelFormat(pixel_format)].bits_per_pixel
    return (width * bits + 7) // 8


@dataclass
class Raster:
    """A 2D pixel grid backed by a mutable byte buffer."""

    width: int
    height: int
    stride: int
    pixel_format: PixelFormat
    data: bytearray
    byte_order: str = sys.byteorder
    dpi: tuple[float, float] | None = None

    def __post_init__(self) -> None:
        self.pixel_format = PixelFormat(self.pixel_format)
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Invalid raster size: {self.width}x{self.height}")
        if self.byte_order not in BYTE_ORDERS:
            raise ValueError(f"Unknown byte order: {self.byte_order!r}")
        required = min_stride(self.pixel_format, self.width)
        if self.stride < required:
            raise ValueError(
                f"Stride {self.stride} too small for {self.width} "
                f"{self.pixel_format.value} pixels (need {required})"
            )
        if not isinstance(self.data, bytearray):
            self.data = bytearray(self.data)
        expected = self.height * self.stride
        if len(self.data) != expected:
            raise SizeMismatchError(
                f"Buffer holds {len(self.data)} bytes, expected {expected} "
                f"({self.height} rows x {self.stride} stride)"
            )

    @property
    def layout(self) -> ChannelLayout:
        return FORMAT_LAYOUTS[self.pixel_format]

    @property
    def bytes_per_pixel(self) -> int:
        return self.layout.bytes_per_pixel

    @classmethod
    def blank(
        cls,
        width: int,
        height: int,
        pixel_format: PixelFormat = PixelFormat.INDEXED8,
        *,
        byte_order: str = sys.byteorder,
        dpi: tuple[float, float] | None = None,
    ) -> Raster:
        """Allocate a zero-filled raster with no row padding."""
        stride = min_stride(pixel_format, width)
        return cls(
            width=width,
            height=height,
            stride=stride,
            pixel_format=pixel_format,
            data=bytearray(height * stride),
            byte_order=byte_order,
            dpi=dpi,
        )

    @classmethod
    def from_array(
        cls,
        array: np.ndarray,
        pixel_format: PixelFormat,
        *,
        byte_order: str = sys.byteorder,
        dpi: tuple[float, float] | None = None,
    ) -> Raster:
        """Build a raster from a uint8 array laid out in storage order.

        Args:
            array: (height, width) for INDEXED8, (height, width, channels)
                for the color formats. Channel order must already match
                ``byte_order``.
        """
        pixel_format = PixelFormat(pixel_format)
        channels = FORMAT_LAYOUTS[pixel_format].bytes_per_pixel
        if channels == 0:
            raise UnsupportedFormatError(
                f"Cannot build {pixel_format.value} raster from a pixel array"
            )
        arr = np.ascontiguousarray(array, dtype=np.uint8)
        if channels == 1:
            if arr.ndim != 2:
                raise ValueError(f"Expected a 2D array, got shape {arr.shape}")
        elif arr.ndim != 3 or arr.shape[2] != channels:
            raise ValueError(
                f"Expected shape (h, w, {channels}) for {pixel_format.value}, "
                f"got {arr.shape}"
            )
        height, width = arr.shape[:2]
        return cls(
            width=width,
            height=height,
            stride=width * channels,
            pixel_format=pixel_format,
            data=bytearray(arr.tobytes()),
            byte_order=byte_order,
            dpi=dpi,
        )

    def rows(self) -> np.ndarray:
        """Writable (height, stride) uint8 view over the whole buffer."""
        if not self.data:
            return np.zeros((self.height, self.stride), dtype=np.uint8)
        return np.frombuffer(self.data, dtype=np.uint8).reshape(
            self.height, self.stride
        )

    def pixels(self) -> np.ndarray:
        """Writable view of the pixel area with row padding stripped.

        Shape is (height, width) for one-byte formats, (height, width,
        channels) for color formats and (height, ceil(width / 8)) of packed
        bytes for INDEXED1.
        """
        rows = self.rows()
        channels = self.bytes_per_pixel
        if channels == 0:
            return rows[:, : min_stride(self.pixel_format, self.width)]
        view = rows[:, : self.width * channels]
        if channels == 1:
            return view
        return view.reshape(self.height, self.width, channels)

    def copy(self) -> Raster:
        return replace(self, data=bytearray(self.data))
