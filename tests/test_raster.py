"""Tests for Raster buffers and the pixel layout table."""

import numpy as np
import pytest

from mono_dither.core.errors import SizeMismatchError, UnsupportedFormatError
from mono_dither.core.raster import (
    FORMAT_LAYOUTS,
    PixelFormat,
    Raster,
    min_stride,
)


class TestLayouts:
    def test_bytes_per_pixel(self):
        assert FORMAT_LAYOUTS[PixelFormat.INDEXED8].bytes_per_pixel == 1
        assert FORMAT_LAYOUTS[PixelFormat.INDEXED1].bytes_per_pixel == 0
        assert FORMAT_LAYOUTS[PixelFormat.RGB24].bytes_per_pixel == 3
        assert FORMAT_LAYOUTS[PixelFormat.RGBA32].bytes_per_pixel == 4
        assert FORMAT_LAYOUTS[PixelFormat.RGBX32].bytes_per_pixel == 4

    def test_channel_offsets(self):
        rgb = FORMAT_LAYOUTS[PixelFormat.RGB24]
        assert rgb.offsets("little") == (2, 1, 0, None)
        assert rgb.offsets("big") == (0, 1, 2, None)
        rgba = FORMAT_LAYOUTS[PixelFormat.RGBA32]
        assert rgba.offsets("little") == (2, 1, 0, 3)
        assert rgba.offsets("big") == (1, 2, 3, 0)
        assert FORMAT_LAYOUTS[PixelFormat.RGBX32].offsets("big")[3] is None

    def test_grayscale_has_no_channels(self):
        with pytest.raises(UnsupportedFormatError):
            FORMAT_LAYOUTS[PixelFormat.INDEXED8].offsets("little")

    def test_min_stride(self):
        assert min_stride(PixelFormat.INDEXED1, 10) == 2
        assert min_stride(PixelFormat.INDEXED1, 16) == 2
        assert min_stride(PixelFormat.RGB24, 5) == 15
        assert min_stride(PixelFormat.RGBA32, 5) == 20


class TestRaster:
    def test_blank(self):
        raster = Raster.blank(5, 3, PixelFormat.RGB24)
        assert raster.stride == 15
        assert len(raster.data) == 45
        assert raster.pixels().shape == (3, 5, 3)

    def test_stride_too_small(self):
        with pytest.raises(ValueError, match="Stride"):
            Raster(4, 1, 3, PixelFormat.INDEXED8, bytearray(3))

    def test_buffer_size_mismatch(self):
        with pytest.raises(SizeMismatchError):
            Raster(4, 2, 4, PixelFormat.INDEXED8, bytearray(7))

    def test_unknown_byte_order(self):
        with pytest.raises(ValueError):
            Raster(1, 1, 1, PixelFormat.INDEXED8, bytearray(1), byte_order="middle")

    def test_bytes_become_bytearray(self):
        raster = Raster(2, 1, 2, "indexed8", b"\x01\x02")
        assert isinstance(raster.data, bytearray)
        assert raster.pixel_format == PixelFormat.INDEXED8

    def test_pixels_strip_padding(self):
        data = bytearray([1, 2, 3, 0, 4, 5, 6, 0])
        raster = Raster(3, 2, 4, PixelFormat.INDEXED8, data)
        assert raster.rows().shape == (2, 4)
        assert raster.pixels().tolist() == [[1, 2, 3], [4, 5, 6]]

    def test_pixels_view_writes_through(self):
        raster = Raster.blank(2, 2)
        raster.pixels()[1, 0] = 200
        assert raster.data[2] == 200

    def test_color_view_with_padding(self):
        data = bytearray(range(8))
        raster = Raster(2, 1, 8, PixelFormat.RGB24, data)
        assert raster.pixels().tolist() == [[[0, 1, 2], [3, 4, 5]]]

    def test_from_array(self):
        arr = np.arange(24, dtype=np.uint8).reshape(2, 3, 4)
        raster = Raster.from_array(arr, PixelFormat.RGBA32, byte_order="big")
        assert (raster.width, raster.height, raster.stride) == (3, 2, 12)
        assert raster.byte_order == "big"
        assert np.array_equal(raster.pixels(), arr)

    def test_from_array_wrong_shape(self):
        with pytest.raises(ValueError):
            Raster.from_array(np.zeros((2, 2)), PixelFormat.RGB24)
        with pytest.raises(ValueError):
            Raster.from_array(np.zeros((2, 2, 3)), PixelFormat.INDEXED8)

    def test_from_array_indexed1(self):
        with pytest.raises(UnsupportedFormatError):
            Raster.from_array(np.zeros((2, 2)), PixelFormat.INDEXED1)

    def test_copy_is_independent(self):
        raster = Raster.blank(2, 2, dpi=(72.0, 72.0))
        clone = raster.copy()
        clone.pixels()[0, 0] = 9
        assert raster.data[0] == 0
        assert clone.dpi == (72.0, 72.0)

    def test_empty_raster(self):
        raster = Raster.blank(0, 0)
        assert raster.pixels().shape == (0, 0)
