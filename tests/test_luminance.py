"""Tests for color to luminance normalization."""

import numpy as np
import pytest

from mono_dither.core.errors import (
    NullInputError,
    SizeMismatchError,
    UnsupportedFormatError,
)
from mono_dither.core.luminance import normalize
from mono_dither.core.raster import PixelFormat, Raster


def _color(pixels, fmt: PixelFormat, byte_order: str) -> Raster:
    return Raster.from_array(
        np.array(pixels, dtype=np.uint8), fmt, byte_order=byte_order
    )


class TestIndexed8:
    def test_copied_verbatim(self):
        values = np.arange(12, dtype=np.uint8).reshape(3, 4) * 20
        source = Raster.from_array(values, PixelFormat.INDEXED8)
        result = normalize(source)
        assert result.pixel_format == PixelFormat.INDEXED8
        assert np.array_equal(result.pixels(), values)
        assert result.data is not source.data

    def test_padded_source_stride(self):
        data = bytearray([1, 2, 3, 99, 4, 5, 6, 99])
        source = Raster(3, 2, 4, PixelFormat.INDEXED8, data)
        result = normalize(source)
        assert result.pixels().tolist() == [[1, 2, 3], [4, 5, 6]]


class TestRgb24:
    def test_primary_weights(self):
        source = _color([[[255, 0, 0], [0, 255, 0], [0, 0, 255]]], PixelFormat.RGB24, "big")
        assert normalize(source).pixels().tolist() == [[76, 149, 29]]

    def test_little_endian_is_bgr(self):
        source = _color([[[255, 0, 0], [0, 0, 255]]], PixelFormat.RGB24, "little")
        # first pixel is pure blue, second pure red
        assert normalize(source).pixels().tolist() == [[29, 76]]

    def test_black_is_zero(self):
        source = _color([[[0, 0, 0]]], PixelFormat.RGB24, "little")
        assert normalize(source).pixels().tolist() == [[0]]

    def test_white_stays_in_range(self):
        source = _color([[[255, 255, 255]]], PixelFormat.RGB24, "little")
        assert normalize(source).pixels()[0, 0] >= 254

    def test_truncates(self):
        # 0.299 * 10 = 2.99 -> 2
        source = _color([[[10, 0, 0]]], PixelFormat.RGB24, "big")
        assert normalize(source).pixels().tolist() == [[2]]

    def test_padded_stride(self):
        data = bytearray([0, 0, 255, 0, 255, 0, 0xEE, 0xEE])
        source = Raster(2, 1, 8, PixelFormat.RGB24, data, byte_order="little")
        assert normalize(source).pixels().tolist() == [[76, 149]]


class TestRgba32:
    def test_opaque(self):
        # little-endian B G R A
        source = _color([[[0, 0, 255, 255]]], PixelFormat.RGBA32, "little")
        assert normalize(source).pixels().tolist() == [[76]]

    def test_transparent_is_black(self):
        source = _color([[[255, 255, 255, 0]]], PixelFormat.RGBA32, "little")
        assert normalize(source).pixels().tolist() == [[0]]

    def test_half_alpha_scales(self):
        # (128 / 255) * 76.245 = 38.27
        source = _color([[[0, 0, 255, 128]]], PixelFormat.RGBA32, "little")
        assert normalize(source).pixels().tolist() == [[38]]

    def test_big_endian_is_argb(self):
        source = _color([[[255, 0, 255, 0], [0, 255, 0, 0]]], PixelFormat.RGBA32, "big")
        # pixel 0: opaque green, pixel 1: transparent red
        assert normalize(source).pixels().tolist() == [[149, 0]]


class TestRgbx32:
    def test_fourth_byte_ignored(self):
        source = _color(
            [[[0, 0, 255, 0], [0, 0, 255, 255]]], PixelFormat.RGBX32, "little"
        )
        assert normalize(source).pixels().tolist() == [[76, 76]]

    def test_big_endian_is_xrgb(self):
        source = _color([[[0, 0, 0, 255]]], PixelFormat.RGBX32, "big")
        assert normalize(source).pixels().tolist() == [[29]]


class TestNormalize:
    def test_none_source(self):
        with pytest.raises(NullInputError):
            normalize(None)

    def test_indexed1_unsupported(self):
        source = Raster.blank(8, 2, PixelFormat.INDEXED1)
        with pytest.raises(UnsupportedFormatError):
            normalize(source)

    def test_source_not_mutated(self):
        rng = np.random.default_rng(1)
        source = _color(rng.integers(0, 256, size=(5, 6, 4)), PixelFormat.RGBA32, "little")
        before = bytes(source.data)
        normalize(source)
        assert bytes(source.data) == before

    def test_fills_given_target(self):
        source = _color([[[0, 0, 255]]], PixelFormat.RGB24, "little")
        target = Raster.blank(1, 1)
        assert normalize(source, target) is target
        assert target.pixels().tolist() == [[76]]

    def test_target_size_mismatch(self):
        source = _color([[[0, 0, 255]]], PixelFormat.RGB24, "little")
        with pytest.raises(SizeMismatchError):
            normalize(source, Raster.blank(2, 1))

    def test_target_must_be_indexed8(self):
        source = _color([[[0, 0, 255]]], PixelFormat.RGB24, "little")
        with pytest.raises(UnsupportedFormatError):
            normalize(source, Raster.blank(1, 1, PixelFormat.RGB24))

    def test_parallel_matches_serial(self):
        rng = np.random.default_rng(9)
        source = _color(rng.integers(0, 256, size=(257, 31, 3)), PixelFormat.RGB24, "little")
        serial = normalize(source, workers=1)
        parallel = normalize(source, workers=4)
        assert serial.data == parallel.data

    def test_copies_dpi(self):
        source = Raster.from_array(
            np.zeros((2, 2, 3), dtype=np.uint8), PixelFormat.RGB24, dpi=(300.0, 300.0)
        )
        assert normalize(source).dpi == (300.0, 300.0)
