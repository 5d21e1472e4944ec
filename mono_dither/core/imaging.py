"""Pillow bridge: decode images into rasters and save monochrome output.

Color images are stored little-endian (B G R [A]) once decoded, the same
layout GDI style bitmaps use.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image

from mono_dither.core.errors import NullInputError, UnsupportedFormatError
from mono_dither.core.packing import pack_mono
from mono_dither.core.raster import PixelFormat, Raster

TIFF_SUFFIXES = (".tif", ".tiff")
# Formats that cannot store 1-bit images get an 8-bit grayscale copy.
GRAYSCALE_ONLY_SUFFIXES = (".jpg", ".jpeg", ".webp")


def _image_dpi(img: Image.Image) -> tuple[float, float] | None:
    dpi = img.info.get("dpi")
    if not dpi:
        return None
    return float(dpi[0]), float(dpi[1])


def _grayscale_array(img: Image.Image) -> np.ndarray:
    """Scale a high bit depth grayscale image down to uint8.

    Integer modes are treated as 16-bit samples, float mode as 0.0-1.0.
    """
    arr = np.asarray(img)
    if img.mode == "F":
        return np.clip(arr * 255, 0, 255).astype(np.uint8)
    return (np.clip(arr, 0, 65535).astype(np.uint32) >> 8).astype(np.uint8)


def raster_from_image(img: Image.Image) -> Raster:
    """Convert a Pillow image into a Raster the ditherer accepts.

    L images become INDEXED8, RGB becomes RGB24 and RGBA becomes RGBA32.
    High bit depth grayscale (I, I;16, F) is scaled down to INDEXED8. Other
    modes are converted first: bilevel to L, anything with transparency to
    RGBA, the rest to RGB.
    """
    if img is None:
        raise NullInputError("Image is None")
    dpi = _image_dpi(img)

    if img.mode == "F" or img.mode.startswith("I"):
        return Raster.from_array(_grayscale_array(img), PixelFormat.INDEXED8, dpi=dpi)

    if img.mode not in ("L", "RGB", "RGBA"):
        if img.mode == "1":
            img = img.convert("L")
        elif "A" in img.getbands() or "transparency" in img.info:
            img = img.convert("RGBA")
        else:
            img = img.convert("RGB")

    arr = np.asarray(img, dtype=np.uint8)
    if img.mode == "L":
        return Raster.from_array(arr, PixelFormat.INDEXED8, dpi=dpi)
    if img.mode == "RGB":
        return Raster.from_array(
            arr[..., ::-1], PixelFormat.RGB24, byte_order="little", dpi=dpi
        )
    return Raster.from_array(
        arr[..., [2, 1, 0, 3]], PixelFormat.RGBA32, byte_order="little", dpi=dpi
    )


def image_from_raster(raster: Raster) -> Image.Image:
    """Wrap an INDEXED8 (mode L) or INDEXED1 (mode 1) raster as an image."""
    if raster is None:
        raise NullInputError("Raster is None")
    size = (raster.width, raster.height)
    if raster.pixel_format == PixelFormat.INDEXED8:
        img = Image.fromarray(np.ascontiguousarray(raster.pixels()))
    elif raster.pixel_format == PixelFormat.INDEXED1:
        img = Image.frombytes("1", size, bytes(raster.data), "raw", "1", raster.stride)
    else:
        raise UnsupportedFormatError(
            f"Cannot build an image from {raster.pixel_format.value}"
        )
    if raster.dpi:
        img.info["dpi"] = raster.dpi
    return img


def load_raster(path: str | Path) -> Raster:
    """Open an image file and decode it into a Raster."""
    with Image.open(path) as img:
        img.load()
        return raster_from_image(img)


def _mono_image(raster: Raster) -> Image.Image:
    if raster.pixel_format != PixelFormat.INDEXED1:
        raster = pack_mono(raster)
    return image_from_raster(raster)


def save_mono_tiff(raster: Raster, path: str | Path) -> Path:
    """Save a dithered raster as a 1-bit CCITT Group 4 TIFF."""
    path = Path(path)
    img = _mono_image(raster)
    params = {"compression": "group4"}
    if raster.dpi:
        params["dpi"] = raster.dpi
    img.save(path, format="TIFF", **params)
    return path


def save_image(raster: Raster, path: str | Path) -> Path:
    """Save a dithered raster, choosing the encoding from the file suffix."""
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix in TIFF_SUFFIXES:
        return save_mono_tiff(raster, path)

    img = _mono_image(raster)
    if suffix in GRAYSCALE_ONLY_SUFFIXES:
        img = img.convert("L")
    params = {}
    if raster.dpi:
        params["dpi"] = raster.dpi
    img.save(path, **params)
    return path
