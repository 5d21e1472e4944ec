"""Exceptions raised by the dithering engine."""

from __future__ import annotations


class DitherError(Exception):
    """Base class for all dithering errors."""


class NullInputError(DitherError, ValueError):
    """A required raster or threshold matrix was not supplied."""


class UnsupportedFormatError(DitherError, ValueError):
    """The raster's pixel format cannot be handled by this operation."""


class InvalidThresholdMapError(DitherError, ValueError):
    """The threshold matrix is empty, not square, or out of range."""


class SizeMismatchError(DitherError, ValueError):
    """A byte buffer does not match the declared raster dimensions."""


class NullThresholdMapError(NullInputError, InvalidThresholdMapError):
    """No threshold matrix was supplied."""
