"""Command-line interface for mono_dither.

Converts an image file to a black and white dithered image. Supports a
plain mode that reports to stderr and a JSON mode for scripting.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import time
from dataclasses import dataclass
from pathlib import Path

from mono_dither.core.algorithms import Algorithm

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    """Conversion settings taken from the command line."""

    algorithm: Algorithm = Algorithm.FLOYD_STEINBERG
    workers: int | None = None  # None = all cores


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mono-dither",
        description="Convert images to black and white with dithering.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # --- convert subcommand ---
    convert = subparsers.add_parser(
        "convert",
        help="Dither an image file to monochrome.",
    )
    convert.add_argument("input", help="Input image file path.")
    convert.add_argument(
        "-o", "--output",
        help="Output file path. Defaults to <input>_<algorithm>.tiff.",
    )
    convert.add_argument(
        "-a", "--algorithm",
        choices=[a.value for a in Algorithm],
        default=Algorithm.FLOYD_STEINBERG.value,
        help="Dithering algorithm (default: floyd-steinberg).",
    )
    convert.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads for row-parallel stages (default: all cores).",
    )
    convert.add_argument(
        "--json",
        action="store_true",
        help="Output structured JSON (pipe-friendly).",
    )
    convert.add_argument(
        "--debug",
        action="store_true",
        help="Show stack traces on error.",
    )
    convert.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )

    return parser


def _auto_output_path(input_path: Path, algorithm: Algorithm) -> Path:
    """Generate default output path from input."""
    return input_path.parent / f"{input_path.stem}_{algorithm.value}.tiff"


def _json_error(message: str, code: str) -> None:
    """Print JSON error to stderr and exit with code 1."""
    err = {"status": "error", "error": message, "code": code}
    print(json.dumps(err), file=sys.stderr)
    sys.exit(1)


def _fail(
    args: argparse.Namespace,
    message: str,
    code: str,
    exc: BaseException | None = None,
) -> None:
    if args.debug and exc is not None:
        import traceback
        traceback.print_exception(
            type(exc), exc, exc.__traceback__, file=sys.stderr
        )
    if args.json:
        _json_error(message, code)
    print(f"Error: {message}", file=sys.stderr)
    sys.exit(1)


def _run_convert(args: argparse.Namespace) -> None:
    """Load, dither and save one image."""
    from PIL import UnidentifiedImageError

    from mono_dither.core.algorithms import create_ditherer
    from mono_dither.core.errors import DitherError
    from mono_dither.core.imaging import load_raster, save_image

    input_path = Path(args.input).resolve()
    if not input_path.exists():
        _fail(args, f"File not found: {input_path}", "FILE_NOT_FOUND")

    settings = Settings(algorithm=Algorithm(args.algorithm), workers=args.workers)

    if args.output:
        output_path = Path(args.output).resolve()
    else:
        output_path = _auto_output_path(input_path, settings.algorithm)

    try:
        source = load_raster(input_path)
    except (UnidentifiedImageError, OSError, DitherError) as e:
        _fail(args, str(e), "INVALID_INPUT", e)

    logger.debug(
        f"Loaded {input_path}: {source.width}x{source.height} "
        f"{source.pixel_format.value}"
    )

    started = time.perf_counter()
    try:
        ditherer = create_ditherer(settings.algorithm, workers=settings.workers)
        result = ditherer.dither(source)
        save_image(result, output_path)
    except (OSError, ValueError, DitherError) as e:
        _fail(args, str(e), "PROCESSING_ERROR", e)
    elapsed_ms = (time.perf_counter() - started) * 1000

    if not args.json:
        print(f"Saved to {output_path}", file=sys.stderr)
    else:
        result_info = {
            "status": "success",
            "input": str(input_path),
            "output": str(output_path),
            "algorithm": settings.algorithm.value,
            "width": result.width,
            "height": result.height,
            "elapsed_ms": round(elapsed_ms, 1),
        }
        print(json.dumps(result_info, indent=2))


def main(argv: list[str] | None = None) -> None:
    """Main entry point: ``mono-dither convert <file> [opts]``."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.command != "convert":
        parser.print_help()
        sys.exit(2)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    _run_convert(args)


if __name__ == "__main__":
    main()
