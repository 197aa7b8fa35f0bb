"""
Command line entry point: transform images with the help of matrices.

usage:
    matwarp -i in.png -o out.png -m 0,1,-1,0 -f 63,0
    matwarp -i in.png -o out.png --preset flip_horizontal -f 63,0 -b 0,0,0,255
    matwarp -i in.png -o out.png -m 1,0,0.5,1 -n -d 0,0 --opaque
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable

from matwarp import __version__
from matwarp.config.config import CONFIG
from matwarp.config.presets import WARP_PRESETS, get_warp_preset, load_warp_json
from matwarp.config.values import WarpValues
from matwarp.errors import MatwarpError, ParameterError
from matwarp.parsing import parse_background, parse_dims, parse_matrix, parse_offset
from matwarp.pipeline import warp_file
from matwarp.transform.apply import BACKENDS

logger = logging.getLogger("matwarp.cli")


def _argtype(parser_fn: Callable[[str], tuple]) -> Callable[[str], tuple]:
    """Adapt a matwarp parser so argparse reports its message verbatim."""

    def convert(text: str) -> tuple:
        try:
            return parser_fn(text)
        except ParameterError as err:
            raise argparse.ArgumentTypeError(str(err)) from err

    convert.__name__ = parser_fn.__name__
    return convert


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="matwarp", description="Transform images with the help of matrices"
    )
    parser.add_argument("-i", "--input", required=True, help="The name of the input file")
    parser.add_argument("-o", "--output", required=True, help="The name of the output file")

    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "-m",
        "--matrix",
        type=_argtype(parse_matrix),
        help="The transformation matrix to apply to the image (Xx,Xy,Yx,Yy)",
    )
    source.add_argument(
        "--preset",
        choices=sorted(WARP_PRESETS),
        help="Use a named warp preset instead of an explicit matrix",
    )
    source.add_argument("--config", help="Load warp values from a JSON file")

    parser.add_argument(
        "-f", "--offset", type=_argtype(parse_offset), help="The amount to offset the image by (X,Y)"
    )
    parser.add_argument(
        "-n",
        "--inverse",
        action="store_true",
        default=None,
        help="Whether to apply the inverse transformation",
    )
    parser.add_argument(
        "-d",
        "--dims",
        type=_argtype(parse_dims),
        help="The dimensions of the output image (set to 0 to keep the original dimensions)",
    )
    parser.add_argument(
        "-b",
        "--background",
        type=_argtype(parse_background),
        help="The color of the background in RGBA format",
    )
    parser.add_argument(
        "--opaque",
        action="store_true",
        default=None,
        help="Give transformed pixels full alpha instead of the background alpha",
    )
    parser.add_argument(
        "--backend",
        choices=BACKENDS,
        default=CONFIG.default_backend,
        help="Rasterizer implementation",
    )
    parser.add_argument(
        "--no-progress", dest="progress", action="store_false", help="Hide the progress bar"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def values_from_args(args: argparse.Namespace) -> WarpValues:
    """Combine preset/config/matrix with explicit flag overrides."""
    if args.config is not None:
        base = load_warp_json(args.config)
    elif args.preset is not None:
        base = get_warp_preset(args.preset)
    else:
        base = WarpValues(matrix=args.matrix)

    return base.with_overrides(
        offset=args.offset,
        inverse=args.inverse,
        dims=args.dims,
        background=args.background,
        opaque=args.opaque,
    )


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        values = values_from_args(args)
    except (OSError, ValueError, KeyError) as err:
        # Bad config file or preset name, raised before any image I/O
        parser.error(str(err))

    try:
        warp_file(
            args.input,
            args.output,
            values,
            backend=args.backend,
            show_progress=args.progress,
        )
    except MatwarpError as err:
        logger.error("%s", err)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
