#!/usr/bin/env python3
"""
onedenoiser command line.

    onedenoiser --use oidn -i noisy.exr [-a albedo.exr] [-n normal.exr] -o denoised.png
"""
import os
import sys
import logging
import argparse
from typing import List, Optional
from dotenv import load_dotenv

# Load environment variables first
load_dotenv()

from ..errors import OneDenoiserError, MissingArgument
from ..services.denoise_service import DenoiseService
from ..pipeline.denoise_image import denoise_image

logger = logging.getLogger(__name__)


class DenoiserArgumentParser(argparse.ArgumentParser):
    """Every argument failure exits with status 1."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def build_parser() -> argparse.ArgumentParser:
    parser = DenoiserArgumentParser(
        prog="onedenoiser",
        description="OneDenoiser: easy-to-use wrapper for open source denoisers",
        allow_abbrev=False,
    )
    parser.add_argument("--use", help="Which denoiser to use?")
    parser.add_argument("-i", "--input", help="Noisy image")
    parser.add_argument("-a", "--albedo", help="Albedo")
    parser.add_argument("-n", "--normal", help="Normal")
    parser.add_argument("-o", "--output", help="Denoised image")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def resolve_log_level(verbose: bool = False) -> int:
    """DEBUG when verbose, else LOG_LEVEL; unknown names fall back to INFO."""
    if verbose:
        return logging.DEBUG
    level = logging.getLevelName(os.getenv("LOG_LEVEL", "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(verbose: bool = False) -> None:
    level = resolve_log_level(verbose)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)-25s - %(levelname)-8s - %(message)s',
        datefmt='%H:%M:%S'
    )
    requested = os.getenv("LOG_LEVEL")
    if not verbose and requested and not isinstance(logging.getLevelName(requested.strip().upper()), int):
        logger.warning(f"Unknown LOG_LEVEL {requested!r}, using INFO")


def _require(args: argparse.Namespace, name: str) -> str:
    value = getattr(args, name)
    if not value:
        raise MissingArgument(f"{name} not specified")
    return value


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args, unknown = parser.parse_known_args(argv)
    configure_logging(args.verbose)
    if unknown:
        logger.debug(f"Ignoring unrecognised options: {unknown}")

    if not args.use:
        parser.print_help()
        return 1

    try:
        input_path = _require(args, "input")
        output_path = _require(args, "output")
        # Resolve the backend before touching any file.
        denoise_service = DenoiseService(args.use)
        denoise_image(
            input_path,
            output_path,
            albedo_path=args.albedo,
            normal_path=args.normal,
            image_service=denoise_service.image_service,
            denoise_service=denoise_service,
        )
    except OneDenoiserError as err:
        print(err, file=sys.stderr)
        logger.debug("Denoising aborted", exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
