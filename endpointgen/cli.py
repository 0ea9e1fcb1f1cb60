# File: endpointgen/cli.py
"""
endpointgen - Command-Line Interface
=====================================

CLI built with the standard-library ``argparse`` module.

Usage examples::

    # Resolve a declaration and print the report
    python -m endpointgen --declaration api.yaml

    # Write the resolved symbol table as JSON
    python -m endpointgen -d api.yaml -o build/symbols.json -v

    # Validate only (no resolution, no file output)
    python -m endpointgen -d api.yaml --validate-only --fail-on-warnings

Exit codes:
    0 — success
    1 — validation error
    2 — resolution error
    3 — export error
    4 — input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, NoReturn, Optional, Sequence, Tuple

from endpointgen.models import API, NamingConfig

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("endpointgen")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_RESOLUTION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root endpointgen logger based on verbosity level.

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    datefmt: str = "%H:%M:%S"
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root_logger: logging.Logger = logging.getLogger("endpointgen")
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from endpointgen import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="endpointgen",
        description=(
            "endpointgen — API endpoint metadata resolver.\n\n"
            "Loads an API declaration (JSON/YAML), validates its groups and "
            "endpoints, and resolves every handler, route and type name the "
            "code emitters need."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -d api.yaml\n"
            "  %(prog)s -d api.yaml -o build/symbols.json -v\n"
            "  %(prog)s -d api.yaml --validate-only\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"endpointgen v{__version__}",
    )

    parser.add_argument(
        "-d", "--declaration",
        type=str,
        required=True,
        metavar="PATH",
        help="Path to the API declaration file (JSON or YAML).",
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        metavar="FILE",
        help="Write the resolved symbol table to FILE as JSON.",
    )

    mode_group = parser.add_argument_group("operation modes")
    mode_group.add_argument(
        "--validate-only",
        action="store_true",
        default=False,
        help="Only load and lint the declaration without resolving symbols.",
    )
    mode_group.add_argument(
        "--fail-on-warnings",
        action="store_true",
        default=False,
        help="Treat lint warnings as errors.",
    )

    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except errors.",
    )

    return parser


# ---------------------------------------------------------------------------
# Pipeline steps
# ---------------------------------------------------------------------------


def _load(path: Path) -> Tuple[Optional[Tuple[API, NamingConfig]], int]:
    """Load and build the declaration; returns ``(result, exit_code)``."""
    from endpointgen.generator import load_api_file, parse_raw_api
    from endpointgen.validators import ValidationError

    try:
        raw = load_api_file(path)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Failed to load declaration: %s", exc)
        return None, EXIT_INPUT_ERROR

    try:
        return parse_raw_api(raw), EXIT_SUCCESS
    except ValidationError as exc:
        logger.error("Invalid declaration: %s", exc)
        return None, EXIT_VALIDATION_ERROR
    except ValueError as exc:
        logger.error("Failed to parse declaration: %s", exc)
        return None, EXIT_INPUT_ERROR


def _lint(api: API, path: Path, fail_on_warnings: bool, quiet: bool) -> int:
    from endpointgen.validators import ValidationResult, validate_api

    result: ValidationResult = validate_api(api)
    if not quiet:
        print(f"\n{'=' * 50}")
        print("  Declaration Validation Report")
        print(f"{'=' * 50}")
        print(f"  File:     {path.name}")
        print(f"  Groups:   {len(api.endpoint_groups)}")
        print(f"  Valid:    {'Yes' if result.is_valid else 'No'}")
        print(result.format_report())
        print(f"{'=' * 50}\n")

    if not result.is_valid:
        return EXIT_VALIDATION_ERROR
    if fail_on_warnings and result.warnings:
        logger.error("%d warning(s) treated as errors.", len(result.warnings))
        return EXIT_VALIDATION_ERROR
    return EXIT_SUCCESS


def _run(args: argparse.Namespace) -> int:
    """Run the pipeline for parsed arguments and return the exit code."""
    from endpointgen.generator import ResolvedAPI, SymbolResolver
    from endpointgen.utils import sha256_hex, write_file
    from endpointgen.validators import ValidationError

    path: Path = Path(args.declaration).resolve()
    loaded, code = _load(path)
    if loaded is None:
        return code
    api, config = loaded

    code = _lint(api, path, args.fail_on_warnings, args.quiet)
    if code != EXIT_SUCCESS or args.validate_only:
        return code

    try:
        resolved: ResolvedAPI = SymbolResolver(config).resolve(api)
    except ValidationError as exc:
        logger.error("Symbol resolution failed: %s", exc)
        return EXIT_RESOLUTION_ERROR

    if not args.quiet:
        print(resolved.summary())

    if args.output is not None:
        content: str = resolved.to_json()
        output: Path = Path(args.output).resolve()
        try:
            written: int = write_file(output, content)
        except OSError as exc:
            logger.error("Failed to write %s: %s", output, exc)
            return EXIT_EXPORT_ERROR
        logger.info("Wrote %d bytes to %s", written, output)
        if not args.quiet:
            print(f"  Output:   {output}")
            print(f"  SHA-256:  {sha256_hex(content)}")

    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.quiet:
        verbosity: int = -1
        logging.disable(logging.CRITICAL)
    else:
        verbosity = args.verbose
        logging.disable(logging.NOTSET)

    _setup_logging(verbosity)
    logger.info("Declaration: %s", args.declaration)

    exit_code: int = _run(args)
    if exit_code == EXIT_SUCCESS:
        logger.info("Completed successfully.")
    else:
        logger.error("Failed with exit code %d.", exit_code)

    sys.exit(exit_code)


__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_RESOLUTION_ERROR",
    "EXIT_EXPORT_ERROR",
    "EXIT_INPUT_ERROR",
]
