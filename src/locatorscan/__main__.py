from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
import sys
from typing import Sequence

from .artifact_writer import write_artifacts
from .config import DEFAULT_ROOT, ScanConfig, load_scan_config
from .emitters import EMITTERS, resolve_emitters
from .project_discovery import ScanRootError
from .reporting import build_logger, print_summary
from .scanner import scan_project

EXIT_OK = 0
EXIT_WRITE_FAILED = 1
EXIT_FATAL = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="locatorscan",
        description="Extract element locators from UI templates and generate Playwright page objects.",
    )
    parser.add_argument(
        "root",
        nargs="?",
        default=str(DEFAULT_ROOT),
        help=f"directory to scan (default: ./{DEFAULT_ROOT})",
    )
    parser.add_argument("--output-dir", help="where generated artifacts are written (default: ./output)")
    parser.add_argument(
        "--format",
        dest="formats",
        action="append",
        choices=sorted(EMITTERS),
        help="artifact to generate; repeat for several (default: all)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="log debug details to stderr")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    if sys.version_info < (3, 11):
        raise SystemExit(
            "locatorscan requires Python 3.11+. "
            f"Current interpreter: {sys.executable} (Python {sys.version.split()[0]})"
        )

    args = build_parser().parse_args(argv)
    logger = build_logger(verbose=args.verbose)

    root = Path(args.root)
    config = load_scan_config(root, ScanConfig(root=root)) if root.is_dir() else ScanConfig(root=root)
    if args.output_dir:
        config = replace(config, output_dir=Path(args.output_dir))
    if args.formats:
        config = replace(config, formats=tuple(args.formats))

    emitters, unknown = resolve_emitters(config.formats)
    for name in unknown:
        logger.warning("Unknown output format %r ignored", name)

    print(f"Scanning {root.resolve()}")
    try:
        result = scan_project(config)
    except ScanRootError as exc:
        print(f"Failed to extract locators: {exc}", file=sys.stderr)
        return EXIT_FATAL

    ok, message, written = write_artifacts(result, config.output_dir, emitters)
    print_summary(result, written)
    if not ok:
        print(f"Failed to write artifacts: {message}", file=sys.stderr)
        return EXIT_WRITE_FAILED
    return EXIT_OK


if __name__ == "__main__":
    raise SystemExit(main())
