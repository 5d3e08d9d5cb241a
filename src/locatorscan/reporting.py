from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Sequence, TextIO

from .models import ScanResult

LOG_FORMAT = "%(asctime)s %(levelname)s %(message)s"


def build_logger(verbose: bool = False) -> logging.Logger:
    logger = logging.getLogger("locatorscan")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if logger.handlers:
        return logger

    logger.propagate = False
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    return logger


def format_summary(result: ScanResult) -> list[str]:
    stats = result.stats()
    lines = [
        f"Extracted {stats.total_locators} locators from {stats.files_with_locators} files "
        f"({stats.files_scanned} scanned, {stats.files_failed} failed)",
        f"  robust: {stats.robust}  fragile: {stats.fragile}",
        f"  dynamic: {stats.dynamic}  conditional: {stats.conditional}",
        f"  dropped: {stats.dropped_low_relevance} low relevance, {stats.dropped_unresolvable} unresolvable",
    ]
    if stats.by_type:
        by_type = ", ".join(f"{name}={count}" for name, count in sorted(stats.by_type.items()))
        lines.append(f"  by type: {by_type}")

    warnings = result.warnings
    if warnings:
        lines.append("")
        lines.append(f"Fragile locators on interactive elements ({len(warnings)}):")
        for relative_path, record in warnings:
            lines.append(f"  {relative_path}:{record.line} {record.key}: {record.warning}")

    advisories = result.advisories
    if advisories:
        lines.append("")
        lines.append(f"Advisories ({len(advisories)}):")
        for advisory in advisories:
            lines.append(f"  {advisory.file}:{advisory.line} {advisory.construct} {advisory.message}")

    if result.failures:
        lines.append("")
        lines.append(f"Failed files ({len(result.failures)}):")
        for failure in result.failures:
            lines.append(f"  {failure.path}: {failure.message}")
    return lines


def print_summary(result: ScanResult, written: Sequence[Path] = (), stream: TextIO | None = None) -> None:
    out = stream or sys.stdout
    for line in format_summary(result):
        print(line, file=out)
    if written:
        print("", file=out)
        print("Artifacts:", file=out)
        for path in written:
            print(f" - {path}", file=out)
