from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import Iterable

from .config import ScanConfig
from .constant_table import ConstantTable, build_constant_table
from .extractor import TEMPLATE_SUFFIXES, extract_file_locators, script_block_text
from .models import FileLocators, ScanFailure, ScanResult
from .project_discovery import SourceFile, discover_sources

LOGGER = logging.getLogger("locatorscan.scan")


def read_source(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def load_sources(sources: Iterable[SourceFile]) -> tuple[dict[str, str], list[ScanFailure]]:
    texts: dict[str, str] = {}
    failures: list[ScanFailure] = []
    for source in sources:
        try:
            texts[source.relative_path] = read_source(source.path)
        except (OSError, UnicodeDecodeError) as exc:
            LOGGER.warning("Skipping unreadable file %s: %s", source.relative_path, exc)
            failures.append(ScanFailure(path=source.path, message=str(exc)))
    return texts, failures


def script_text(relative_path: str, text: str) -> str:
    if PurePosixPath(relative_path).suffix.lower() in TEMPLATE_SUFFIXES:
        return script_block_text(text)
    return text


def collect_constant_table(texts: dict[str, str]) -> ConstantTable:
    return build_constant_table((path, script_text(path, text)) for path, text in sorted(texts.items()))


def extract_all(
    sources: Iterable[SourceFile],
    texts: dict[str, str],
    constants: ConstantTable,
) -> tuple[dict[str, FileLocators], list[ScanFailure]]:
    files: dict[str, FileLocators] = {}
    failures: list[ScanFailure] = []
    for source in sources:
        text = texts.get(source.relative_path)
        if text is None:
            continue
        try:
            files[source.relative_path] = extract_file_locators(source.relative_path, text, constants)
        except Exception as exc:
            LOGGER.exception("Extraction failed for %s", source.relative_path)
            failures.append(ScanFailure(path=source.path, message=f"extraction failed: {exc}"))
            continue
        LOGGER.debug("%s: %d locators", source.relative_path, len(files[source.relative_path].records))
    return files, failures


def scan_project(config: ScanConfig) -> ScanResult:
    """Scan ``config.root``; raises ``ScanRootError`` when the root itself is unusable."""
    sources, failures = discover_sources(config)
    LOGGER.info("Discovered %d source files under %s", len(sources), config.root)

    texts, read_failures = load_sources(sources)
    failures.extend(read_failures)

    constants = collect_constant_table(texts)
    LOGGER.debug("Constant table holds %d names", len(constants))
    for name, origin in constants.origins.items():
        LOGGER.debug("Constant %s = %r from %s", name, constants[name], origin)

    files, extract_failures = extract_all(sources, texts, constants)
    failures.extend(extract_failures)

    return ScanResult(root=config.root.resolve(), files=files, failures=tuple(failures))
