from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .config import ScanConfig
from .models import ScanFailure


class ScanRootError(Exception):
    """The scan root cannot be used at all."""


@dataclass(frozen=True, slots=True)
class SourceFile:
    path: Path
    relative_path: str


def validate_root(root: Path) -> Path:
    if not root.exists():
        raise ScanRootError(f"Scan root does not exist: {root}")
    if not root.is_dir():
        raise ScanRootError(f"Scan root is not a directory: {root}")
    try:
        with os.scandir(root) as entries:
            next(entries, None)
    except OSError as exc:
        raise ScanRootError(f"Scan root is not readable: {root} ({exc})") from exc
    return root.resolve()


def discover_sources(config: ScanConfig) -> tuple[list[SourceFile], list[ScanFailure]]:
    root = validate_root(config.root)
    extensions = {suffix.lower() for suffix in config.extensions}

    failures: list[ScanFailure] = []

    def _on_error(exc: OSError) -> None:
        failures.append(ScanFailure(path=Path(exc.filename or root), message=exc.strerror or str(exc)))

    sources: list[SourceFile] = []
    for current, dirnames, filenames in os.walk(root, onerror=_on_error):
        dirnames[:] = sorted(name for name in dirnames if name not in config.ignore_dirs)
        for filename in sorted(filenames):
            path = Path(current) / filename
            if path.suffix.lower() not in extensions:
                continue
            sources.append(SourceFile(path=path, relative_path=path.relative_to(root).as_posix()))

    sources.sort(key=lambda item: item.relative_path)
    return sources, failures
