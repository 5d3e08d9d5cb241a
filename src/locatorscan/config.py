from __future__ import annotations

from dataclasses import dataclass, field, replace
import json
import logging
from pathlib import Path

CONFIG_FILE_NAME = ".locatorscan.json"
DEFAULT_ROOT = Path("src")
DEFAULT_OUTPUT_DIR = Path("output")
DEFAULT_FORMATS: tuple[str, ...] = ("json", "ts-map", "playwright-ts", "playwright-py")
DEFAULT_IGNORE_DIRS: frozenset[str] = frozenset(
    {
        "node_modules",
        "dist",
        ".output",
        ".nuxt",
        ".git",
        "build",
        "coverage",
        ".venv",
        "__pycache__",
    }
)
TEMPLATE_EXTENSIONS: tuple[str, ...] = (".vue", ".html", ".htm")
SCRIPT_EXTENSIONS: tuple[str, ...] = (".js", ".ts", ".jsx", ".tsx")

LOGGER = logging.getLogger("locatorscan.config")


@dataclass(frozen=True, slots=True)
class ScanConfig:
    root: Path = DEFAULT_ROOT
    output_dir: Path = DEFAULT_OUTPUT_DIR
    formats: tuple[str, ...] = DEFAULT_FORMATS
    template_extensions: tuple[str, ...] = TEMPLATE_EXTENSIONS
    script_extensions: tuple[str, ...] = SCRIPT_EXTENSIONS
    include_scripts: bool = True
    ignore_dirs: frozenset[str] = field(default_factory=lambda: DEFAULT_IGNORE_DIRS)

    @property
    def extensions(self) -> tuple[str, ...]:
        if self.include_scripts:
            return self.template_extensions + self.script_extensions
        return self.template_extensions


def load_scan_config(root: Path, base: ScanConfig | None = None) -> ScanConfig:
    """Apply overrides from ``<root>/.locatorscan.json``; unreadable or malformed files keep ``base``."""
    config = replace(base or ScanConfig(), root=root)
    path = root / CONFIG_FILE_NAME
    if not path.is_file():
        return config

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        LOGGER.warning("Ignoring %s: %s", path, exc)
        return config

    if not isinstance(payload, dict):
        LOGGER.warning("Ignoring %s: expected a JSON object", path)
        return config

    output_dir = payload.get("output_dir")
    if isinstance(output_dir, str) and output_dir.strip():
        config = replace(config, output_dir=Path(output_dir.strip()))

    formats = payload.get("formats")
    if isinstance(formats, list):
        config = replace(config, formats=tuple(str(item).strip() for item in formats if str(item).strip()))

    include_scripts = payload.get("include_scripts")
    if isinstance(include_scripts, bool):
        config = replace(config, include_scripts=include_scripts)

    extra_ignores = payload.get("ignore_dirs")
    if isinstance(extra_ignores, list):
        names = {str(item).strip() for item in extra_ignores if str(item).strip()}
        config = replace(config, ignore_dirs=config.ignore_dirs | names)
    return config
