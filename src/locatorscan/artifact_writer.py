from __future__ import annotations

import logging
import os
from pathlib import Path
import tempfile
from typing import Sequence

from .emitters import Emitter
from .models import ScanResult

LOGGER = logging.getLogger("locatorscan.emit")


def write_text_atomic(target: Path, content: str) -> tuple[bool, str]:
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        return False, f"Could not create output folder {target.parent}: {exc}"

    temp_path: Path | None = None
    try:
        fd, temp_name = tempfile.mkstemp(prefix=f".{target.name}.", suffix=".tmp", dir=str(target.parent))
        temp_path = Path(temp_name)
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as temp_file:
            temp_file.write(content)
            temp_file.flush()
            os.fsync(temp_file.fileno())
        temp_path.replace(target)
    except OSError as exc:
        if temp_path and temp_path.exists():
            temp_path.unlink(missing_ok=True)
        return False, f"Could not write {target}: {exc}"
    return True, f"Wrote {target}"


def write_artifacts(
    result: ScanResult,
    output_dir: Path,
    emitters: Sequence[Emitter],
) -> tuple[bool, str, tuple[Path, ...]]:
    written: list[Path] = []
    errors: list[str] = []
    for emitter in emitters:
        target = output_dir / emitter.filename
        ok, message = write_text_atomic(target, emitter.render(result))
        if ok:
            LOGGER.info("%s artifact written to %s", emitter.name, target)
            written.append(target)
        else:
            LOGGER.error(message)
            errors.append(message)

    if errors:
        return False, "; ".join(errors), tuple(written)
    return True, f"Wrote {len(written)} artifact(s) to {output_dir}", tuple(written)
