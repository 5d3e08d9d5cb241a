from __future__ import annotations

import keyword
import re

from .models import LocatorType

_NON_ALNUM_RUN = re.compile(r"[^a-z0-9]+")

_PREFIXES: dict[str, str] = {"class": "class_", "xpath": "xpath_"}
_SUFFIXES: dict[str, str] = {"role": "_role", "placeholder": "_input"}


def normalize_key(raw_value: str) -> str:
    return _NON_ALNUM_RUN.sub("_", raw_value.lower()).strip("_")


def make_key(raw_value: str, locator_type: LocatorType, is_dynamic: bool = False, is_conditional: bool = False) -> str:
    base = normalize_key(raw_value) or "element"
    key = f"{_PREFIXES.get(locator_type, '')}{base}{_SUFFIXES.get(locator_type, '')}"
    if is_dynamic and is_conditional:
        key += "_dynamic_conditional"
    elif is_dynamic:
        key += "_dynamic"
    elif is_conditional:
        key += "_conditional"
    return key


class KeyRegistry:
    """Hands out collision-free keys within one file, numbering repeats in first-seen order."""

    def __init__(self) -> None:
        self._used: set[str] = set()
        self._next_suffix: dict[str, int] = {}

    def claim(self, key: str) -> str:
        if key not in self._used:
            self._used.add(key)
            return key

        suffix = self._next_suffix.get(key, 1)
        candidate = f"{key}_{suffix}"
        while candidate in self._used:
            suffix += 1
            candidate = f"{key}_{suffix}"
        self._next_suffix[key] = suffix + 1
        self._used.add(candidate)
        return candidate


def to_camel_case(key: str) -> str:
    parts = [part for part in key.split("_") if part]
    if not parts:
        return "element"
    return parts[0] + "".join(part[:1].upper() + part[1:] for part in parts[1:])


def to_pascal_case(value: str) -> str:
    parts = [part for part in re.split(r"[^A-Za-z0-9]+", value) if part]
    return "".join(part[:1].upper() + part[1:] for part in parts)


def to_ts_identifier(key: str) -> str:
    cleaned = re.sub(r"[^\w$]", "_", key)
    if not cleaned:
        return "element"
    if cleaned[0].isdigit():
        return f"_{cleaned}"
    return cleaned


def to_identifier(key: str) -> str:
    cleaned = re.sub(r"\W", "_", key)
    if not cleaned:
        return "element"
    if cleaned[0].isdigit():
        return f"e_{cleaned}"
    if keyword.iskeyword(cleaned):
        return f"{cleaned}_"
    return cleaned
