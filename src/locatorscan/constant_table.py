from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping

_STRING_CONSTANT = re.compile(
    r"(?:export\s+)?(?:const|let|var)\s+(?P<name>[A-Za-z_$][\w$]*)\s*(?::\s*[\w.<>\[\] |]+)?\s*=\s*"
    r"(?P<quote>['\"`])(?P<value>(?:\\.|(?!(?P=quote)).)*)(?P=quote)",
    re.DOTALL,
)
_OBJECT_CONSTANT = re.compile(
    r"(?:export\s+)?(?:const|let|var)\s+(?P<name>[A-Za-z_$][\w$]*)\s*(?::\s*[\w.<>\[\] |]+)?\s*=\s*"
    r"\{(?P<body>[^{}]*)\}",
    re.DOTALL,
)
_OBJECT_ENTRY = re.compile(
    r"(?P<key>[A-Za-z_$][\w$]*|'[^']*'|\"[^\"]*\")\s*:\s*(?P<quote>['\"`])(?P<value>(?:\\.|(?!(?P=quote)).)*)(?P=quote)",
    re.DOTALL,
)
_LINE_COMMENT = re.compile(r"(?m)(^|\s)//[^\n]*")
_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.DOTALL)


@dataclass(frozen=True, slots=True)
class ConstantTable(Mapping[str, str]):
    """Read-only name -> string value table collected before extraction starts."""

    values: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    origins: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))

    def __getitem__(self, key: str) -> str:
        return self.values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.values)

    def __len__(self) -> int:
        return len(self.values)


def collect_constants(source: str) -> dict[str, str]:
    text = _strip_script_comments(source)
    found: dict[str, str] = {}

    for match in _STRING_CONSTANT.finditer(text):
        value = match.group("value")
        if match.group("quote") == "`" and "${" in value:
            continue
        found.setdefault(match.group("name"), _unescape(value))

    for match in _OBJECT_CONSTANT.finditer(text):
        owner = match.group("name")
        for entry in _OBJECT_ENTRY.finditer(match.group("body")):
            value = entry.group("value")
            if entry.group("quote") == "`" and "${" in value:
                continue
            key = entry.group("key").strip("'\"")
            found.setdefault(f"{owner}.{key}", _unescape(value))
    return found


def build_constant_table(sources: Iterable[tuple[str, str]]) -> ConstantTable:
    """Merge per-file constants; the first file (in iteration order) to define a name wins."""
    values: dict[str, str] = {}
    origins: dict[str, str] = {}
    for origin, source in sources:
        for name, value in collect_constants(source).items():
            if name in values:
                continue
            values[name] = value
            origins[name] = origin
    return ConstantTable(values=MappingProxyType(values), origins=MappingProxyType(origins))


def _strip_script_comments(source: str) -> str:
    without_blocks = _BLOCK_COMMENT.sub(" ", source)
    return _LINE_COMMENT.sub(lambda match: match.group(1), without_blocks)


def _unescape(value: str) -> str:
    return re.sub(r"\\(.)", r"\1", value)
