from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

LocatorType = Literal[
    "test-id",
    "test-attr",
    "id",
    "class",
    "name",
    "placeholder",
    "aria-label",
    "role",
    "xpath",
]
Robustness = Literal["robust", "fragile"]
TestRelevance = Literal["high", "medium", "low"]


@dataclass(frozen=True, slots=True)
class RawMatch:
    value: str
    locator_type: LocatorType
    position: int
    attribute: str
    bound: bool = False


@dataclass(frozen=True, slots=True)
class ParentContext:
    tag: str
    directives: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class ElementContext:
    tag: str
    attributes: dict[str, str] = field(default_factory=dict)
    parent: ParentContext | None = None


@dataclass(frozen=True, slots=True)
class DirectiveFlags:
    is_dynamic: bool
    is_conditional: bool


@dataclass(frozen=True, slots=True)
class LocatorRecord:
    key: str
    selector: str
    locator_type: LocatorType
    element: str
    raw_value: str
    robustness: Robustness
    test_relevance: TestRelevance
    is_dynamic: bool = False
    is_conditional: bool = False
    warning: str | None = None
    partial: bool = False
    line: int = 0

    def to_dict(self) -> dict[str, object]:
        payload: dict[str, object] = {
            "selector": self.selector,
            "type": self.locator_type,
            "element": self.element,
            "rawValue": self.raw_value,
            "robustness": self.robustness,
            "testRelevance": self.test_relevance,
            "isDynamic": self.is_dynamic,
            "isConditional": self.is_conditional,
        }
        if self.partial:
            payload["partial"] = True
        if self.warning:
            payload["warning"] = self.warning
        return payload


@dataclass(frozen=True, slots=True)
class AdvisoryWarning:
    file: str
    line: int
    construct: str
    message: str


@dataclass(frozen=True, slots=True)
class ScanFailure:
    path: Path
    message: str


@dataclass(frozen=True, slots=True)
class FileLocators:
    relative_path: str
    records: tuple[LocatorRecord, ...] = ()
    advisories: tuple[AdvisoryWarning, ...] = ()
    dropped_low_relevance: int = 0
    dropped_unresolvable: int = 0

    def by_key(self) -> dict[str, LocatorRecord]:
        return {record.key: record for record in self.records}


@dataclass(slots=True)
class ScanStats:
    files_scanned: int = 0
    files_with_locators: int = 0
    files_failed: int = 0
    total_locators: int = 0
    robust: int = 0
    fragile: int = 0
    dynamic: int = 0
    conditional: int = 0
    dropped_low_relevance: int = 0
    dropped_unresolvable: int = 0
    by_type: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ScanResult:
    root: Path
    files: dict[str, FileLocators]
    failures: tuple[ScanFailure, ...] = ()

    @property
    def warnings(self) -> list[tuple[str, LocatorRecord]]:
        return [
            (relative_path, record)
            for relative_path, file_locators in self.files.items()
            for record in file_locators.records
            if record.warning
        ]

    @property
    def advisories(self) -> list[AdvisoryWarning]:
        return [advisory for file_locators in self.files.values() for advisory in file_locators.advisories]

    def non_empty_files(self) -> dict[str, FileLocators]:
        return {path: item for path, item in self.files.items() if item.records}

    def stats(self) -> ScanStats:
        stats = ScanStats(files_scanned=len(self.files) + len(self.failures), files_failed=len(self.failures))
        for file_locators in self.files.values():
            if file_locators.records:
                stats.files_with_locators += 1
            stats.dropped_low_relevance += file_locators.dropped_low_relevance
            stats.dropped_unresolvable += file_locators.dropped_unresolvable
            for record in file_locators.records:
                stats.total_locators += 1
                if record.robustness == "robust":
                    stats.robust += 1
                else:
                    stats.fragile += 1
                if record.is_dynamic:
                    stats.dynamic += 1
                if record.is_conditional:
                    stats.conditional += 1
                stats.by_type[record.locator_type] = stats.by_type.get(record.locator_type, 0) + 1
        return stats
