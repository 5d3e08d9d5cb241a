from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Callable, Mapping, Protocol

from .key_generator import KeyRegistry, to_camel_case, to_identifier, to_pascal_case, to_ts_identifier
from .models import FileLocators, LocatorRecord, ScanResult


class Emitter(Protocol):
    name: str
    filename: str

    def render(self, result: ScanResult) -> str: ...


def group_name(relative_path: str) -> str:
    path = PurePosixPath(relative_path)
    stem = str(path.with_suffix("")) if path.suffix else relative_path
    name = re.sub(r"[^A-Za-z0-9_]", "_", stem).strip("_")
    return to_identifier(name or "page")


def class_names(relative_paths: list[str]) -> dict[str, str]:
    used: set[str] = set()
    names: dict[str, str] = {}
    for relative_path in relative_paths:
        path = PurePosixPath(relative_path)
        stem = str(path.with_suffix("")) if path.suffix else relative_path
        base = to_pascal_case(stem) or "Generated"
        if base[0].isdigit():
            base = f"P{base}"
        if not base.endswith("Page"):
            base = f"{base}Page"
        candidate = base
        suffix = 1
        while candidate in used:
            candidate = f"{base}{suffix}"
            suffix += 1
        used.add(candidate)
        names[relative_path] = candidate
    return names


def markers(record: LocatorRecord) -> list[str]:
    flags: list[str] = []
    if record.is_dynamic:
        flags.append("dynamic")
    if record.is_conditional:
        flags.append("conditional")
    if record.partial:
        flags.append("prefix match")
    if record.robustness == "fragile":
        flags.append("fragile")
    return flags


def describe(record: LocatorRecord, separator: str = " - ") -> str:
    raw = record.raw_value.replace("\n", " ")
    text = f'{record.element}{separator}{record.locator_type}: "{raw}"'
    flags = markers(record)
    if flags:
        text += f" [{', '.join(flags)}]"
    return text


def js_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace("'", "\\'").replace("\n", "\\n")
    return f"'{escaped}'"


def py_string(value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"').replace("\n", "\\n")
    return f'"{escaped}"'


@dataclass(frozen=True, slots=True)
class JsonLocatorMapEmitter:
    name: str = "json"
    filename: str = "locatorMap.json"

    def render(self, result: ScanResult) -> str:
        payload = {
            relative_path: {record.key: record.to_dict() for record in file_locators.records}
            for relative_path, file_locators in result.non_empty_files().items()
        }
        return json.dumps(payload, indent=2, ensure_ascii=False) + "\n"


@dataclass(frozen=True, slots=True)
class TypeScriptLocatorMapEmitter:
    name: str = "ts-map"
    filename: str = "locatorMap.ts"

    def render(self, result: ScanResult) -> str:
        lines = ["// Auto-generated locator map for Page Object Model", "export const locatorMap = {"]
        groups = KeyRegistry()
        for relative_path, file_locators in result.non_empty_files().items():
            lines.append(f"  // Page Object for: {relative_path}")
            lines.append(f"  {groups.claim(group_name(relative_path))}: {{")
            for record in file_locators.records:
                lines.append(f"    // {describe(record)}")
                lines.append(f"    {to_ts_identifier(record.key)}: {js_string(record.selector)},")
            lines.append("  },")
        lines.append("};")
        return "\n".join(lines) + "\n"


def _playwright_ts_call(record: LocatorRecord) -> str:
    if record.locator_type == "test-id" and not record.partial:
        return f"this.page.getByTestId({js_string(record.raw_value)})"
    if record.locator_type == "aria-label" and not record.partial:
        return f"this.page.getByLabel({js_string(record.raw_value)})"
    if record.locator_type == "placeholder" and not record.partial:
        return f"this.page.getByPlaceholder({js_string(record.raw_value)})"
    if record.locator_type == "role" and not record.partial:
        return f"this.page.getByRole({js_string(record.raw_value)} as any)"
    if record.locator_type == "xpath":
        return f"this.page.locator({js_string('xpath=' + record.selector)})"
    return f"this.page.locator({js_string(record.selector)})"


def _playwright_py_call(record: LocatorRecord) -> str:
    if record.locator_type == "test-id" and not record.partial:
        return f"self.page.get_by_test_id({py_string(record.raw_value)})"
    if record.locator_type == "aria-label" and not record.partial:
        return f"self.page.get_by_label({py_string(record.raw_value)})"
    if record.locator_type == "placeholder" and not record.partial:
        return f"self.page.get_by_placeholder({py_string(record.raw_value)})"
    if record.locator_type == "role" and not record.partial:
        return f"self.page.get_by_role({py_string(record.raw_value)})"
    if record.locator_type == "xpath":
        return f"self.page.locator({py_string('xpath=' + record.selector)})"
    return f"self.page.locator({py_string(record.selector)})"


@dataclass(frozen=True, slots=True)
class PlaywrightTsPageObjectEmitter:
    name: str = "playwright-ts"
    filename: str = "pageObjects.ts"

    def render(self, result: ScanResult) -> str:
        files = result.non_empty_files()
        names = class_names(list(files))
        blocks: list[str] = []
        for relative_path, file_locators in files.items():
            lines = [
                f"// Page Object for: {relative_path}",
                f"export class {names[relative_path]} {{",
                "  constructor(protected page: Page) {}",
            ]
            properties = KeyRegistry()
            properties.claim("page")
            for record in file_locators.records:
                lines.append("")
                lines.append(f"  // {describe(record, ' with ')}")
                field_name = properties.claim(to_ts_identifier(to_camel_case(record.key)))
                lines.append(f"  {field_name} = {_playwright_ts_call(record)};")
            lines.append("}")
            blocks.append("\n".join(lines))

        header = [
            "// Auto-generated Playwright Page Object Model classes",
            "import { Page } from '@playwright/test';",
        ]
        return "\n".join(header) + "\n\n" + "\n\n".join(blocks) + ("\n" if blocks else "")


@dataclass(frozen=True, slots=True)
class PlaywrightPyPageObjectEmitter:
    name: str = "playwright-py"
    filename: str = "page_objects.py"

    def render(self, result: ScanResult) -> str:
        files = result.non_empty_files()
        names = class_names(list(files))
        lines = [
            '"""Auto-generated Playwright page objects."""',
            "",
            "from __future__ import annotations",
            "",
            "from playwright.sync_api import Locator, Page",
        ]
        for relative_path, file_locators in files.items():
            lines.extend(self._render_class(names[relative_path], relative_path, file_locators))
        return "\n".join(lines) + "\n"

    @staticmethod
    def _render_class(class_name: str, relative_path: str, file_locators: FileLocators) -> list[str]:
        lines = [
            "",
            "",
            f"class {class_name}:",
            f"    # Page Object for: {relative_path}",
            "",
            "    def __init__(self, page: Page) -> None:",
            "        self.page = page",
        ]
        accessors = KeyRegistry()
        accessors.claim("page")
        for record in file_locators.records:
            lines.extend(
                [
                    "",
                    "    @property",
                    f"    def {accessors.claim(to_identifier(record.key))}(self) -> Locator:",
                    f"        # {describe(record, ' with ')}",
                    f"        return {_playwright_py_call(record)}",
                ]
            )
        return lines


EMITTERS: Mapping[str, Callable[[], Emitter]] = {
    "json": JsonLocatorMapEmitter,
    "ts-map": TypeScriptLocatorMapEmitter,
    "playwright-ts": PlaywrightTsPageObjectEmitter,
    "playwright-py": PlaywrightPyPageObjectEmitter,
}


def resolve_emitters(formats: tuple[str, ...] | list[str]) -> tuple[list[Emitter], list[str]]:
    emitters: list[Emitter] = []
    unknown: list[str] = []
    seen: set[str] = set()
    for name in formats:
        factory = EMITTERS.get(name)
        if factory is None:
            unknown.append(name)
            continue
        if name in seen:
            continue
        seen.add(name)
        emitters.append(factory())
    return emitters, unknown
