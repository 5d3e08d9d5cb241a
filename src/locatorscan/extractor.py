from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Mapping

from .attribute_matcher import find_attribute_matches, keep_only, line_of, template_body
from .classifier import ROBUST_ATTRS, build_warning, classify, should_keep
from .directives import detect_for_context
from .element_context import ElementContextResolver
from .key_generator import KeyRegistry, make_key
from .models import AdvisoryWarning, ElementContext, FileLocators, LocatorRecord, RawMatch
from .script_scanner import find_script_matches, markup_in_strings
from .selector_rules import (
    RULE_ORDER,
    RULES_BY_ATTRIBUTE,
    ResolvedValue,
    resolve_bound_value,
    resolve_static_value,
)

LOGGER = logging.getLogger("locatorscan.scan")

TEMPLATE_SUFFIXES = frozenset({".vue", ".html", ".htm"})
SCRIPT_SUFFIXES = frozenset({".js", ".ts", ".jsx", ".tsx", ".mjs", ".cjs"})

BUILTIN_COMPONENTS = frozenset(
    {
        "template",
        "slot",
        "component",
        "transition",
        "transition-group",
        "keep-alive",
        "teleport",
        "suspense",
        "router-view",
        "router-link",
    }
)
_CUSTOM_COMPONENT_TAG = re.compile(r"<(?P<tag>[A-Z][A-Za-z0-9]*|[a-z][a-z0-9]*(?:-[a-z0-9]+)+)(?=[\s/>])")
_SPREAD_BINDING = re.compile(r"\sv-bind\s*=\s*[\"']")
_SCRIPT_BLOCK = re.compile(r"<script\b[^>]*>(?P<body>.*?)</script\s*>", re.DOTALL | re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class _Candidate:
    raw: RawMatch
    context: ElementContext
    is_dynamic: bool
    is_conditional: bool


@dataclass(slots=True)
class _FileState:
    relative_path: str
    records: list[LocatorRecord] = field(default_factory=list)
    keys: KeyRegistry = field(default_factory=KeyRegistry)
    dropped_low_relevance: int = 0
    dropped_unresolvable: int = 0


def extract_file_locators(
    relative_path: str,
    source: str,
    constants: Mapping[str, str] | None = None,
) -> FileLocators:
    suffix = PurePosixPath(relative_path).suffix.lower()
    if suffix in TEMPLATE_SUFFIXES:
        candidates = _template_candidates(source, embedded_blocks=True)
        candidates.extend(_script_candidates(script_block_text(source)))
        advisories = find_advisories(relative_path, template_body(source, embedded_blocks=True))
    elif suffix in SCRIPT_SUFFIXES:
        candidates = _script_candidates(source)
        candidates.extend(_template_candidates(markup_in_strings(source)))
        advisories = []
    else:
        return FileLocators(relative_path=relative_path)

    candidates.sort(key=lambda item: (item.raw.position, RULE_ORDER.get(item.raw.attribute, 0)))
    state = _FileState(relative_path=relative_path)
    for candidate in candidates:
        _accept(state, candidate, source, constants)

    return FileLocators(
        relative_path=relative_path,
        records=tuple(state.records),
        advisories=tuple(advisories),
        dropped_low_relevance=state.dropped_low_relevance,
        dropped_unresolvable=state.dropped_unresolvable,
    )


def find_advisories(relative_path: str, body: str) -> list[AdvisoryWarning]:
    advisories: list[AdvisoryWarning] = []
    seen: set[str] = set()
    for match in _CUSTOM_COMPONENT_TAG.finditer(body):
        tag = match.group("tag")
        if tag.lower() in BUILTIN_COMPONENTS or tag in seen:
            continue
        seen.add(tag)
        advisories.append(
            AdvisoryWarning(
                file=relative_path,
                line=line_of(body, match.start()),
                construct=f"<{tag}>",
                message="custom component; locators inside its own template are not visible here",
            )
        )
    for match in _SPREAD_BINDING.finditer(body):
        advisories.append(
            AdvisoryWarning(
                file=relative_path,
                line=line_of(body, match.start()),
                construct="v-bind",
                message="object spread binding; attributes it sets cannot be extracted",
            )
        )
    advisories.sort(key=lambda item: (item.line, item.construct))
    return advisories


def _template_candidates(text: str, *, embedded_blocks: bool = False) -> list[_Candidate]:
    body = template_body(text, embedded_blocks=embedded_blocks)
    resolver = ElementContextResolver(body)
    candidates: list[_Candidate] = []
    for raw in find_attribute_matches(body, tags=resolver.index):
        context = resolver.resolve(raw.position)
        flags = detect_for_context(context)
        candidates.append(
            _Candidate(
                raw=raw,
                context=context,
                is_dynamic=flags.is_dynamic or raw.bound,
                is_conditional=flags.is_conditional,
            )
        )
    return candidates


def _script_candidates(text: str) -> list[_Candidate]:
    candidates: list[_Candidate] = []
    for match in find_script_matches(text):
        context = ElementContext(tag=match.tag, attributes=_script_attributes(match.attributes))
        candidates.append(_Candidate(raw=match.raw, context=context, is_dynamic=match.in_loop, is_conditional=False))
    return candidates


def _script_attributes(attributes: Mapping[str, str]) -> dict[str, str]:
    resolved: dict[str, str] = {}
    for name, expression in attributes.items():
        value = resolve_bound_value(expression)
        if value is not None:
            resolved[name] = value.value
    return resolved


def script_block_text(source: str) -> str:
    return keep_only(source, (match.span("body") for match in _SCRIPT_BLOCK.finditer(source)))


def _has_usable_stable_attribute(context: ElementContext, constants: Mapping[str, str] | None) -> bool:
    for name in ROBUST_ATTRS:
        static = context.attributes.get(name)
        if static and resolve_static_value(static) is not None:
            return True
        for bound_name in (f":{name}", f"v-bind:{name}"):
            bound = context.attributes.get(bound_name)
            if bound and resolve_bound_value(bound, constants) is not None:
                return True
    return False


def _resolve(candidate: _Candidate, constants: Mapping[str, str] | None) -> ResolvedValue | None:
    if candidate.raw.bound:
        return resolve_bound_value(candidate.raw.value, constants)
    return resolve_static_value(candidate.raw.value)


def _accept(state: _FileState, candidate: _Candidate, source: str, constants: Mapping[str, str] | None) -> None:
    raw = candidate.raw
    line = line_of(source, raw.position)
    if raw.locator_type == "class" and _has_usable_stable_attribute(candidate.context, constants):
        return

    resolved = _resolve(candidate, constants)
    selector = None
    if resolved is not None:
        selector = RULES_BY_ATTRIBUTE[raw.attribute].build_selector(resolved.value, resolved.partial)
    if resolved is None or selector is None:
        state.dropped_unresolvable += 1
        LOGGER.debug("%s:%s dropped unresolvable %s value %r", state.relative_path, line, raw.attribute, raw.value)
        return

    is_dynamic = candidate.is_dynamic or resolved.partial
    is_conditional = candidate.is_conditional
    robustness, relevance = classify(candidate.context.tag, candidate.context.attributes)
    if not should_keep(relevance, is_dynamic=is_dynamic, is_conditional=is_conditional):
        state.dropped_low_relevance += 1
        return

    key = state.keys.claim(make_key(resolved.value, raw.locator_type, is_dynamic, is_conditional))
    state.records.append(
        LocatorRecord(
            key=key,
            selector=selector,
            locator_type=raw.locator_type,
            element=candidate.context.tag or "element",
            raw_value=resolved.value,
            robustness=robustness,
            test_relevance=relevance,
            is_dynamic=is_dynamic,
            is_conditional=is_conditional,
            warning=build_warning(robustness, relevance, candidate.context, raw.locator_type, resolved.value),
            partial=resolved.partial,
            line=line,
        )
    )
