from __future__ import annotations

import re
from bisect import bisect_right
from dataclasses import dataclass

from .models import ElementContext, ParentContext

LOOP_DIRECTIVES = frozenset({"v-for"})
CONDITIONAL_DIRECTIVES = frozenset({"v-if", "v-else-if", "v-else", "v-show"})
STRUCTURAL_DIRECTIVES = LOOP_DIRECTIVES | CONDITIONAL_DIRECTIVES

VOID_ELEMENTS = frozenset(
    {"area", "base", "br", "col", "embed", "hr", "img", "input", "link", "meta", "source", "track", "wbr"}
)

_TAG_NAME = re.compile(r"^<\s*(?P<name>[A-Za-z][\w.:-]*)")
_ATTRIBUTE = re.compile(
    r"(?P<name>(?:v-bind:|v-on:|[:@#])?[A-Za-z_][\w.:@#-]*)"
    r"(?:\s*=\s*(?:\"(?P<dq>[^\"]*)\"|'(?P<sq>[^']*)'|(?P<bare>[^\s\"'>/=]+)))?",
    re.DOTALL,
)
_TAG_TOKEN = re.compile(
    r"<(?P<close>/)?(?P<name>[A-Za-z][\w.:-]*)(?P<attrs>(?:[^<>\"']|\"[^\"]*\"|'[^']*')*?)(?P<self>/)?\s*>",
    re.DOTALL,
)


def parse_attributes(tag_source: str) -> dict[str, str]:
    name_match = _TAG_NAME.match(tag_source)
    body = tag_source[name_match.end() :] if name_match else tag_source
    body = body.rstrip(">").rstrip("/")

    attributes: dict[str, str] = {}
    for match in _ATTRIBUTE.finditer(body):
        name = match.group("name").lower()
        value = match.group("dq")
        if value is None:
            value = match.group("sq")
        if value is None:
            value = match.group("bare")
        attributes.setdefault(name, value or "")
    return attributes


def structural_directives(attributes: dict[str, str]) -> frozenset[str]:
    return frozenset(name for name in attributes if name in STRUCTURAL_DIRECTIVES)


@dataclass(frozen=True, slots=True)
class TagToken:
    start: int
    end: int
    name: str
    closing: bool
    self_closing: bool
    attributes: dict[str, str]
    value_spans: tuple[tuple[int, int], ...] = ()

    @property
    def directives(self) -> frozenset[str]:
        return structural_directives(self.attributes)

    def in_attribute_value(self, offset: int) -> bool:
        return any(start <= offset < end for start, end in self.value_spans)


def tokenize_tags(text: str) -> list[TagToken]:
    """Opening and closing tags in document order; ``<`` and ``>`` inside quoted values stay in the tag."""
    tokens: list[TagToken] = []
    for match in _TAG_TOKEN.finditer(text):
        name = match.group("name")
        attrs = match.group("attrs") or ""
        attrs_start = match.start("attrs")
        spans: list[tuple[int, int]] = []
        for attribute in _ATTRIBUTE.finditer(attrs):
            for group in ("dq", "sq"):
                if attribute.group(group) is not None:
                    start, end = attribute.span(group)
                    spans.append((attrs_start + start, attrs_start + end))
        tokens.append(
            TagToken(
                start=match.start(),
                end=match.end(),
                name=name,
                closing=bool(match.group("close")),
                self_closing=bool(match.group("self")),
                attributes=parse_attributes(f"<{name}{attrs}>"),
                value_spans=tuple(spans),
            )
        )
    return tokens


class TagIndex:
    """Tag tokens of one text, searchable by offset."""

    def __init__(self, text: str) -> None:
        self.tokens = tokenize_tags(text)
        self._starts = [token.start for token in self.tokens]

    def opening_tag_at(self, offset: int) -> TagToken | None:
        index = bisect_right(self._starts, offset) - 1
        if index < 0:
            return None
        token = self.tokens[index]
        if token.closing or not token.start < offset < token.end:
            return None
        return token

    def in_attribute_region(self, offset: int) -> bool:
        token = self.opening_tag_at(offset)
        return token is not None and not token.in_attribute_value(offset)


class ElementContextResolver:
    """Recovers the enclosing tag, its attributes and directive-bearing ancestors for an offset."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.index = TagIndex(text)

    def resolve(self, offset: int) -> ElementContext:
        token = self.index.opening_tag_at(offset)
        if token is None:
            return ElementContext(tag="element")
        return ElementContext(
            tag=token.name,
            attributes=token.attributes,
            parent=self.parent_context(token.start),
        )

    def parent_context(self, tag_start: int) -> ParentContext | None:
        carriers = [token for token in self.ancestors(tag_start) if token.directives]
        if not carriers:
            return None
        directives: set[str] = set()
        for token in carriers:
            directives.update(token.directives)
        return ParentContext(tag=carriers[-1].name.lower(), directives=frozenset(directives))

    def ancestors(self, tag_start: int) -> list[TagToken]:
        stack: list[TagToken] = []
        for token in self.index.tokens:
            if token.start >= tag_start:
                break
            name = token.name.lower()
            if token.closing:
                for index in range(len(stack) - 1, -1, -1):
                    if stack[index].name.lower() == name:
                        del stack[index:]
                        break
                continue
            if token.self_closing or name in VOID_ELEMENTS:
                continue
            stack.append(token)
        return stack
