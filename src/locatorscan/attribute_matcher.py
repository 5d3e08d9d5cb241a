from __future__ import annotations

import re
from typing import Iterable, Sequence

from .element_context import TagIndex
from .models import RawMatch
from .selector_rules import ATTRIBUTE_RULES, RULE_ORDER, AttributeRule

_HTML_COMMENT = re.compile(r"<!--.*?-->", re.DOTALL)
_EMBEDDED_BLOCK = re.compile(r"<(script|style)\b[^>]*>.*?</\1\s*>", re.DOTALL | re.IGNORECASE)


def blank_out(text: str, spans: Iterable[tuple[int, int]]) -> str:
    """Replace each span with spaces, keeping newlines so offsets and line numbers survive."""
    chars = list(text)
    for start, end in spans:
        for index in range(start, end):
            if chars[index] != "\n":
                chars[index] = " "
    return "".join(chars)


def keep_only(text: str, keep: Iterable[tuple[int, int]]) -> str:
    spans: list[tuple[int, int]] = []
    cursor = 0
    for start, end in sorted(keep):
        spans.append((cursor, start))
        cursor = end
    spans.append((cursor, len(text)))
    return blank_out(text, spans)


def strip_comments(text: str) -> str:
    return blank_out(text, (match.span() for match in _HTML_COMMENT.finditer(text)))


def template_body(text: str, *, embedded_blocks: bool = False) -> str:
    """Return the markup that should be matched, same length as ``text``."""
    body = strip_comments(text)
    if embedded_blocks:
        body = blank_out(body, (match.span() for match in _EMBEDDED_BLOCK.finditer(body)))
    return body


def find_attribute_matches(
    body: str,
    rules: Sequence[AttributeRule] = ATTRIBUTE_RULES,
    tags: TagIndex | None = None,
) -> list[RawMatch]:
    """Attribute occurrences that sit in an opening tag's attribute list, never inside another value."""
    if tags is None:
        tags = TagIndex(body)
    matches: list[RawMatch] = []
    for rule in rules:
        for match in rule.pattern.finditer(body):
            if not tags.in_attribute_region(match.start()):
                continue
            matches.append(
                RawMatch(
                    value=match.group("value"),
                    locator_type=rule.locator_type,
                    position=match.start("value"),
                    attribute=rule.attribute,
                    bound=bool(match.group("prefix")),
                )
            )
    matches.sort(key=lambda item: (item.position, RULE_ORDER.get(item.attribute, 0)))
    return matches


def line_of(text: str, position: int) -> int:
    return text.count("\n", 0, position) + 1
