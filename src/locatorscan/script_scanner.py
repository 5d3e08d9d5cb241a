from __future__ import annotations

import re
from dataclasses import dataclass, field

from .attribute_matcher import blank_out, keep_only
from .models import LocatorType, RawMatch
from .selector_rules import ATTRIBUTE_RULES

_ATTRIBUTE_TYPES: dict[str, LocatorType] = {rule.attribute: rule.locator_type for rule in ATTRIBUTE_RULES}
_PROPERTY_ATTRIBUTES = {"id": "id", "className": "class", "class": "class"}

_JS_VALUE = r"(?P<value>'(?:\\.|[^'\\])*'|\"(?:\\.|[^\"\\])*\"|`(?:\\.|[^`\\])*`|[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*)"

_SET_ATTRIBUTE = re.compile(
    r"(?P<target>[A-Za-z_$][\w$]*)\.setAttribute\(\s*(?P<q>['\"])(?P<attr>[\w-]+)(?P=q)\s*,\s*" + _JS_VALUE + r"\s*\)"
)
_PROPERTY_ASSIGNMENT = re.compile(
    r"(?P<target>[A-Za-z_$][\w$]*)\.(?P<prop>id|className)\s*=(?!=)\s*" + _JS_VALUE
)
_OBJECT_PROPERTY = re.compile(
    r"(?<![\w$.])(?P<key>'[\w-]+'|\"[\w-]+\"|id|class|className|role|name|placeholder)\s*:\s*" + _JS_VALUE
)
_CREATE_ELEMENT = re.compile(
    r"(?:(?:const|let|var)\s+(?P<target>[A-Za-z_$][\w$]*)\s*(?::\s*[\w<>]+)?\s*=\s*)?"
    r"document\.createElement\(\s*['\"](?P<tag>[\w-]+)['\"]\s*\)"
)
_RENDER_CALL = re.compile(r"\bh\(\s*(?P<q>['\"])(?P<tag>[\w-]+)(?P=q)\s*,\s*\{")
_LOOP_CALL = re.compile(r"\.(?:forEach|map|flatMap)\s*\(")
_TEMPLATE_STRING = re.compile(r"`(?:\\.|[^`\\])*`", re.DOTALL)
_MARKUP_HINT = re.compile(r"<[A-Za-z][\w-]*[\s>/]")
_SCRIPT_COMMENT = re.compile(r"/\*.*?\*/|(?:^|(?<=\s))//[^\n]*", re.DOTALL | re.MULTILINE)


@dataclass(frozen=True, slots=True)
class ScriptMatch:
    raw: RawMatch
    tag: str
    in_loop: bool
    attributes: dict[str, str] = field(default_factory=dict)


def markup_in_strings(source: str) -> str:
    """Blank everything except template literals that contain markup."""
    keep = [
        (match.start() + 1, match.end() - 1)
        for match in _TEMPLATE_STRING.finditer(source)
        if _MARKUP_HINT.search(match.group(0))
    ]
    return keep_only(source, keep)


def strip_script_comments(source: str) -> str:
    return blank_out(source, (match.span() for match in _SCRIPT_COMMENT.finditer(source)))


def find_script_matches(source: str) -> list[ScriptMatch]:
    text = strip_script_comments(source)
    created = _created_elements(text)
    target_attributes = _attributes_by_target(text)

    matches: list[ScriptMatch] = []
    for match in _SET_ATTRIBUTE.finditer(text):
        attr = match.group("attr").lower()
        locator_type = _ATTRIBUTE_TYPES.get(attr)
        if locator_type is None:
            continue
        target = match.group("target")
        matches.append(
            ScriptMatch(
                raw=_raw(match, locator_type, attr),
                tag=_tag_for_target(created, target, match.start()),
                in_loop=inside_loop_callback(text, match.start()),
                attributes=dict(target_attributes.get(target, {})),
            )
        )

    for match in _PROPERTY_ASSIGNMENT.finditer(text):
        attr = _PROPERTY_ATTRIBUTES[match.group("prop")]
        target = match.group("target")
        matches.append(
            ScriptMatch(
                raw=_raw(match, _ATTRIBUTE_TYPES[attr], attr),
                tag=_tag_for_target(created, target, match.start()),
                in_loop=inside_loop_callback(text, match.start()),
                attributes=dict(target_attributes.get(target, {})),
            )
        )

    for match in _OBJECT_PROPERTY.finditer(text):
        key = match.group("key")
        quoted = key[0] in {"'", '"'}
        attr = _PROPERTY_ATTRIBUTES.get(key.strip("'\""), key.strip("'\"").lower())
        locator_type = _ATTRIBUTE_TYPES.get(attr)
        if locator_type is None:
            continue
        call = enclosing_render_call(text, match.start())
        if call is None and not quoted:
            continue
        tag, props_start = call if call else ("element", -1)
        matches.append(
            ScriptMatch(
                raw=_raw(match, locator_type, attr),
                tag=tag,
                in_loop=inside_loop_callback(text, match.start()),
                attributes=_render_props(text, props_start) if props_start >= 0 else {attr: match.group("value")},
            )
        )

    matches.sort(key=lambda item: item.raw.position)
    return matches


def inside_loop_callback(text: str, position: int, lookback: int = 20) -> bool:
    candidates = [match for match in _LOOP_CALL.finditer(text, 0, position)][-lookback:]
    for match in reversed(candidates):
        if _still_open(text, match.end(), position, "(", ")"):
            return True
    return False


def enclosing_render_call(text: str, position: int) -> tuple[str, int] | None:
    calls = list(_RENDER_CALL.finditer(text, 0, position))
    for match in reversed(calls):
        brace = match.end() - 1
        if _depth_between(text, brace + 1, position, "{", "}") == 0 and _still_open(text, brace + 1, position, "{", "}"):
            return match.group("tag"), brace
    return None


def _render_props(text: str, brace: int) -> dict[str, str]:
    end = brace + 1
    depth = 1
    while end < len(text) and depth > 0:
        if text[end] == "{":
            depth += 1
        elif text[end] == "}":
            depth -= 1
        end += 1
    props: dict[str, str] = {}
    for match in _OBJECT_PROPERTY.finditer(text, brace + 1, end):
        if _depth_between(text, brace + 1, match.start(), "{", "}") != 0:
            continue
        key = match.group("key").strip("'\"")
        props.setdefault(_PROPERTY_ATTRIBUTES.get(key, key.lower()), match.group("value"))
    return props


def _still_open(text: str, start: int, end: int, opener: str, closer: str) -> bool:
    depth = 1
    for index in range(start, end):
        char = text[index]
        if char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
            if depth == 0:
                return False
    return True


def _depth_between(text: str, start: int, end: int, opener: str, closer: str) -> int:
    depth = 0
    for index in range(start, end):
        char = text[index]
        if char == opener:
            depth += 1
        elif char == closer:
            depth -= 1
    return depth


def _created_elements(text: str) -> list[tuple[int, str | None, str]]:
    return [(match.start(), match.group("target"), match.group("tag")) for match in _CREATE_ELEMENT.finditer(text)]


def _tag_for_target(created: list[tuple[int, str | None, str]], target: str, position: int) -> str:
    preceding = [item for item in created if item[0] < position]
    for _, name, tag in reversed(preceding):
        if name == target:
            return tag
    if preceding:
        return preceding[-1][2]
    return "element"


def _attributes_by_target(text: str) -> dict[str, dict[str, str]]:
    grouped: dict[str, dict[str, str]] = {}
    for match in _SET_ATTRIBUTE.finditer(text):
        grouped.setdefault(match.group("target"), {}).setdefault(match.group("attr").lower(), match.group("value"))
    for match in _PROPERTY_ASSIGNMENT.finditer(text):
        attr = _PROPERTY_ATTRIBUTES[match.group("prop")]
        grouped.setdefault(match.group("target"), {}).setdefault(attr, match.group("value"))
    return grouped


def _raw(match: re.Match[str], locator_type: LocatorType, attr: str) -> RawMatch:
    return RawMatch(
        value=match.group("value"),
        locator_type=locator_type,
        position=match.start("value"),
        attribute=attr,
        bound=True,
    )
