from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Mapping

from .models import LocatorType

TEST_ID_ATTRS = ("data-testid",)
TEST_ATTR_PRIORITY = (
    "data-test",
    "data-qa",
    "data-cy",
    "data-e2e",
)
XPATH_ATTRS = ("data-xpath", "xpath")

EXPRESSION_DELIMITERS = ("{{", "${")
_CLASS_FORBIDDEN_CHARS = set("{}$`")
_CSS_SAFE_ID_PATTERN = re.compile(r"^-?[A-Za-z_][A-Za-z0-9_-]*$")
_IDENTIFIER_PATH = re.compile(r"^[A-Za-z_$][\w$]*(?:\.[A-Za-z_$][\w$]*)*$")


@dataclass(frozen=True, slots=True)
class ResolvedValue:
    value: str
    partial: bool = False


SelectorBuilder = Callable[[str, bool], "str | None"]


@dataclass(frozen=True, slots=True)
class AttributeRule:
    locator_type: LocatorType
    attribute: str
    pattern: re.Pattern[str]
    build_selector: SelectorBuilder


def normalize_space(value: str | None, limit: int = 200) -> str:
    if not value:
        return ""
    compact = re.sub(r"\s+", " ", str(value)).strip()
    return compact[:limit] if compact else ""


def escape_css_attribute_value(value: str) -> str:
    return value.replace("\\", "\\\\").replace('"', '\\"')


def escape_css_identifier(value: str) -> str:
    escaped: list[str] = []
    for char in value:
        if char.isalnum() or char in ("-", "_"):
            escaped.append(char)
        else:
            escaped.append(f"\\{ord(char):x} ")
    return "".join(escaped)


def is_css_safe_id(value: str) -> bool:
    return bool(_CSS_SAFE_ID_PATTERN.fullmatch(value.strip()))


def has_expression_delimiter(value: str) -> bool:
    return any(delimiter in value for delimiter in EXPRESSION_DELIMITERS)


def attribute_selector(attr: str, value: str, partial: bool = False) -> str:
    operator = "^=" if partial else "="
    return f'[{attr}{operator}"{escape_css_attribute_value(value)}"]'


def _attribute_builder(attr: str) -> SelectorBuilder:
    def build(value: str, partial: bool) -> str | None:
        if not value or has_expression_delimiter(value):
            return None
        return attribute_selector(attr, value, partial)

    return build


def build_id_selector(value: str, partial: bool) -> str | None:
    if not value or has_expression_delimiter(value):
        return None
    if partial:
        return attribute_selector("id", value, partial=True)
    if is_css_safe_id(value):
        return f"#{value}"
    return attribute_selector("id", value)


def build_class_selector(value: str, partial: bool) -> str | None:
    if partial or has_expression_delimiter(value):
        return None
    if any(char in _CLASS_FORBIDDEN_CHARS for char in value):
        return None
    tokens = normalize_class_tokens(value)
    if not tokens:
        return None
    return "".join(f".{escape_css_identifier(token)}" for token in tokens)


def build_xpath_selector(value: str, partial: bool) -> str | None:
    if partial or has_expression_delimiter(value):
        return None
    stripped = value.strip()
    if not stripped.startswith(("/", "(", ".")):
        return None
    return stripped


def normalize_class_tokens(raw: str | None) -> list[str]:
    if not raw:
        return []
    seen: set[str] = set()
    tokens: list[str] = []
    for item in raw.split():
        clean = item.strip()
        if not clean or clean in seen:
            continue
        seen.add(clean)
        tokens.append(clean)
    return tokens


def _attribute_pattern(attr: str) -> re.Pattern[str]:
    # Static `attr="v"` plus the binding forms `:attr="v"` and `v-bind:attr="v"`.
    return re.compile(
        r"(?<![\w:.@#-])(?P<prefix>v-bind:|:)?"
        + re.escape(attr)
        + r"\s*=\s*(?P<quote>[\"'])(?P<value>.*?)(?P=quote)",
        re.DOTALL,
    )


def _rule(locator_type: LocatorType, attr: str, builder: SelectorBuilder) -> AttributeRule:
    return AttributeRule(
        locator_type=locator_type,
        attribute=attr,
        pattern=_attribute_pattern(attr),
        build_selector=builder,
    )


ATTRIBUTE_RULES: tuple[AttributeRule, ...] = (
    *(_rule("test-id", attr, _attribute_builder(attr)) for attr in TEST_ID_ATTRS),
    *(_rule("test-attr", attr, _attribute_builder(attr)) for attr in TEST_ATTR_PRIORITY),
    _rule("id", "id", build_id_selector),
    _rule("class", "class", build_class_selector),
    _rule("name", "name", _attribute_builder("name")),
    _rule("placeholder", "placeholder", _attribute_builder("placeholder")),
    _rule("aria-label", "aria-label", _attribute_builder("aria-label")),
    _rule("role", "role", _attribute_builder("role")),
    *(_rule("xpath", attr, build_xpath_selector) for attr in XPATH_ATTRS),
)

RULE_ORDER: dict[str, int] = {rule.attribute: index for index, rule in enumerate(ATTRIBUTE_RULES)}
RULES_BY_ATTRIBUTE: dict[str, AttributeRule] = {rule.attribute: rule for rule in ATTRIBUTE_RULES}


def resolve_static_value(raw: str) -> ResolvedValue | None:
    value = normalize_space(raw, limit=500)
    if not value:
        return None
    if not has_expression_delimiter(value):
        return ResolvedValue(value)
    return _partial_prefix(value)


def resolve_bound_value(expression: str, constants: Mapping[str, str] | None = None) -> ResolvedValue | None:
    text = expression.strip()
    if len(text) >= 2 and text[0] == text[-1] and text[0] in {"'", '"'}:
        inner = text[1:-1]
        if text[0] in inner:
            return None
        return resolve_static_value(inner)

    if len(text) >= 2 and text[0] == text[-1] == "`":
        inner = text[1:-1]
        if "`" in inner:
            return None
        if "${" not in inner:
            return resolve_static_value(inner)
        return _partial_prefix(inner)

    if constants and _IDENTIFIER_PATH.fullmatch(text):
        resolved = constants.get(text)
        if resolved is not None:
            return resolve_static_value(resolved)
    return None


def _partial_prefix(value: str) -> ResolvedValue | None:
    cut = min(value.find(delimiter) for delimiter in EXPRESSION_DELIMITERS if delimiter in value)
    prefix = value[:cut]
    if not prefix.strip():
        return None
    return ResolvedValue(prefix, partial=True)