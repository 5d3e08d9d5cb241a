from __future__ import annotations

import re
from typing import Mapping

from .models import ElementContext, Robustness, TestRelevance
from .selector_rules import TEST_ATTR_PRIORITY, TEST_ID_ATTRS

ROBUST_ATTRS: tuple[str, ...] = (
    *TEST_ID_ATTRS,
    *TEST_ATTR_PRIORITY,
    "id",
    "name",
    "role",
    "aria-label",
    "placeholder",
)

HIGH_RELEVANCE_TAGS = frozenset({"button", "input", "textarea", "select", "a", "form"})
MEDIUM_RELEVANCE_TAGS = frozenset(
    {
        "h1",
        "h2",
        "h3",
        "h4",
        "h5",
        "h6",
        "table",
        "tr",
        "td",
        "th",
        "thead",
        "tbody",
        "label",
        "option",
        "ul",
        "ol",
        "li",
        "nav",
        "dialog",
        "img",
        "p",
        "span",
        "details",
        "summary",
        "fieldset",
    }
)
DECORATIVE_CLASS_KEYWORDS = ("icon", "decoration", "separator", "spacer", "divider")

_INTERACTIVE_XPATH_PATTERNS = (
    re.compile(r"//input\b", re.IGNORECASE),
    re.compile(r"//button\b", re.IGNORECASE),
    re.compile(r"text\(\)", re.IGNORECASE),
    re.compile(r"normalize-space\(", re.IGNORECASE),
)


def _attr(attributes: Mapping[str, str], name: str) -> str:
    for key in (name, f":{name}", f"v-bind:{name}"):
        raw = attributes.get(key)
        if raw and raw.strip():
            return raw.strip()
    return ""


def has_stable_attribute(attributes: Mapping[str, str]) -> bool:
    return any(_attr(attributes, name) for name in ROBUST_ATTRS)


def has_interactive_hint(attributes: Mapping[str, str]) -> bool:
    xpath = _attr(attributes, "data-xpath") or _attr(attributes, "xpath")
    if xpath:
        if "btn" in xpath.lower():
            return True
        if any(pattern.search(xpath) for pattern in _INTERACTIVE_XPATH_PATTERNS):
            return True
    class_value = _attr(attributes, "class")
    return "btn" in class_value.lower()


def is_decorative(attributes: Mapping[str, str]) -> bool:
    class_value = _attr(attributes, "class").lower()
    return any(keyword in class_value for keyword in DECORATIVE_CLASS_KEYWORDS)


def classify_robustness(attributes: Mapping[str, str]) -> Robustness:
    if has_stable_attribute(attributes) or has_interactive_hint(attributes):
        return "robust"
    return "fragile"


def classify_relevance(element: str, attributes: Mapping[str, str]) -> TestRelevance:
    if is_decorative(attributes):
        return "low"
    tag = (element or "").strip().lower()
    if tag in HIGH_RELEVANCE_TAGS:
        return "high"
    if tag in MEDIUM_RELEVANCE_TAGS:
        return "medium"
    if has_stable_attribute(attributes):
        return "medium"
    return "low"


def classify(element: str, attributes: Mapping[str, str]) -> tuple[Robustness, TestRelevance]:
    return classify_robustness(attributes), classify_relevance(element, attributes)


def should_keep(relevance: TestRelevance, *, is_dynamic: bool, is_conditional: bool) -> bool:
    return relevance != "low" or is_dynamic or is_conditional


def build_warning(
    robustness: Robustness,
    relevance: TestRelevance,
    context: ElementContext,
    locator_type: str,
    raw_value: str,
) -> str | None:
    if robustness == "fragile" and relevance == "high":
        tag = context.tag or "element"
        suggestion = re.sub(r"[^a-z0-9]+", "-", raw_value.lower()).strip("-") or tag.lower()
        return f'Add data-testid="{suggestion}" to <{tag}> instead of relying on {locator_type} "{raw_value}".'
    return None
