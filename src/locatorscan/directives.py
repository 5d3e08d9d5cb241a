from __future__ import annotations

from typing import Iterable

from .element_context import CONDITIONAL_DIRECTIVES, LOOP_DIRECTIVES, structural_directives
from .models import DirectiveFlags, ElementContext


def detect(directives: Iterable[str]) -> DirectiveFlags:
    present = {name.lower() for name in directives}
    return DirectiveFlags(
        is_dynamic=not present.isdisjoint(LOOP_DIRECTIVES),
        is_conditional=not present.isdisjoint(CONDITIONAL_DIRECTIVES),
    )


def detect_for_context(context: ElementContext) -> DirectiveFlags:
    directives = set(structural_directives(context.attributes))
    if context.parent is not None:
        directives.update(context.parent.directives)
    return detect(directives)
