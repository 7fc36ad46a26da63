"""Apply style rules directly to node ``style`` maps instead of a style block.

Only the selector subset the compilers emit is understood: type and class
compounds joined by descendant or ``>`` combinators. Pseudo-elements and
at-rules cannot be inlined and are skipped.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Tuple

from docx_flow.model.numbering_model import CssRule
from docx_flow.renderer.sink import TEXT_NODE, NodeDescription
from docx_flow.utils.logger import get_logger

LOGGER = get_logger(__name__)

_COMPOUND = re.compile(r"^([a-zA-Z][\w-]*)?((?:\.[\w-]+)*)$")

Ancestors = Tuple[NodeDescription, ...]


@dataclass(frozen=True, slots=True)
class CompoundSelector:
    """``tag.class1.class2``; ``combinator`` relates it to the compound on its left."""

    tag: Optional[str]
    classes: FrozenSet[str]
    combinator: str = " "

    def matches(self, node: NodeDescription) -> bool:
        if self.tag is not None and node.tag.lower() != self.tag:
            return False
        return self.classes.issubset((node.class_name or "").split())


def parse_selector(selector: str) -> Optional[List[CompoundSelector]]:
    """Split a single selector into compounds, or ``None`` if unsupported."""
    tokens = selector.replace(">", " > ").split()
    compounds: List[CompoundSelector] = []
    combinator = " "
    for token in tokens:
        if token == ">":
            if not compounds or combinator == ">":
                return None
            combinator = ">"
            continue
        match = _COMPOUND.match(token)
        if match is None:
            return None
        tag = match.group(1).lower() if match.group(1) else None
        classes = frozenset(name for name in match.group(2).split(".") if name)
        compounds.append(CompoundSelector(tag, classes, combinator))
        combinator = " "
    if not compounds or combinator == ">":
        return None
    return compounds


def selector_matches(compounds: List[CompoundSelector], node: NodeDescription, ancestors: Ancestors) -> bool:
    """Match right to left against ``node`` and its ancestor chain."""
    return _match_from(compounds, len(compounds) - 1, node, ancestors)


def _match_from(compounds: List[CompoundSelector], index: int, node: NodeDescription, ancestors: Ancestors) -> bool:
    compound = compounds[index]
    if not compound.matches(node):
        return False
    if index == 0:
        return True
    if compound.combinator == ">":
        return bool(ancestors) and _match_from(compounds, index - 1, ancestors[-1], ancestors[:-1])
    for depth in range(len(ancestors) - 1, -1, -1):
        if _match_from(compounds, index - 1, ancestors[depth], ancestors[:depth]):
            return True
    return False


def _element_nodes(node: NodeDescription, ancestors: Ancestors = ()) -> Iterator[Tuple[NodeDescription, Ancestors]]:
    if node.tag == TEXT_NODE:
        return
    yield node, ancestors
    for child in node.children:
        yield from _element_nodes(child, ancestors + (node,))


def collect_declarations(rules: Iterable[CssRule]) -> Dict[str, Dict[str, str]]:
    """Group declarations by single selector; later rules overwrite earlier values."""
    result: Dict[str, Dict[str, str]] = {}
    for rule in rules:
        for selector in rule.selector.split(","):
            selector = selector.strip()
            if selector:
                result.setdefault(selector, {}).update(rule.declarations)
    return result


def apply_inline_styles(rules: Iterable[CssRule], roots: Iterable[NodeDescription]) -> None:
    """Copy rule declarations into the ``style`` of every matching node.

    Selectors matching fewer nodes are applied first and a property already
    present on a node is never replaced, so explicit element formatting and
    narrower selectors win over broad ones.
    """
    elements = [item for root in roots for item in _element_nodes(root)]
    changes: List[Tuple[int, List[NodeDescription], Dict[str, str]]] = []

    for selector, declarations in collect_declarations(rules).items():
        compounds = parse_selector(selector)
        if compounds is None:
            LOGGER.debug("Selector %s can't be applied inline, skipped", selector)
            continue
        matched = [node for node, ancestors in elements if selector_matches(compounds, node, ancestors)]
        if matched:
            changes.append((len(matched), matched, declarations))

    changes.sort(key=lambda change: change[0])
    for _, matched, declarations in changes:
        for node in matched:
            for key, value in declarations.items():
                node.style.setdefault(key, value)
