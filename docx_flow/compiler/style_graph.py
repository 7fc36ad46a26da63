"""Directed graph of named styles and their ``basedOn`` edges."""
from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional

from docx_flow.model.style_model import StyleDefinition


class StyleCycleError(ValueError):
    """A ``basedOn`` chain loops back onto itself."""

    def __init__(self, style_id: str, cycle: List[str]):
        self.style_id = style_id
        self.cycle = cycle
        super().__init__(f"Cyclic basedOn chain at {style_id!r}: {' -> '.join(cycle)}")


class StyleGraph:
    """Index of named styles with parent lookups.

    Anonymous styles (``style_id is None``) are not part of the graph; they
    only receive the document defaults.
    """

    def __init__(self, styles: Iterable[StyleDefinition]) -> None:
        self._nodes: Dict[str, StyleDefinition] = {}
        for style in styles:
            if style.style_id is not None:
                self._nodes[style.style_id] = style

    def __contains__(self, style_id: object) -> bool:
        return style_id in self._nodes

    def __iter__(self) -> Iterator[StyleDefinition]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)

    def get(self, style_id: Optional[str]) -> Optional[StyleDefinition]:
        if style_id is None:
            return None
        return self._nodes.get(style_id)

    def parent(self, style: StyleDefinition) -> Optional[StyleDefinition]:
        """Return the ``basedOn`` parent, or ``None`` when absent or unknown."""
        return self.get(style.based_on)

    def as_dict(self) -> Dict[str, StyleDefinition]:
        return dict(self._nodes)

    def unresolved_chain(self, style: StyleDefinition) -> List[StyleDefinition]:
        """Return ``style`` and its unresolved ancestors, child first.

        The walk stops at the first resolved or missing parent. Raises
        :class:`StyleCycleError` when the chain revisits a style.
        """
        chain: List[StyleDefinition] = []
        visiting: Dict[str, int] = {}
        current: Optional[StyleDefinition] = style
        while current is not None and not current.resolved:
            style_id = current.style_id or ""
            if style_id in visiting:
                cycle = [item.style_id or "" for item in chain[visiting[style_id]:]]
                raise StyleCycleError(style_id, cycle + [style_id])
            visiting[style_id] = len(chain)
            chain.append(current)
            current = self.parent(current)
        return chain
