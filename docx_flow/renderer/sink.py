"""Structured output handed to a painting surface."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Protocol

TEXT_NODE = "#text"


@dataclass(slots=True, eq=False)
class NodeDescription:
    """Abstract element: tag, attributes, inline style and children."""

    tag: str
    attributes: Dict[str, str] = field(default_factory=dict)
    style: Dict[str, str] = field(default_factory=dict)
    children: List["NodeDescription"] = field(default_factory=list)
    text: Optional[str] = None

    @classmethod
    def text_node(cls, text: str) -> "NodeDescription":
        return cls(TEXT_NODE, text=text)

    @property
    def class_name(self) -> Optional[str]:
        return self.attributes.get("class")

    def iter(self):
        """Yield this node and all its descendants depth first."""
        yield self
        for child in self.children:
            yield from child.iter()

    def text_content(self) -> str:
        if self.tag == TEXT_NODE:
            return self.text or ""
        return "".join(child.text_content() for child in self.children)


class RenderSink(Protocol):
    """Receiver of the generated style sheet, sections and resource patches."""

    def add_stylesheet(self, css_text: str, comment: Optional[str] = None) -> None:
        ...

    def add_body(self, node: NodeDescription) -> None:
        ...

    def update_rule(self, key: str, css_text: str) -> None:
        """Apply a patch rule emitted after a deferred resource resolved."""

    def update_node(self, node: NodeDescription, attributes: Dict[str, str]) -> None:
        """Set attributes on an already emitted node (e.g. image ``src``)."""
