"""Aggregate model of an already deserialized document package."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from docx_flow.model.elements import (
    ContentElement,
    DocumentElement,
    FootnoteElement,
    Section,
)
from docx_flow.model.numbering_model import NumberingLevel, NumberingStylesheet
from docx_flow.model.style_model import StyleDefinition, StylesCatalog, ThemeFonts


@dataclass(slots=True)
class EmbeddedFontRef:
    """Obfuscated font binary referenced from the font table."""

    rel_id: str
    key: str
    kind: str = "regular"


@dataclass(slots=True)
class FontDefinition:
    name: str
    embed_refs: List[EmbeddedFontRef] = field(default_factory=list)


@dataclass(slots=True)
class WordDocument:
    """Everything the flow compiler consumes, as produced by a package loader.

    ``parts`` maps relationship ids of the main document part to header and
    footer trees.
    """

    body: DocumentElement
    styles: List[StyleDefinition] = field(default_factory=list)
    theme: Optional[ThemeFonts] = None
    numberings: List[NumberingLevel] = field(default_factory=list)
    footnotes: List[FootnoteElement] = field(default_factory=list)
    fonts: List[FontDefinition] = field(default_factory=list)
    parts: Dict[str, ContentElement] = field(default_factory=dict)

    def find_part(self, rel_id: Optional[str]) -> Optional[ContentElement]:
        if rel_id is None:
            return None
        return self.parts.get(rel_id)


@dataclass(slots=True)
class FlowModel:
    """Compiled cascade: resolved styles, numbering CSS and split sections."""

    styles: StylesCatalog
    numbering: NumberingStylesheet
    sections: List[Section]
    metadata: Optional[dict] = None
