"""Style model captures Word style definitions in a normalized form."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from docx_flow.model.elements import NumberingReference


@dataclass(slots=True)
class SubStyle:
    """Declarations applying to one target kind (``p``, ``span``, ``td`` ...)."""

    target: str
    values: Dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class ParagraphStyleProperties:
    """Paragraph-level style properties the cascade needs to inspect."""

    numbering: Optional[NumberingReference] = None
    page_break_before: bool = False


@dataclass(slots=True, eq=False)
class StyleDefinition:
    """Style information, resolved in place by :class:`StyleResolver`.

    ``style_id`` is ``None`` for anonymous inline formatting that only
    receives the aggregated document defaults.
    """

    style_id: Optional[str]
    target: Optional[str] = None
    name: Optional[str] = None
    styles: List[SubStyle] = field(default_factory=list)
    based_on: Optional[str] = None
    linked: Optional[str] = None
    is_default: bool = False
    paragraph_props: ParagraphStyleProperties = field(default_factory=ParagraphStyleProperties)
    css_name: Optional[str] = None
    resolved: bool = False

    def sub_style(self, target: str) -> Optional[SubStyle]:
        """Return the first sub-style declared for ``target``."""
        for sub in self.styles:
            if sub.target == target:
                return sub
        return None


@dataclass(slots=True)
class ThemeFonts:
    """Latin typefaces of the document theme plus its color scheme."""

    major_latin: Optional[str] = None
    minor_latin: Optional[str] = None
    colors: Dict[str, str] = field(default_factory=dict)


class StylesCatalog:
    """Collection of resolved styles keyed by identifier."""

    def __init__(self, styles: Mapping[str, StyleDefinition], ordered: Optional[List[StyleDefinition]] = None):
        self._styles = dict(styles)
        self._ordered = list(ordered) if ordered is not None else list(self._styles.values())

    def get(self, style_id: Optional[str]) -> Optional[StyleDefinition]:
        """Return the resolved style definition given its identifier."""
        if style_id is None:
            return None
        return self._styles.get(style_id)

    def all(self) -> Mapping[str, StyleDefinition]:
        """Return read-only view of resolved styles."""
        return dict(self._styles)

    def ordered(self) -> List[StyleDefinition]:
        """Every style, anonymous ones included, in declaration order."""
        return list(self._ordered)

    def default_for(self, target: str) -> Optional[StyleDefinition]:
        """Return the default style for the given target kind if defined."""
        for style in self._ordered:
            if style.target == target and style.is_default:
                return style
        return None

    def __contains__(self, style_id: object) -> bool:
        return style_id in self._styles

    def __len__(self) -> int:
        return len(self._styles)
