"""In-memory representation of parsed document content and section layout."""
from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, Iterable, List, Optional

from docx_flow.utils.units import Length


class DomType(str, Enum):
    """Kinds of content elements found in a document body."""

    DOCUMENT = "document"
    PARAGRAPH = "paragraph"
    RUN = "run"
    BREAK = "break"
    NO_BREAK_HYPHEN = "noBreakHyphen"
    TABLE = "table"
    ROW = "row"
    CELL = "cell"
    HYPERLINK = "hyperlink"
    DRAWING = "drawing"
    IMAGE = "image"
    TEXT = "text"
    TAB = "tab"
    SYMBOL = "symbol"
    BOOKMARK_START = "bookmarkStart"
    BOOKMARK_END = "bookmarkEnd"
    FOOTER = "footer"
    HEADER = "header"
    FOOTNOTE = "footnote"
    FOOTNOTE_REFERENCE = "footnoteReference"


@dataclass(slots=True, weakref_slot=True, eq=False)
class ContentElement:
    """Base node of the content tree.

    Children are owned and ordered. The parent link is a weak reference used
    only for upward lookups such as :func:`find_parent`.
    """

    dom_type: ClassVar[DomType]

    children: List["ContentElement"] = field(default_factory=list)
    style_name: Optional[str] = None
    class_name: Optional[str] = None
    css_style: Dict[str, str] = field(default_factory=dict)
    parent_ref: Optional[weakref.ReferenceType] = field(
        default=None, repr=False, metadata={"serialize": False}
    )

    def __post_init__(self) -> None:
        for child in self.children:
            if child.parent_ref is None:
                child.parent_ref = weakref.ref(self)

    @property
    def type(self) -> DomType:
        return self.dom_type

    @property
    def parent(self) -> Optional["ContentElement"]:
        if self.parent_ref is None:
            return None
        return self.parent_ref()

    def append(self, child: "ContentElement") -> "ContentElement":
        """Attach ``child`` as the last child and return it."""
        child.parent_ref = weakref.ref(self)
        self.children.append(child)
        return child

    def extend(self, children: Iterable["ContentElement"]) -> None:
        for child in children:
            self.append(child)

    def adopt_children(self) -> None:
        """Point every child's parent link at this element."""
        for child in self.children:
            child.parent_ref = weakref.ref(self)


@dataclass(slots=True, eq=False)
class TextElement(ContentElement):
    dom_type: ClassVar[DomType] = DomType.TEXT

    text: str = ""


@dataclass(slots=True, eq=False)
class BreakElement(ContentElement):
    """Explicit break inside a run (``page``, ``column``, ``textWrapping`` ...)."""

    dom_type: ClassVar[DomType] = DomType.BREAK

    break_type: str = "textWrapping"


@dataclass(slots=True, eq=False)
class TabElement(ContentElement):
    dom_type: ClassVar[DomType] = DomType.TAB


@dataclass(slots=True, eq=False)
class NoBreakHyphenElement(ContentElement):
    dom_type: ClassVar[DomType] = DomType.NO_BREAK_HYPHEN


@dataclass(slots=True, eq=False)
class SymbolElement(ContentElement):
    dom_type: ClassVar[DomType] = DomType.SYMBOL

    font: Optional[str] = None
    char: str = ""


@dataclass(slots=True, eq=False)
class BookmarkStartElement(ContentElement):
    dom_type: ClassVar[DomType] = DomType.BOOKMARK_START

    bookmark_id: Optional[str] = None
    name: str = ""


@dataclass(slots=True, eq=False)
class BookmarkEndElement(ContentElement):
    dom_type: ClassVar[DomType] = DomType.BOOKMARK_END

    bookmark_id: Optional[str] = None


@dataclass(slots=True, eq=False)
class FootnoteReferenceElement(ContentElement):
    dom_type: ClassVar[DomType] = DomType.FOOTNOTE_REFERENCE

    footnote_id: str = ""


@dataclass(slots=True, eq=False)
class RunElement(ContentElement):
    """Contiguous inline content sharing run formatting."""

    dom_type: ClassVar[DomType] = DomType.RUN

    run_id: Optional[str] = None
    vertical_align: Optional[str] = None
    fld_char_type: Optional[str] = None
    instr_text: Optional[str] = None


@dataclass(slots=True, eq=False)
class HyperlinkElement(ContentElement):
    dom_type: ClassVar[DomType] = DomType.HYPERLINK

    href: Optional[str] = None
    anchor: Optional[str] = None


@dataclass(slots=True, eq=False)
class DrawingElement(ContentElement):
    dom_type: ClassVar[DomType] = DomType.DRAWING


@dataclass(slots=True, eq=False)
class ImageElement(ContentElement):
    """Picture whose binary is loaded asynchronously by reference."""

    dom_type: ClassVar[DomType] = DomType.IMAGE

    src: str = ""


@dataclass(slots=True, eq=False)
class TableColumn:
    width: Optional[str] = None


@dataclass(slots=True, eq=False)
class TableElement(ContentElement):
    dom_type: ClassVar[DomType] = DomType.TABLE

    columns: List[TableColumn] = field(default_factory=list)
    cell_style: Dict[str, str] = field(default_factory=dict)


@dataclass(slots=True, eq=False)
class TableRowElement(ContentElement):
    dom_type: ClassVar[DomType] = DomType.ROW


@dataclass(slots=True, eq=False)
class TableCellElement(ContentElement):
    dom_type: ClassVar[DomType] = DomType.CELL

    span: Optional[int] = None


@dataclass(slots=True)
class NumberingReference:
    """``{numId, level}`` pairing attached to a paragraph or paragraph style."""

    num_id: str
    level: int = 0


@dataclass(slots=True)
class TabStop:
    position: Length
    style: str = "left"
    leader: Optional[str] = None


@dataclass(slots=True)
class HeaderFooterReference:
    """Relationship reference to a header or footer part of a given kind."""

    rel_id: str
    kind: str = "default"


@dataclass(slots=True)
class PageSize:
    width: Optional[Length] = None
    height: Optional[Length] = None
    orientation: Optional[str] = None


@dataclass(slots=True)
class PageMargins:
    top: Optional[Length] = None
    right: Optional[Length] = None
    bottom: Optional[Length] = None
    left: Optional[Length] = None
    header: Optional[Length] = None
    footer: Optional[Length] = None
    gutter: Optional[Length] = None


@dataclass(slots=True)
class Columns:
    number_of_columns: Optional[int] = None
    space: Optional[Length] = None
    separator: bool = False
    equal_width: bool = True


@dataclass(slots=True, eq=False)
class SectionProperties:
    """Section-level configuration including headers, footers, and page setup.

    ``section_id`` identifies the source section; consecutive split sections
    sharing it belong to the same logical section for page counting.
    """

    section_id: Optional[str] = None
    page_size: Optional[PageSize] = None
    page_margins: Optional[PageMargins] = None
    columns: Optional[Columns] = None
    header_refs: List[HeaderFooterReference] = field(default_factory=list)
    footer_refs: List[HeaderFooterReference] = field(default_factory=list)
    force_first_footer_header_different: bool = False

    @property
    def identity(self) -> object:
        return self.section_id if self.section_id is not None else id(self)


@dataclass(slots=True, eq=False)
class ParagraphElement(ContentElement):
    """Block paragraph; ``section_props`` is set when it closes a section."""

    dom_type: ClassVar[DomType] = DomType.PARAGRAPH

    section_props: Optional[SectionProperties] = None
    tabs: List[TabStop] = field(default_factory=list)
    numbering: Optional[NumberingReference] = None
    color: Optional[str] = None
    font_size: Optional[Length] = None


@dataclass(slots=True, eq=False)
class HeaderElement(ContentElement):
    dom_type: ClassVar[DomType] = DomType.HEADER


@dataclass(slots=True, eq=False)
class FooterElement(ContentElement):
    dom_type: ClassVar[DomType] = DomType.FOOTER


@dataclass(slots=True, eq=False)
class FootnoteElement(ContentElement):
    dom_type: ClassVar[DomType] = DomType.FOOTNOTE

    footnote_id: str = ""


@dataclass(slots=True, eq=False)
class DocumentElement(ContentElement):
    """Document body; ``props`` holds the trailing section properties."""

    dom_type: ClassVar[DomType] = DomType.DOCUMENT

    props: Optional[SectionProperties] = None


@dataclass(frozen=True, slots=True)
class Section:
    """Content governed by one fixed page geometry and header/footer set."""

    elements: List[ContentElement]
    properties: SectionProperties
    page_within_section: int = 1


def find_parent(element: ContentElement, dom_type: DomType) -> Optional[ContentElement]:
    """Return the nearest ancestor of ``element`` of the given type."""
    parent = element.parent
    while parent is not None and parent.type != dom_type:
        parent = parent.parent
    return parent
