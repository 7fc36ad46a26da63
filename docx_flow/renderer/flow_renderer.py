"""Walk split sections and emit abstract node trees plus style sheets."""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Iterable, List, Optional, Protocol

from docx_flow.compiler.numbering_compiler import NumberingCompiler
from docx_flow.compiler.section_splitter import SectionSplitter
from docx_flow.compiler.style_resolver import StyleResolver
from docx_flow.model.document_model import FlowModel, WordDocument
from docx_flow.model.elements import (
    BookmarkStartElement,
    BreakElement,
    ContentElement,
    DomType,
    FootnoteReferenceElement,
    HyperlinkElement,
    ImageElement,
    ParagraphElement,
    RunElement,
    Section,
    SectionProperties,
    SymbolElement,
    TableCellElement,
    TableElement,
    TextElement,
    find_parent,
)
from docx_flow.model.numbering_model import CssRule
from docx_flow.model.options import RenderOptions
from docx_flow.renderer.inline_styles import apply_inline_styles
from docx_flow.renderer.sink import NodeDescription, RenderSink
from docx_flow.renderer.stylesheet import StylesheetBuilder
from docx_flow.utils.css import append_class, copy_style_properties, escape_class_name, process_class_name
from docx_flow.utils.logger import get_logger
from docx_flow.utils.units import render_length

LOGGER = get_logger(__name__)

CELL_STYLE_KEYS = [
    "border-left", "border-right", "border-top", "border-bottom",
    "padding-left", "padding-right", "padding-top", "padding-bottom",
]


class ResourceKind(str, Enum):
    NUMBERING_IMAGE = "numberingImage"
    FONT = "font"
    IMAGE = "image"


@dataclass(slots=True, eq=False)
class PendingResource:
    """A resource whose load completes after the first emission.

    ``key`` is the CSS variable (bullet pictures), the font face key (fonts)
    or the image reference (document images).
    """

    kind: ResourceKind
    reference: str
    key: str
    font_family: Optional[str] = None
    font_kind: Optional[str] = None
    obfuscation_key: Optional[str] = None
    node: Optional[NodeDescription] = None


class ResourceLoader(Protocol):
    """Asynchronous source of displayable URIs for package binaries."""

    async def load_numbering_image(self, reference: str) -> str:
        ...

    async def load_font(self, reference: str, key: str) -> str:
        ...

    async def load_document_image(self, reference: str) -> str:
        ...


class FlowRenderer:
    """Turn a :class:`WordDocument` into style sheets and section node trees."""

    def __init__(self, options: Optional[RenderOptions] = None) -> None:
        self.options = options or RenderOptions()
        self._root = self.options.class_name
        self._numbering = NumberingCompiler(self.options)
        self._stylesheets = StylesheetBuilder(self.options)
        self._document: Optional[WordDocument] = None
        self._model: Optional[FlowModel] = None
        self._resources: List[PendingResource] = []
        self._inline_rules: List[CssRule] = []
        self._footnote_map: Dict[str, ContentElement] = {}
        self._current_footnote_ids: List[str] = []
        self._renderers: Dict[DomType, Callable[[ContentElement], Optional[NodeDescription]]] = {
            DomType.PARAGRAPH: self.render_paragraph,
            DomType.BOOKMARK_START: self.render_bookmark_start,
            DomType.BOOKMARK_END: lambda elem: None,
            DomType.RUN: self.render_run,
            DomType.TABLE: self.render_table,
            DomType.ROW: lambda elem: self._render_container_with_class(elem, "tr"),
            DomType.CELL: self.render_table_cell,
            DomType.HYPERLINK: self.render_hyperlink,
            DomType.DRAWING: self.render_drawing,
            DomType.IMAGE: self.render_image,
            DomType.TEXT: self.render_text,
            DomType.TAB: self.render_tab,
            DomType.SYMBOL: self.render_symbol,
            DomType.BREAK: self.render_break,
            DomType.FOOTER: lambda elem: self.render_container(elem, "footer"),
            DomType.HEADER: lambda elem: self.render_container(elem, "header"),
            DomType.FOOTNOTE: lambda elem: self.render_container(elem, "li"),
            DomType.FOOTNOTE_REFERENCE: self.render_footnote_reference,
            DomType.NO_BREAK_HYPHEN: lambda elem: NodeDescription("wbr"),
        }

    # ------------------------------------------------------------------
    def compile(self, document: WordDocument) -> FlowModel:
        """Resolve styles, then compile numbering and split sections."""
        styles = StyleResolver(self.options).resolve(document.styles, document.theme)
        self._numbering.link_paragraph_styles(document.numberings, styles)
        numbering = self._numbering.compile(document.numberings)
        sections = SectionSplitter(styles, self.options).split(document.body.children, document.body.props)
        return FlowModel(styles=styles, numbering=numbering, sections=sections)

    def render(self, document: WordDocument, sink: RenderSink, model: Optional[FlowModel] = None) -> List[PendingResource]:
        """Emit style sheets and section trees into ``sink``.

        Returns the resources still to load; pass them to
        :meth:`resolve_resources` once an event loop is available.
        """
        self._document = document
        self._model = model or self.compile(document)
        self._resources = []
        self._inline_rules = []

        self._emit_rules(sink, self._stylesheets.default_rules(), "predefined styles")

        if document.theme is not None:
            self._emit_rules(sink, [self._stylesheets.theme_rule(document.theme)], "document theme values")

        if document.styles:
            self._emit_rules(sink, self._stylesheets.style_rules(self._model.styles), "document styles")

        if document.numberings:
            self._emit_rules(sink, self._model.numbering.rules, "document numbering styles")
            for binding in self._model.numbering.image_bindings:
                self._resources.append(PendingResource(ResourceKind.NUMBERING_IMAGE, binding.image_ref, binding.variable))

        self._footnote_map = {note.footnote_id: note for note in document.footnotes}

        if not self.options.ignore_fonts:
            for font in document.fonts:
                for ref in font.embed_refs:
                    self._resources.append(PendingResource(
                        ResourceKind.FONT, ref.rel_id, f"font:{font.name}:{ref.kind}",
                        font_family=font.name, font_kind=ref.kind, obfuscation_key=ref.key,
                    ))

        section_nodes = [self.render_section(section) for section in self._model.sections]
        if self.options.in_wrapper:
            roots = [NodeDescription("div", {"class": f"{self._root}-wrapper"}, children=section_nodes)]
        else:
            roots = section_nodes
        if self.options.no_style_block:
            apply_inline_styles(self._inline_rules, roots)
        for node in roots:
            sink.add_body(node)

        return list(self._resources)

    def _emit_rules(self, sink: RenderSink, rules: List[CssRule], comment: str) -> None:
        if self.options.no_style_block:
            self._inline_rules.extend(rules)
        else:
            sink.add_stylesheet(StylesheetBuilder.to_css(rules), comment)

    async def resolve_resources(self, loader: ResourceLoader, sink: RenderSink, resources: Iterable[PendingResource]) -> None:
        """Load every pending resource concurrently and push one patch each."""
        await asyncio.gather(*(self._resolve_resource(loader, sink, resource) for resource in resources))

    async def _resolve_resource(self, loader: ResourceLoader, sink: RenderSink, resource: PendingResource) -> None:
        try:
            if resource.kind == ResourceKind.NUMBERING_IMAGE:
                uri = await loader.load_numbering_image(resource.reference)
                sink.update_rule(resource.key, self._numbering.image_patch(resource.key, uri))
            elif resource.kind == ResourceKind.FONT:
                uri = await loader.load_font(resource.reference, resource.obfuscation_key or "")
                css = self._stylesheets.font_face(resource.font_family or "", uri, resource.font_kind or "")
                sink.update_rule(resource.key, css)
            else:
                uri = await loader.load_document_image(resource.reference)
                if resource.node is not None:
                    sink.update_node(resource.node, {"src": uri})
        except Exception as exc:
            LOGGER.warning("Failed to load %s %s: %s", resource.kind.value, resource.reference, exc)

    # ------------------------------------------------------------------
    def create_section(self, props: Optional[SectionProperties]) -> NodeDescription:
        node = NodeDescription("section", {"class": self._root})
        if props is None:
            return node

        if props.page_margins is not None:
            margins = props.page_margins
            for key, value in (
                ("padding-left", margins.left),
                ("padding-right", margins.right),
                ("padding-top", margins.top),
                ("padding-bottom", margins.bottom),
            ):
                if value is not None:
                    node.style[key] = render_length(value)

        if props.page_size is not None:
            if not self.options.ignore_width and props.page_size.width is not None:
                node.style["width"] = render_length(props.page_size.width)
            if not self.options.ignore_height and props.page_size.height is not None:
                node.style["min-height"] = render_length(props.page_size.height)

        if props.columns is not None and props.columns.number_of_columns:
            node.style["column-count"] = str(props.columns.number_of_columns)
            if props.columns.space is not None:
                node.style["column-gap"] = render_length(props.columns.space)
            if props.columns.separator:
                node.style["column-rule"] = "1px solid black"

        return node

    def render_section(self, section: Section) -> NodeDescription:
        self._current_footnote_ids = []
        props = section.properties
        node = self.create_section(props)
        if self._document is not None:
            node.style.update(self._document.body.css_style)

        if self.options.render_headers:
            header = self.find_header_footer(props, section.page_within_section, footer=False)
            if header is not None:
                node.children.extend(self.render_elements([header]))

        article = NodeDescription("article", children=self.render_elements(section.elements))
        node.children.append(article)

        if self.options.render_footnotes:
            self.render_footnotes(self._current_footnote_ids, node)

        if self.options.render_footers:
            footer = self.find_header_footer(props, section.page_within_section, footer=True)
            if footer is not None:
                node.children.extend(self.render_elements([footer]))

        return node

    def find_header_footer(self, props: SectionProperties, page: int, footer: bool = True) -> Optional[ContentElement]:
        """Select the header or footer part for the ``page``-th page of a section."""
        refs = props.footer_refs if footer else props.header_refs
        first = next((ref for ref in refs if ref.kind == "first"), None)
        even = next((ref for ref in refs if ref.kind == "even"), None)
        default = next((ref for ref in refs if ref.kind == "default"), None)

        forced = self.options.force_first_footer_header_different or props.force_first_footer_header_different
        if forced and page == 1:
            ref = first
        elif page == 1 and first is not None:
            ref = first
        elif even is not None and page % 2 == 0:
            ref = even
        else:
            ref = default

        if ref is None or self._document is None:
            return None
        part = self._document.find_part(ref.rel_id)
        if part is None and self.options.debug:
            LOGGER.warning("Can't find %s part %s", "footer" if footer else "header", ref.rel_id)
        return part

    def render_footnotes(self, footnote_ids: List[str], into: NodeDescription) -> None:
        footnotes = [self._footnote_map[fid] for fid in footnote_ids if fid in self._footnote_map]
        if footnotes:
            into.children.append(NodeDescription("ol", children=self.render_elements(footnotes)))

    # ------------------------------------------------------------------
    def render_element(self, elem: ContentElement) -> Optional[NodeDescription]:
        renderer = self._renderers.get(elem.type)
        if renderer is None:
            LOGGER.debug("DomType %s has no rendering implementation", elem.type)
            return None
        return renderer(elem)

    def render_elements(self, elems: Optional[Iterable[ContentElement]]) -> List[NodeDescription]:
        if elems is None:
            return []
        return [node for node in (self.render_element(elem) for elem in elems) if node is not None]

    def render_children(self, elem: ContentElement, into: NodeDescription) -> NodeDescription:
        into.children.extend(self.render_elements(elem.children))
        return into

    def render_container(self, elem: ContentElement, tag: str) -> NodeDescription:
        return self.render_children(elem, NodeDescription(tag))

    def _render_container_with_class(self, elem: ContentElement, tag: str) -> NodeDescription:
        node = NodeDescription(tag)
        self.render_class(elem, node)
        self.render_children(elem, node)
        node.style.update(elem.css_style)
        return node

    def render_class(self, elem: ContentElement, node: NodeDescription) -> None:
        node.attributes["class"] = process_class_name(self._root, elem.class_name)

    def render_paragraph(self, elem: ParagraphElement) -> NodeDescription:
        node = self._render_container_with_class(elem, "p")
        if elem.color:
            node.style["color"] = elem.color
        if elem.font_size is not None:
            node.style["font-size"] = render_length(elem.font_size)

        style = self._model.styles.get(elem.style_name) if self._model is not None else None
        numbering = elem.numbering or (style.paragraph_props.numbering if style is not None else None)
        if numbering is not None:
            node.attributes["class"] = append_class(
                node.attributes.get("class"), self._numbering.numbering_class(numbering.num_id, numbering.level)
            )

        if elem.style_name:
            css_name = style.css_name if style is not None and style.css_name else process_class_name(
                self._root, escape_class_name(elem.style_name)
            )
            node.attributes["class"] = append_class(node.attributes.get("class"), css_name)
        return node

    def render_run(self, elem: RunElement) -> Optional[NodeDescription]:
        if elem.fld_char_type or elem.instr_text:
            return None
        node = NodeDescription("span")
        if elem.run_id:
            node.attributes["id"] = elem.run_id
        self.render_class(elem, node)
        self.render_children(elem, node)
        node.style.update(elem.css_style)
        if elem.vertical_align:
            node.style["vertical-align"] = elem.vertical_align
            node.style.setdefault("font-size", "small")
        return node

    def render_table(self, elem: TableElement) -> NodeDescription:
        node = NodeDescription("table")
        if elem.columns:
            colgroup = NodeDescription("colgroup")
            for column in elem.columns:
                col = NodeDescription("col")
                if column.width:
                    col.style["width"] = column.width
                colgroup.children.append(col)
            node.children.append(colgroup)
        self.render_class(elem, node)
        self.render_children(elem, node)
        node.style.update(elem.css_style)
        return node

    def render_table_cell(self, elem: TableCellElement) -> NodeDescription:
        node = NodeDescription("td")
        self.render_class(elem, node)
        self.render_children(elem, node)
        table = find_parent(elem, DomType.TABLE)
        cell_style = dict(elem.css_style)
        if isinstance(table, TableElement):
            cell_style = copy_style_properties(table.cell_style, cell_style, CELL_STYLE_KEYS)
        node.style.update(cell_style)
        if elem.span:
            node.attributes["colspan"] = str(elem.span)
        return node

    def render_hyperlink(self, elem: HyperlinkElement) -> NodeDescription:
        node = self.render_container(elem, "a")
        node.style.update(elem.css_style)
        if elem.href:
            node.attributes["href"] = elem.href
        return node

    def render_drawing(self, elem: ContentElement) -> NodeDescription:
        node = NodeDescription("div", style={"display": "inline-block", "position": "relative", "text-indent": "0px"})
        self.render_children(elem, node)
        node.style.update(elem.css_style)
        return node

    def render_image(self, elem: ImageElement) -> NodeDescription:
        node = NodeDescription("img", style=dict(elem.css_style))
        if elem.src:
            self._resources.append(PendingResource(ResourceKind.IMAGE, elem.src, elem.src, node=node))
        return node

    def render_text(self, elem: TextElement) -> NodeDescription:
        return NodeDescription.text_node(elem.text)

    def render_tab(self, elem: ContentElement) -> NodeDescription:
        return NodeDescription("span", children=[NodeDescription.text_node("\u2003")])

    def render_symbol(self, elem: SymbolElement) -> NodeDescription:
        node = NodeDescription("span")
        if elem.font:
            node.style["font-family"] = elem.font
        try:
            node.children.append(NodeDescription.text_node(chr(int(elem.char, 16))))
        except (ValueError, OverflowError):
            LOGGER.debug("Invalid symbol character code %r", elem.char)
        return node

    def render_break(self, elem: BreakElement) -> Optional[NodeDescription]:
        if elem.break_type == "textWrapping":
            return NodeDescription("br")
        return None

    def render_footnote_reference(self, elem: FootnoteReferenceElement) -> NodeDescription:
        self._current_footnote_ids.append(elem.footnote_id)
        return NodeDescription("sup", children=[NodeDescription.text_node(str(len(self._current_footnote_ids)))])

    def render_bookmark_start(self, elem: BookmarkStartElement) -> NodeDescription:
        return NodeDescription("span", {"id": elem.name})
