"""Partition the document body into sections bound to their page setup."""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Tuple

from docx_flow.model.elements import (
    BreakElement,
    ContentElement,
    DomType,
    ParagraphElement,
    Section,
    SectionProperties,
)
from docx_flow.model.options import RenderOptions
from docx_flow.model.style_model import StylesCatalog
from docx_flow.utils.logger import get_logger

LOGGER = get_logger(__name__)


@dataclass(slots=True)
class ManualBreak:
    """Position of a page break inside a paragraph.

    ``split_index`` is ``run_index`` moved back over preceding bookmark starts.
    """

    run_index: int
    child_index: int
    split_index: int


@dataclass(slots=True)
class _PendingSection:
    elements: List[ContentElement] = field(default_factory=list)
    properties: Optional[SectionProperties] = None


@dataclass(slots=True)
class _Accumulator:
    """Sections closed so far plus the one being filled."""

    closed: List[_PendingSection] = field(default_factory=list)
    current: _PendingSection = field(default_factory=_PendingSection)
    emitted: int = 0

    def append(self, element: ContentElement) -> None:
        self.current.elements.append(element)
        self.emitted += 1

    def close(self, properties: Optional[SectionProperties] = None) -> None:
        self.current.properties = properties
        self.closed.append(self.current)
        self.current = _PendingSection()

    def finish(self) -> List[_PendingSection]:
        return self.closed + [self.current]


class SectionSplitter:
    """Split a linear body into :class:`Section` records.

    Boundaries come from paragraph section breaks, ``pageBreakBefore``
    paragraph styles and, when ``break_pages`` is on, manual page breaks
    inside runs. Split paragraphs and runs are copies; only the parent
    links of children moved into a copy change, so they point at the copy.
    """

    def __init__(self, styles: Optional[StylesCatalog] = None, options: Optional[RenderOptions] = None) -> None:
        self._styles = styles or StylesCatalog({})
        self._options = options or RenderOptions()

    def split(
        self,
        content: Iterable[ContentElement],
        document_props: Optional[SectionProperties] = None,
    ) -> List[Section]:
        state = _Accumulator()

        for element in content:
            if not isinstance(element, ParagraphElement):
                state.append(element)
                continue

            if self._breaks_before(element) and state.emitted > 0:
                state.close()

            manual_break = self.find_manual_break(element) if self._options.break_pages else None
            if manual_break is None:
                state.append(element)
            elif manual_break.split_index == 0:
                if state.current.elements:
                    state.close()
                state.append(element)
            else:
                head, tail = self.split_paragraph(element, manual_break)
                state.append(head)
                state.close()
                if tail is not None:
                    state.append(tail)

            if element.section_props is not None:
                state.close(element.section_props)

        pending = state.finish()
        pending[-1].properties = document_props or SectionProperties()
        return self._number_pages(self._backfill(pending))

    # ------------------------------------------------------------------
    def _breaks_before(self, paragraph: ParagraphElement) -> bool:
        style = self._styles.get(paragraph.style_name)
        return style is not None and style.paragraph_props.page_break_before

    def is_page_break(self, element: ContentElement) -> bool:
        if not isinstance(element, BreakElement):
            return False
        if element.break_type == "lastRenderedPageBreak":
            return not self._options.ignore_last_rendered_page_break
        return element.break_type == "page"

    def find_manual_break(self, paragraph: ParagraphElement) -> Optional[ManualBreak]:
        """Locate the first page break held by one of the paragraph's runs."""
        for run_index, child in enumerate(paragraph.children):
            if child.type != DomType.RUN:
                continue
            for child_index, inner in enumerate(child.children):
                if self.is_page_break(inner):
                    split_index = run_index
                    while split_index > 0 and paragraph.children[split_index - 1].type == DomType.BOOKMARK_START:
                        split_index -= 1
                    return ManualBreak(run_index, child_index, split_index)
        return None

    def split_paragraph(
        self, paragraph: ParagraphElement, manual_break: ManualBreak
    ) -> Tuple[ParagraphElement, Optional[ParagraphElement]]:
        """Cut ``paragraph`` at ``manual_break``.

        Returns the part that stays in the closing section and the fragment
        opening the next one, or ``None`` when nothing follows the break.
        """
        children = paragraph.children
        run = children[manual_break.run_index]
        if manual_break.run_index == len(children) - 1 and manual_break.child_index == len(run.children) - 1:
            return paragraph, None

        head_children = list(children[:manual_break.split_index])
        tail_children = list(children[manual_break.split_index:])
        if manual_break.child_index > 0:
            run_head = replace(run, children=list(run.children[:manual_break.child_index]))
            run_tail = replace(run, children=list(run.children[manual_break.child_index:]))
            run_head.adopt_children()
            run_tail.adopt_children()
            head_children.append(run_head)
            tail_children[manual_break.run_index - manual_break.split_index] = run_tail

        head = replace(paragraph, children=head_children, section_props=None)
        tail = replace(paragraph, children=tail_children)
        head.adopt_children()
        tail.adopt_children()
        return head, tail

    # ------------------------------------------------------------------
    def _backfill(self, pending: List[_PendingSection]) -> List[_PendingSection]:
        following: Optional[SectionProperties] = None
        for section in reversed(pending):
            if section.properties is None:
                section.properties = following
            else:
                following = section.properties
        return pending

    def _number_pages(self, pending: List[_PendingSection]) -> List[Section]:
        sections: List[Section] = []
        last_identity: object = None
        page = 0
        for item in pending:
            properties = item.properties or SectionProperties()
            if sections and properties.identity == last_identity:
                page += 1
            else:
                last_identity = properties.identity
                page = 1
            sections.append(Section(elements=item.elements, properties=properties, page_within_section=page))
        LOGGER.debug("Split body into %d sections", len(sections))
        return sections
