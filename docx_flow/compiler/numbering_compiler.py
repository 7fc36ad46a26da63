"""Compile numbering levels into CSS counter rules."""
from __future__ import annotations

import re
from typing import Iterable, List, Optional

from docx_flow.model.numbering_model import (
    CssRule,
    ImageBinding,
    NumberingLevel,
    NumberingStylesheet,
)
from docx_flow.model.options import RenderOptions
from docx_flow.model.style_model import StylesCatalog
from docx_flow.utils.logger import get_logger

LOGGER = get_logger(__name__)

_PLACEHOLDER = re.compile(r"%\d*")

NUM_FORMAT_TO_CSS = {
    "none": "none",
    "bullet": "disc",
    "decimal": "decimal",
    "lowerLetter": "lower-alpha",
    "upperLetter": "upper-alpha",
    "lowerRoman": "lower-roman",
    "upperRoman": "upper-roman",
}

SUFFIX_TO_CSS = {
    "tab": "\\9",
    "space": "\\a0",
}


def num_format_to_css(num_format: Optional[str]) -> Optional[str]:
    """Map a numbering format to a ``list-style-type`` keyword.

    Unknown formats pass through verbatim.
    """
    if not num_format:
        return num_format
    return NUM_FORMAT_TO_CSS.get(num_format, num_format)


class NumberingCompiler:
    """Turn numbering levels into ``counter-reset``/``counter-increment`` rules."""

    def __init__(self, options: Optional[RenderOptions] = None) -> None:
        self._options = options or RenderOptions()
        self._root = self._options.class_name

    def numbering_class(self, num_id: str, level: int) -> str:
        return f"{self._root}-num-{num_id}-{level}"

    def numbering_counter(self, num_id: str, level: int) -> str:
        return f"{self._root}-num-{num_id}-{level}"

    def bullet_variable(self, src: str) -> str:
        return f"--{self._root}-{src}".lower()

    def link_paragraph_styles(self, levels: Iterable[NumberingLevel], styles: StylesCatalog) -> None:
        """Copy the level of style-linked numbering into the paragraph styles.

        Must run on resolved styles, before any paragraph consults its style's
        numbering reference.
        """
        for level in levels:
            if not level.paragraph_style_name:
                continue
            style = styles.get(level.paragraph_style_name)
            if style is None:
                if self._options.debug:
                    LOGGER.warning("Can't find numbering paragraph style %s", level.paragraph_style_name)
                continue
            if style.paragraph_props.numbering is not None:
                style.paragraph_props.numbering.level = level.level

    def compile(self, levels: Iterable[NumberingLevel]) -> NumberingStylesheet:
        """Build the numbering rules; output depends only on ``levels``."""
        result = NumberingStylesheet()
        root_counters: List[str] = []

        for level in levels:
            selector = f"p.{self.numbering_class(level.num_id, level.level)}"
            list_style_type = "none"

            if level.bullet is not None:
                variable = self.bullet_variable(level.bullet.src)
                result.rules.append(CssRule(
                    f"{selector}:before",
                    {"content": "' '", "display": "inline-block", "background": f"var({variable})"},
                    level.bullet.style,
                ))
                result.image_bindings.append(ImageBinding(variable=variable, image_ref=level.bullet.src))
            elif level.level_text:
                counter = self.numbering_counter(level.num_id, level.level)
                if level.level > 0:
                    parent_selector = f"p.{self.numbering_class(level.num_id, level.level - 1)}"
                    result.rules.append(CssRule(parent_selector, {"counter-reset": counter}))
                else:
                    root_counters.append(counter)
                declarations = {
                    "content": self.level_text_to_content(
                        level.level_text, level.suffix, level.num_id, level.level,
                        num_format_to_css(level.num_format),
                    ),
                    "counter-increment": counter,
                }
                declarations.update(level.r_style)
                result.rules.append(CssRule(f"{selector}:before", declarations))
            else:
                list_style_type = num_format_to_css(level.num_format) or "none"

            declarations = {
                "display": "list-item",
                "list-style-position": "inside",
                "list-style-type": list_style_type,
            }
            declarations.update(level.p_style)
            result.rules.append(CssRule(selector, declarations))

        if root_counters:
            result.rules.append(CssRule(f".{self._root}-wrapper", {"counter-reset": " ".join(root_counters)}))

        return result

    def level_text_to_content(
        self,
        text: str,
        suffix: Optional[str],
        num_id: str,
        level: int,
        num_format: Optional[str],
    ) -> str:
        """Translate ``%1.%2`` style level text into CSS ``content``.

        A placeholder without digits or pointing at a deeper level than
        ``level`` (or below level 1) is dropped.
        """

        def substitute(match: "re.Match[str]") -> str:
            digits = match.group(0)[1:]
            if not digits:
                return ""
            ref_level = int(digits) - 1
            if ref_level < 0 or ref_level > level:
                return ""
            counter = self.numbering_counter(num_id, ref_level)
            return f"\"counter({counter}, {num_format})\""

        pieces = []
        last = 0
        for match in _PLACEHOLDER.finditer(text):
            pieces.append(_escape_literal(text[last:match.start()]))
            pieces.append(substitute(match))
            last = match.end()
        pieces.append(_escape_literal(text[last:]))

        return f"\"{''.join(pieces)}{SUFFIX_TO_CSS.get(suffix or '', '')}\""

    def image_patch(self, variable: str, uri: str) -> str:
        """Rule that binds a bullet variable once its image is loaded."""
        return f".{self._root}-wrapper {{ {variable}: url({uri}) }}"


def _escape_literal(text: str) -> str:
    return text.replace("\\", "\\\\").replace("\"", "\\\"")
