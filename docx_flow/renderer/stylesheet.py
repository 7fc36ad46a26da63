"""Emit the predefined, theme and document style rules."""
from __future__ import annotations

from typing import Dict, List, Optional

from docx_flow.model.numbering_model import CssRule
from docx_flow.model.options import RenderOptions
from docx_flow.model.style_model import StyleDefinition, StylesCatalog, SubStyle, ThemeFonts
from docx_flow.utils.css import style_to_string
from docx_flow.utils.logger import get_logger

LOGGER = get_logger(__name__)


class StylesheetBuilder:
    """Build CSS text for everything that does not depend on numbering."""

    def __init__(self, options: Optional[RenderOptions] = None) -> None:
        self._options = options or RenderOptions()
        self._root = self._options.class_name

    def default_rules(self) -> List[CssRule]:
        c = self._root
        return [
            CssRule(f".{c}-wrapper", {
                "background": "gray", "padding": "30px", "padding-bottom": "0px",
                "display": "flex", "flex-flow": "column", "align-items": "center",
            }),
            CssRule(f".{c}-wrapper>section.{c}", {
                "background": "white", "box-shadow": "0 0 10px rgba(0, 0, 0, 0.5)", "margin-bottom": "30px",
            }),
            CssRule(f".{c}", {"color": "black"}),
            CssRule(f"section.{c}", {
                "box-sizing": "border-box", "display": "flex", "flex-flow": "column nowrap", "position": "relative",
            }),
            CssRule(f"section.{c}>article", {"margin-bottom": "auto"}),
            CssRule(f".{c} table", {"border-collapse": "collapse"}),
            CssRule(f".{c} table td, .{c} table th", {"vertical-align": "top"}),
            CssRule(f".{c} p", {
                "margin": "0pt", "min-height": "1em", "margin-block-start": "0", "margin-block-end": "0",
            }),
            CssRule(f".{c} span", {"white-space": "pre-wrap"}),
        ]

    def theme_rule(self, theme: ThemeFonts) -> CssRule:
        variables: Dict[str, str] = {}
        if theme.major_latin:
            variables[f"--{self._root}-majorHAnsi-font"] = theme.major_latin
        if theme.minor_latin:
            variables[f"--{self._root}-minorHAnsi-font"] = theme.minor_latin
        for name, value in theme.colors.items():
            variables[f"--{self._root}-{name}-color"] = f"#{value}"
        return CssRule(f".{self._root}", variables)

    def style_rules(self, styles: StylesCatalog) -> List[CssRule]:
        """One rule per sub-style, linked style blocks included."""
        rules: List[CssRule] = []
        defaults: Dict[Optional[str], StyleDefinition] = {}
        for style in styles.ordered():
            if style.is_default and style.target not in defaults:
                defaults[style.target] = style

        for style in styles.ordered():
            sub_styles: List[SubStyle] = list(style.styles)
            if style.linked:
                linked = styles.get(style.linked)
                if linked is not None:
                    sub_styles.extend(linked.styles)
                elif self._options.debug:
                    LOGGER.warning("Can't find linked style %s", style.linked)

            for sub in sub_styles:
                if style.target == sub.target:
                    selector = f"{style.target}.{style.css_name}"
                elif style.target:
                    selector = f"{style.target}.{style.css_name} {sub.target}"
                else:
                    selector = f".{style.css_name} {sub.target}"

                if defaults.get(style.target) is style:
                    selector = f".{self._root} {style.target}, " + selector

                rules.append(CssRule(selector, dict(sub.values)))
        return rules

    @staticmethod
    def to_css(rules: List[CssRule]) -> str:
        return "".join(style_to_string(rule.selector, rule.declarations, rule.css_text) for rule in rules)

    def font_face(self, family: str, uri: str, kind: str) -> str:
        values = {"font-family": family, "src": f"url({uri})"}
        if kind in ("bold", "boldItalic"):
            values["font-weight"] = "bold"
        if kind in ("italic", "boldItalic"):
            values["font-style"] = "italic"
        return style_to_string("@font-face", values)
