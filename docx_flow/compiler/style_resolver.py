"""Flatten style inheritance into one rule set per named style."""
from __future__ import annotations

from copy import deepcopy
from typing import Dict, Iterable, List, Optional

from docx_flow.compiler.style_graph import StyleCycleError, StyleGraph
from docx_flow.model.options import RenderOptions
from docx_flow.model.style_model import StyleDefinition, StylesCatalog, ThemeFonts
from docx_flow.utils.css import copy_style_properties, escape_class_name, process_class_name
from docx_flow.utils.logger import get_logger

LOGGER = get_logger(__name__)

THEME_FONT_KEY = "asciiTheme"
FONT_FAMILY_KEY = "font-family"


class StyleResolver:
    """Resolve ``basedOn`` chains, theme fonts, class names and document defaults.

    The input definitions are copied first; the returned catalog owns the
    resolved styles.
    """

    def __init__(self, options: Optional[RenderOptions] = None) -> None:
        self._options = options or RenderOptions()

    def resolve(self, styles: Iterable[StyleDefinition], theme: Optional[ThemeFonts] = None) -> StylesCatalog:
        """Return a catalog of fully merged styles."""
        styles = [deepcopy(style) for style in styles]
        graph = StyleGraph(styles)

        for style in styles:
            if style.style_id is not None:
                self.replace_ascii_theme(style, theme)
            style.resolved = not style.based_on

        for style in styles:
            if style.based_on and not style.resolved:
                self._resolve_base_style(style, graph)

        named = [style for style in styles if style.style_id is not None]
        anonymous = [style for style in styles if style.style_id is None]

        for style in named:
            self.replace_ascii_theme(style, theme, add_default=True)
        self._assign_class_names(named)

        self.apply_document_defaults(styles)
        for style in anonymous:
            self.replace_ascii_theme(style, theme, add_default=True)
            style.css_name = process_class_name(self._options.class_name, None)

        return StylesCatalog(graph.as_dict(), ordered=styles)

    # ------------------------------------------------------------------
    def _resolve_base_style(self, style: StyleDefinition, graph: StyleGraph) -> None:
        while not style.resolved:
            try:
                chain = graph.unresolved_chain(style)
            except StyleCycleError as exc:
                LOGGER.error("%s; resolving its members from their own declarations", exc)
                for style_id in exc.cycle:
                    member = graph.get(style_id)
                    if member is not None:
                        member.resolved = True
                continue

            for item in reversed(chain):
                parent = graph.parent(item)
                if parent is None:
                    if self._options.debug:
                        LOGGER.warning("Can't find base style %s", item.based_on)
                else:
                    self.copy_style(parent, item)
                item.resolved = True

    def _assign_class_names(self, styles: List[StyleDefinition]) -> None:
        taken: Dict[str, str] = {}
        for style in styles:
            base = process_class_name(self._options.class_name, escape_class_name(style.style_id))
            css_name = base
            suffix = 2
            while css_name in taken and taken[css_name] != style.style_id:
                css_name = f"{base}-{suffix}"
                suffix += 1
            taken[css_name] = style.style_id or ""
            style.css_name = css_name

    # ------------------------------------------------------------------
    @staticmethod
    def copy_style(base: StyleDefinition, target: StyleDefinition, override: bool = False) -> None:
        """Merge the sub-styles of ``base`` into ``target``; target wins unless ``override``."""
        for base_sub in base.styles:
            existing = target.sub_style(base_sub.target)
            if existing is not None:
                existing.values = copy_style_properties(base_sub.values, existing.values, None, override)
            else:
                target.styles.append(deepcopy(base_sub))

    def apply_document_defaults(self, styles: Iterable[StyleDefinition]) -> Optional[StyleDefinition]:
        """Fill anonymous styles from the merged ``isDefault`` styles.

        Explicit declarations are never overridden, so repeated application
        leaves the styles unchanged. Returns the aggregated default style.
        """
        styles = list(styles)
        defaults = [style for style in styles if style.is_default]
        if not defaults:
            return None
        aggregate = StyleDefinition(style_id=None, target=defaults[0].target, styles=[])
        for default in defaults:
            self.copy_style(default, aggregate)
        for style in styles:
            if style.style_id is None:
                self.copy_style(aggregate, style)
        return aggregate

    @staticmethod
    def replace_ascii_theme(style: StyleDefinition, theme: Optional[ThemeFonts], add_default: bool = False) -> None:
        """Substitute ``minorHAnsi``/``majorHAnsi`` with the theme typefaces.

        With ``add_default`` the minor font also becomes the font of every
        sub-style that declares none.
        """
        if theme is None:
            return
        minor = theme.minor_latin
        for sub in style.styles:
            value = sub.values.get(THEME_FONT_KEY)
            has_font_family = FONT_FAMILY_KEY in sub.values
            if not value:
                if add_default and not has_font_family and minor:
                    sub.values[FONT_FAMILY_KEY] = minor
                continue
            del sub.values[THEME_FONT_KEY]
            if has_font_family:
                continue
            if value == "minorHAnsi" and minor:
                sub.values[FONT_FAMILY_KEY] = minor
            elif value == "majorHAnsi" and theme.major_latin:
                sub.values[FONT_FAMILY_KEY] = theme.major_latin
