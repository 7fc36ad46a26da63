"""Options recognized by the flow compiler and renderer."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class RenderOptions:
    """Rendering switches; defaults follow the common preview settings."""

    class_name: str = "docx"
    in_wrapper: bool = True
    ignore_width: bool = False
    ignore_height: bool = False
    ignore_fonts: bool = False
    break_pages: bool = True
    ignore_last_rendered_page_break: bool = True
    render_headers: bool = True
    render_footers: bool = True
    render_footnotes: bool = True
    force_first_footer_header_different: bool = False
    no_style_block: bool = False
    debug: bool = False
