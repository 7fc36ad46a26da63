"""Serialize rendered sections into a standalone HTML document."""
from __future__ import annotations

from html import escape
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from docx_flow.renderer.sink import TEXT_NODE, NodeDescription

VOID_TAGS = {"br", "col", "img", "wbr"}


class HtmlDocumentSink:
    """Render sink collecting styles and section trees into HTML text."""

    def __init__(self, title: str = "DOCX Preview") -> None:
        self._title = title
        self._styles: List[Tuple[Optional[str], str]] = []
        self._patches: Dict[str, str] = {}
        self.body: List[NodeDescription] = []

    def add_stylesheet(self, css_text: str, comment: Optional[str] = None) -> None:
        self._styles.append((comment, css_text))

    def add_body(self, node: NodeDescription) -> None:
        self.body.append(node)

    def update_rule(self, key: str, css_text: str) -> None:
        self._patches[key] = css_text

    def update_node(self, node: NodeDescription, attributes: Dict[str, str]) -> None:
        node.attributes.update(attributes)

    @property
    def stylesheets(self) -> List[str]:
        return [css for _, css in self._styles] + list(self._patches.values())

    def to_html(self) -> str:
        style_blocks = []
        for comment, css in self._styles:
            if comment:
                style_blocks.append(f"  <!--{comment}-->")
            style_blocks.append(f"  <style>{css}</style>")
        for css in self._patches.values():
            style_blocks.append(f"  <style>{css}</style>")
        head = "\n".join(style_blocks)
        body = "\n".join(self.node_to_html(node) for node in self.body)
        return f"""<!DOCTYPE html>
<html lang=\"en\">
<head>
  <meta charset=\"utf-8\" />
  <title>{escape(self._title)}</title>
{head}
</head>
<body>
{body}
</body>
</html>
"""

    def write(self, output_path: Path) -> None:
        output_path.write_text(self.to_html(), encoding="utf-8")

    def node_to_html(self, node: NodeDescription) -> str:
        if node.tag == TEXT_NODE:
            return escape(node.text or "", quote=False)
        attributes = dict(node.attributes)
        if node.style:
            attributes["style"] = "; ".join(f"{k}: {v}" for k, v in node.style.items())
        attrs = "".join(f" {name}=\"{escape(value)}\"" for name, value in attributes.items())
        if node.tag in VOID_TAGS:
            return f"<{node.tag}{attrs}>"
        inner = "".join(self.node_to_html(child) for child in node.children)
        return f"<{node.tag}{attrs}>{inner}</{node.tag}>"
