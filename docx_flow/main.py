"""Entry-point for the document flow pipeline."""
from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

from docx_flow.model.document_model import FlowModel, WordDocument
from docx_flow.model.options import RenderOptions
from docx_flow.renderer.flow_renderer import FlowRenderer, ResourceLoader
from docx_flow.renderer.html_writer import HtmlDocumentSink
from docx_flow.utils.debug import DebugDumper
from docx_flow.utils.logger import get_logger

LOGGER = get_logger(__name__)


def build_flow_model(document: WordDocument, options: Optional[RenderOptions] = None) -> FlowModel:
    """Resolve styles, compile numbering and split the body into sections."""
    return FlowRenderer(options).compile(document)


def render_document(
    document: WordDocument,
    output_dir: Path,
    options: Optional[RenderOptions] = None,
    loader: Optional[ResourceLoader] = None,
    *,
    debug_dump: bool = False,
) -> HtmlDocumentSink:
    """Render ``document`` to ``output_dir/document.html``.

    Pending resources are resolved before writing when a ``loader`` is given.
    """
    renderer = FlowRenderer(options)
    model = renderer.compile(document)
    LOGGER.info("Rendering %d sections into %s", len(model.sections), output_dir)

    sink = HtmlDocumentSink()
    resources = renderer.render(document, sink, model)
    if loader is not None and resources:
        asyncio.run(renderer.resolve_resources(loader, sink, resources))

    output_dir.mkdir(parents=True, exist_ok=True)
    sink.write(output_dir / "document.html")

    if debug_dump:
        DebugDumper(output_dir / "debug").dump(model.sections)
    return sink
