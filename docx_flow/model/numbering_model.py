"""Numbering model captures list levels and the CSS compiled from them."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(slots=True)
class BulletPicture:
    """Picture bullet; ``src`` references the image part, ``style`` is raw CSS."""

    src: str
    style: Optional[str] = None


@dataclass(slots=True)
class NumberingLevel:
    """Numbering behavior for one level of one numbering instance."""

    num_id: str
    level: int
    level_text: Optional[str] = None
    num_format: Optional[str] = None
    suffix: str = "tab"
    bullet: Optional[BulletPicture] = None
    paragraph_style_name: Optional[str] = None
    p_style: Dict[str, str] = field(default_factory=dict)
    r_style: Dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class CssRule:
    """One selector with its declaration block and optional raw CSS tail."""

    selector: str
    declarations: Dict[str, str] = field(default_factory=dict)
    css_text: Optional[str] = None


@dataclass(slots=True)
class ImageBinding:
    """Deferred binding of a CSS variable to an image loaded later."""

    variable: str
    image_ref: str


@dataclass(slots=True)
class NumberingStylesheet:
    """Output of the numbering compiler."""

    rules: List[CssRule] = field(default_factory=list)
    image_bindings: List[ImageBinding] = field(default_factory=list)
