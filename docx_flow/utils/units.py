"""Unit helpers for WordprocessingML measurements and CSS lengths."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

TWIPS_PER_POINT = 20


@dataclass(frozen=True, slots=True)
class Length:
    """A measurement already converted to a CSS unit."""

    value: float
    unit: Optional[str] = "pt"


def twips_to_points(value: int) -> float:
    """Convert twips to points."""
    return value / TWIPS_PER_POINT


def twips(value: int) -> Length:
    """Build a point length from a twips value."""
    return Length(twips_to_points(value), "pt")


def render_length(length: Optional[Length]) -> Optional[str]:
    """Format a length as CSS text, e.g. ``72.00pt``."""
    if length is None:
        return None
    return f"{length.value:.2f}{length.unit or ''}"
