"""Helpers to persist intermediate representations for debugging."""
from __future__ import annotations

import json
from dataclasses import fields, is_dataclass
from enum import Enum
from pathlib import Path
from typing import Any, List

from docx_flow.model.elements import ContentElement, Section


class DebugDumper:
    """Writes intermediate artifacts onto disk for inspection."""

    def __init__(self, directory: Path) -> None:
        self.directory = directory

    def dump(self, sections: List[Section]) -> Path:
        """Persist the split sections as JSON for offline analysis."""
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self.directory / "sections.json"
        target.write_text(json.dumps(self._serialize(sections), indent=2))
        return target

    def _serialize(self, value: Any) -> Any:
        if isinstance(value, ContentElement):
            data = {"type": value.type.value}
            data.update(self._serialize_fields(value))
            return data
        if is_dataclass(value):
            return self._serialize_fields(value)
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, dict):
            return {k: self._serialize(v) for k, v in value.items()}
        if isinstance(value, (list, tuple)):
            return [self._serialize(v) for v in value]
        return value

    def _serialize_fields(self, value: Any) -> dict:
        return {
            f.name: self._serialize(getattr(value, f.name))
            for f in fields(value)
            if f.metadata.get("serialize", True)
        }
