"""CSS text helpers shared by the style, numbering and section compilers."""
from __future__ import annotations

import re
from typing import Dict, Iterable, Mapping, Optional

_CLASS_SEPARATORS = re.compile(r"[ .]+")
_AMPERSANDS = re.compile(r"[&]+")


def escape_class_name(class_name: Optional[str]) -> Optional[str]:
    """Make a style id usable as a CSS class (``Heading 1`` -> ``Heading-1``)."""
    if class_name is None:
        return None
    return _AMPERSANDS.sub("and", _CLASS_SEPARATORS.sub("-", class_name))


def process_class_name(root_class: str, class_name: Optional[str]) -> str:
    """Namespace ``class_name`` under the root class."""
    if not class_name:
        return root_class
    return f"{root_class}_{class_name}"


def append_class(classes: Optional[str], class_name: Optional[str]) -> Optional[str]:
    if not class_name:
        return classes
    if not classes:
        return class_name
    return f"{classes} {class_name}"


def copy_style_properties(
    source: Optional[Mapping[str, str]],
    target: Optional[Dict[str, str]],
    keys: Optional[Iterable[str]] = None,
    override: bool = False,
) -> Dict[str, str]:
    """Copy declarations from ``source`` into ``target``.

    Existing declarations in ``target`` win unless ``override`` is set.
    """
    if target is None:
        target = {}
    if not source:
        return target
    for key in (keys if keys is not None else list(source)):
        if key in source and (override or key not in target):
            target[key] = source[key]
    return target


def style_to_string(selector: str, values: Mapping[str, str], css_text: Optional[str] = None) -> str:
    """Serialize one rule in the ``selector {\\r\\n  key: value;\\r\\n}`` layout."""
    result = selector + " {\r\n"
    for key, value in values.items():
        result += f"  {key}: {value};\r\n"
    if css_text:
        result += css_text
    return result + "}\r\n"
