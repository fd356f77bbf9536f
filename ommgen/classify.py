"""Split an OMM node into tag, attributes, style block and children."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

from .errors import MalformedNodeError
from .types_omm import METADATA_PREFIX, STYLE_KEY, Children, StyleBlock

_TAG_NAME = re.compile(r"^(?:[A-Za-z][A-Za-z0-9-]*:)?[A-Za-z][A-Za-z0-9-]*$")


@dataclass
class ClassifiedNode:
    tag: str
    attributes: Dict[str, Any] = field(default_factory=dict)
    style: StyleBlock | None = None
    children: Children = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    # Position of the style key among attributes, used to place the class attribute.
    style_index: int | None = None


def classify_node(node: Any, *, path: str = "") -> ClassifiedNode:
    """Classify one node. The first inserted key is always the tag."""
    if not isinstance(node, Mapping):
        raise MalformedNodeError(
            f"expected a mapping node, got {type(node).__name__}", path=path
        )
    if not node:
        raise MalformedNodeError("empty node has no tag key", path=path)

    items = iter(node.items())
    tag, children = next(items)
    if not isinstance(tag, str):
        raise MalformedNodeError(f"tag key must be a string, got {tag!r}", path=path)
    if tag == STYLE_KEY:
        raise MalformedNodeError("reserved key 'style' cannot be used as a tag", path=path)
    if tag.startswith(METADATA_PREFIX):
        raise MalformedNodeError(f"metadata key {tag!r} cannot be used as a tag", path=path)
    if not _TAG_NAME.match(tag):
        raise MalformedNodeError(f"invalid tag name {tag!r}", path=path)

    classified = ClassifiedNode(tag=tag, children=children)
    for key, value in items:
        if not isinstance(key, str):
            raise MalformedNodeError(f"attribute key must be a string, got {key!r}", path=path)
        if key == STYLE_KEY:
            classified.style = value
            classified.style_index = len(classified.attributes)
        elif key.startswith(METADATA_PREFIX):
            classified.metadata[key] = value
        else:
            classified.attributes[key] = value
    return classified
