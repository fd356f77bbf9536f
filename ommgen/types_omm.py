"""OMM tree type definitions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Sequence, Union


@dataclass(frozen=True)
class Opaque:
    """Host-runtime value (reactive function, handle) that is never evaluated."""

    handle: Any
    label: str = "opaque"


Node = Mapping[str, Any]
StylePairs = Sequence[tuple]
StyleBlock = Union[Mapping[str, Any], StylePairs]
Children = Union[Sequence[Any], Node, str, None, Opaque]

Declaration = tuple[str, str]
DeclarationSet = tuple[Declaration, ...]

STYLE_KEY = "style"
CLASS_KEY = "class"
METADATA_PREFIX = "_"
NESTED_PREFIX = "&"

DEFAULT_VOID_TAGS = frozenset(
    {
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)


def is_opaque(value: Any) -> bool:
    return isinstance(value, Opaque) or callable(value)


def is_scalar(value: Any) -> bool:
    """Strings and real numbers; bool is excluded on purpose."""
    if isinstance(value, bool):
        return False
    return isinstance(value, (str, int, float))


def scalar_text(value: Any) -> str:
    return value if isinstance(value, str) else str(value)
