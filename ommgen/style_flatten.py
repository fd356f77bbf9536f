"""Flatten nested OMM style blocks into plain CSS rules."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Iterator, List, Mapping, Sequence

from .errors import InvalidStyleError, RecursionLimitError
from .types_omm import NESTED_PREFIX, DeclarationSet, StyleBlock, is_scalar, scalar_text

_PROPERTY_NAME = re.compile(r"^(?:--[A-Za-z0-9_-]+|-?[A-Za-z][A-Za-z0-9-]*)$")
# Characters that would end a declaration or rule early.
_UNSAFE_VALUE = re.compile(r"[{};<\r\n]")
_UNSAFE_SELECTOR = re.compile(r"[{};<]")

# Root selector used when computing canonical keys, before a class is known.
SYMBOLIC_ROOT = NESTED_PREFIX


@dataclass(frozen=True)
class StyleRule:
    selector: str
    declarations: DeclarationSet

    def render(self) -> str:
        body = " ".join(f"{prop}: {value};" for prop, value in self.declarations)
        return f"{self.selector} {{ {body} }}"


def _iter_entries(block: Any, *, path: str) -> Iterator[tuple[Any, Any]]:
    if isinstance(block, Mapping):
        yield from block.items()
        return
    if isinstance(block, Sequence) and not isinstance(block, (str, bytes)):
        for entry in block:
            if not (isinstance(entry, (tuple, list)) and len(entry) == 2):
                raise InvalidStyleError(
                    f"style pairs must be (property, value), got {entry!r}", path=path
                )
            yield entry[0], entry[1]
        return
    raise InvalidStyleError(
        f"style block must be a mapping, got {type(block).__name__}", path=path
    )


def is_empty_style(block: Any) -> bool:
    if block is None:
        return True
    if isinstance(block, (Mapping, list, tuple)):
        return len(block) == 0
    return False


def flatten_style(
    block: StyleBlock,
    selector: str,
    *,
    max_depth: int = 256,
    errors: List[InvalidStyleError] | None = None,
    path: str = "",
    depth: int = 1,
) -> List[StyleRule]:
    """Expand ``block`` into rules for ``selector`` and its ``&`` descendants.

    The own declarations come first, followed by nested rules depth-first in
    encounter order. Every ``&`` in a nested key is replaced by the immediate
    parent's resolved selector. A repeated property keeps its first position
    and takes the last value. Values are written as given; numbers are
    stringified without unit inference.

    Invalid entries raise ``InvalidStyleError`` unless an ``errors`` list is
    given, in which case they are appended there and skipped. Cyclic or
    over-deep blocks always raise ``RecursionLimitError``. ``depth`` is the
    level the block starts at, so a style on a nested element shares the
    element's depth budget.
    """
    rules: List[StyleRule] = []
    _flatten_into(rules, block, selector, depth, max_depth, (), errors, path)
    return rules


def _flatten_into(
    rules: List[StyleRule],
    block: Any,
    selector: str,
    depth: int,
    max_depth: int,
    ancestors: tuple[int, ...],
    errors: List[InvalidStyleError] | None,
    path: str,
) -> None:
    if depth > max_depth:
        raise RecursionLimitError(
            f"style nesting deeper than {max_depth} levels at {selector!r}", path=path
        )
    if id(block) in ancestors:
        raise RecursionLimitError(f"cyclic style block at {selector!r}", path=path)
    ancestors = ancestors + (id(block),)

    def reject(message: str) -> None:
        error = InvalidStyleError(message, path=path)
        if errors is None:
            raise error
        errors.append(error)

    own: dict[str, str] = {}
    nested: dict[str, Any] = {}
    for key, value in _iter_entries(block, path=path):
        if not isinstance(key, str):
            reject(f"style key must be a string, got {key!r}")
            continue
        if key.startswith(NESTED_PREFIX):
            if _UNSAFE_SELECTOR.search(key):
                reject(f"nested selector {key!r} contains '{{', '}}', ';' or '<'")
            elif isinstance(value, (Mapping, list, tuple)):
                nested[key] = value
            else:
                reject(f"nested selector {key!r} needs a style block, got {value!r}")
            continue
        if not _PROPERTY_NAME.match(key):
            reject(f"invalid CSS property name {key!r}")
            continue
        if not is_scalar(value):
            reject(f"unsupported value for {key!r}: {value!r}")
            continue
        text = scalar_text(value)
        if _UNSAFE_VALUE.search(text):
            reject(f"value for {key!r} contains '{{', '}}', ';', '<' or a line break")
            continue
        own[key] = text

    if own:
        rules.append(StyleRule(selector, tuple(own.items())))
    for key, child in nested.items():
        child_selector = key.replace(NESTED_PREFIX, selector)
        try:
            _flatten_into(rules, child, child_selector, depth + 1, max_depth, ancestors, errors, path)
        except InvalidStyleError as exc:
            # Only reached for structurally invalid child blocks.
            if errors is None:
                raise
            errors.append(exc)


def canonical_style_key(
    block: StyleBlock,
    *,
    max_depth: int = 256,
    errors: List[InvalidStyleError] | None = None,
    path: str = "",
    depth: int = 1,
) -> str:
    """Stable serialization of a block; equal blocks give equal keys."""
    rules = flatten_style(
        block, SYMBOLIC_ROOT, max_depth=max_depth, errors=errors, path=path, depth=depth
    )
    return "".join(
        rule.selector + "{" + "".join(f"{prop}:{value};" for prop, value in rule.declarations) + "}"
        for rule in rules
    )
