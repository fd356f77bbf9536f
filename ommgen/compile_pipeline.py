"""Compilation pipeline from an OMM tree to HTML and CSS."""

from __future__ import annotations

from typing import Any, Iterator, List, Mapping, Set

from .class_names import ClassNameAllocator
from .errors import RecursionLimitError
from .models import CompileOptions, CompileResult, Diagnostic
from .serialize import HtmlSerializer
from .stylesheet import StylesheetCollector
from .types_omm import CLASS_KEY, Node


def _iter_nodes(root: Any, max_depth: int) -> Iterator[Mapping[str, Any]]:
    """Yield every mapping in the tree once, ignoring cycles and over-deep nodes.

    The render walk reports those problems; this only gathers user classes.
    """
    seen: Set[int] = set()
    stack: List[tuple[Any, int]] = [(root, 1)]
    while stack:
        node, depth = stack.pop()
        if not isinstance(node, Mapping) or not node or id(node) in seen or depth > max_depth:
            continue
        seen.add(id(node))
        yield node
        children = next(iter(node.values()))
        if isinstance(children, Mapping):
            stack.append((children, depth + 1))
        elif isinstance(children, (list, tuple)):
            stack.extend((child, depth + 1) for child in reversed(children))


def collect_class_tokens(root: Node, *, max_depth: int = 256) -> Set[str]:
    """Return every class token written by hand anywhere in the tree."""
    tokens: Set[str] = set()
    for node in _iter_nodes(root, max_depth):
        value = node.get(CLASS_KEY)
        if isinstance(value, str):
            tokens.update(value.split())
    return tokens


def compile_tree(root: Node, options: CompileOptions | None = None) -> CompileResult:
    """Compile one OMM tree into HTML, CSS and diagnostics.

    Every call builds its own allocator and collector, so repeated calls on
    the same tree give byte-identical output and calls on different trees
    can run in parallel.

    Raises ``MalformedNodeError`` for a malformed root and
    ``RecursionLimitError`` for over-deep or cyclic input; in both cases no
    output is produced.
    """
    options = options or CompileOptions()
    reserved = collect_class_tokens(root, max_depth=options.max_depth)
    allocator = ClassNameAllocator(options.class_prefix, reserved=reserved)
    collector = StylesheetCollector(reserved=reserved)
    diagnostics: List[Diagnostic] = []

    serializer = HtmlSerializer(options, allocator, collector, diagnostics)
    try:
        html_text = serializer.render(root)
    except RecursionError as exc:
        raise RecursionLimitError(
            "tree and style nesting exceed the interpreter recursion limit"
        ) from exc
    return CompileResult(html=html_text, css=collector.render(), diagnostics=diagnostics)


__all__ = ["collect_class_tokens", "compile_tree"]
