"""Render classified OMM nodes to an HTML string."""

from __future__ import annotations

import html
import re
from typing import Any, List, Mapping, Sequence

from .class_names import ClassNameAllocator
from .classify import ClassifiedNode, classify_node
from .errors import (
    InvalidStyleError,
    MalformedNodeError,
    OmmError,
    RecursionLimitError,
    StyleConflictWarning,
    UnsupportedAttributeError,
    UnsupportedChildrenError,
)
from .models import CompileOptions, Diagnostic
from .style_flatten import canonical_style_key, flatten_style, is_empty_style
from .stylesheet import StylesheetCollector
from .types_omm import CLASS_KEY, is_opaque, is_scalar, scalar_text

_ATTR_NAME = re.compile(r"^[^\s\"'>/=\x00-\x1f\x7f]+$")

MALFORMED_PLACEHOLDER = "<!-- omm: malformed node -->"


class HtmlSerializer:
    """Depth-first, pre-order renderer for one compile call.

    Styles are flattened and collected as each element is opened, so the
    stylesheet fills in the same order the HTML is written. Node-local
    problems are appended to ``diagnostics``; only a malformed root and
    ``RecursionLimitError`` propagate.
    """

    def __init__(
        self,
        options: CompileOptions,
        allocator: ClassNameAllocator,
        collector: StylesheetCollector,
        diagnostics: List[Diagnostic],
    ) -> None:
        self.options = options
        self.allocator = allocator
        self.collector = collector
        self.diagnostics = diagnostics
        self.void_tags = options.resolved_void_tags

    def render(self, node: Mapping[str, Any]) -> str:
        parts: List[str] = []
        self._render_node(parts, node, "", 0, depth=1, ancestors=())
        return "".join(parts)

    def _record(self, error: OmmError | StyleConflictWarning) -> None:
        self.diagnostics.append(Diagnostic.from_error(error))

    def _text(self, value: Any) -> str:
        text = scalar_text(value)
        return html.escape(text) if self.options.escape_text else text

    def _render_node(
        self,
        parts: List[str],
        node: Any,
        parent_path: str,
        index: int,
        *,
        depth: int,
        ancestors: tuple[int, ...],
    ) -> None:
        is_root = depth == 1
        slot = "" if is_root else f"[{index}]"
        if depth > self.options.max_depth:
            raise RecursionLimitError(
                f"tree deeper than {self.options.max_depth} levels", path=f"{parent_path}/{slot}"
            )
        if id(node) in ancestors:
            raise RecursionLimitError("cyclic node reference", path=f"{parent_path}/{slot}")

        try:
            classified = classify_node(node, path=f"{parent_path}/{slot}")
        except MalformedNodeError as exc:
            if is_root:
                raise
            self._record(exc)
            parts.append(MALFORMED_PLACEHOLDER)
            return

        path = f"{parent_path}/{classified.tag}{slot}"
        generated = self._style_classes(classified, path, depth)
        attrs = self._render_attrs(classified, generated, path)

        if classified.tag.lower() in self.void_tags:
            if not _is_empty_payload(classified.children):
                self._record(
                    UnsupportedChildrenError(
                        f"void element <{classified.tag}> cannot have children", path=path
                    )
                )
            parts.append(f"<{classified.tag}{attrs}>")
            return

        parts.append(f"<{classified.tag}{attrs}>")
        self._render_children(
            parts, classified.children, path, depth=depth, ancestors=ancestors + (id(node),)
        )
        parts.append(f"</{classified.tag}>")

    def _render_children(
        self,
        parts: List[str],
        payload: Any,
        path: str,
        *,
        depth: int,
        ancestors: tuple[int, ...],
    ) -> None:
        if payload is None:
            return
        if is_opaque(payload):
            self._record(
                UnsupportedChildrenError(
                    "opaque children are host-runtime values and are not rendered", path=path
                )
            )
            return
        if is_scalar(payload):
            parts.append(self._text(payload))
            return
        if isinstance(payload, Mapping):
            self._render_node(parts, payload, path, 0, depth=depth + 1, ancestors=ancestors)
            return
        if isinstance(payload, Sequence) and not isinstance(payload, (str, bytes)):
            for index, child in enumerate(payload):
                if child is None:
                    continue
                if isinstance(child, Mapping):
                    self._render_node(parts, child, path, index, depth=depth + 1, ancestors=ancestors)
                elif is_scalar(child):
                    parts.append(self._text(child))
                else:
                    self._record(
                        UnsupportedChildrenError(
                            f"unsupported child {type(child).__name__} at index {index}", path=path
                        )
                    )
            return
        self._record(
            UnsupportedChildrenError(
                f"unsupported children payload {type(payload).__name__}", path=path
            )
        )

    def _style_classes(self, classified: ClassifiedNode, path: str, depth: int) -> List[str]:
        """Allocate the element's class and collect its rules.

        The style block starts at the element's own depth, so nodes and
        nested style levels draw on the same ``max_depth`` budget.
        """
        if is_empty_style(classified.style):
            return []
        errors: List[InvalidStyleError] = []
        max_depth = self.options.max_depth
        try:
            canonical = canonical_style_key(
                classified.style, max_depth=max_depth, errors=errors, path=path, depth=depth
            )
        except InvalidStyleError as exc:
            errors.append(exc)
            canonical = ""
        for error in errors:
            self._record(error)
        if not canonical:
            return []

        name = self.allocator.allocate(canonical)
        classes = [name]
        rules = flatten_style(
            classified.style, f".{name}", max_depth=max_depth, errors=[], path=path, depth=depth
        )
        for rule in rules:
            selector, suffixed, new_conflict = self.collector.add(rule, name)
            if suffixed is None:
                continue
            if new_conflict:
                self._record(
                    StyleConflictWarning(
                        f"selector {rule.selector!r} already has other declarations; "
                        f"emitted as {selector!r}",
                        path=path,
                    )
                )
            if suffixed not in classes:
                classes.append(suffixed)
        return classes

    def _render_attrs(self, classified: ClassifiedNode, generated: List[str], path: str) -> str:
        attributes = list(classified.attributes.items())
        if generated:
            generated_value = " ".join(generated)
            if CLASS_KEY in classified.attributes:
                attributes = [
                    (name, self._merge_class(value, generated_value, path) if name == CLASS_KEY else value)
                    for name, value in attributes
                ]
            else:
                attributes.insert(classified.style_index or 0, (CLASS_KEY, generated_value))

        parts: List[str] = []
        for name, value in attributes:
            rendered = self._render_attr(name, value, path)
            if rendered:
                parts.append(rendered)
        if not parts:
            return ""
        return " " + " ".join(parts)

    def _merge_class(self, user_value: Any, generated_value: str, path: str) -> str:
        if user_value is None or isinstance(user_value, bool):
            return generated_value
        if not is_scalar(user_value):
            self._record(
                UnsupportedAttributeError(
                    f"unsupported value for attribute 'class': {type(user_value).__name__}",
                    path=path,
                )
            )
            return generated_value
        user_text = scalar_text(user_value).strip()
        return f"{user_text} {generated_value}" if user_text else generated_value

    def _render_attr(self, name: str, value: Any, path: str) -> str | None:
        if not _ATTR_NAME.match(name):
            self._record(UnsupportedAttributeError(f"invalid attribute name {name!r}", path=path))
            return None
        if value is None or value is False:
            return None
        if value is True:
            return name
        if is_scalar(value):
            return f'{name}="{html.escape(scalar_text(value), quote=True)}"'
        self._record(
            UnsupportedAttributeError(
                f"unsupported value for attribute {name!r}: {type(value).__name__}", path=path
            )
        )
        return None


def _is_empty_payload(payload: Any) -> bool:
    if payload is None:
        return True
    if isinstance(payload, (list, tuple)):
        return all(child is None for child in payload)
    return False
