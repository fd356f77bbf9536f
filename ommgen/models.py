"""Pydantic models for compile options and results."""

import re
from pathlib import Path
from typing import List, Literal, Set

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .types_omm import DEFAULT_VOID_TAGS

_CSS_IDENT_START = re.compile(r"^-?[A-Za-z_][A-Za-z0-9_-]*$")
_TAG_NAME = re.compile(r"^[A-Za-z][A-Za-z0-9-]*$")


class CompileOptions(BaseModel):
    """Options recognized by the tree compiler."""

    class_prefix: str = Field(
        "omm-",
        alias="classPrefix",
        description="Prefix for generated class names; must start a valid CSS identifier.",
    )
    escape_text: bool = Field(
        True,
        alias="escapeText",
        description="HTML-escape text children. Disable only for trusted content.",
    )
    void_tags: Set[str] = Field(
        default_factory=lambda: set(DEFAULT_VOID_TAGS),
        alias="voidTags",
        description="Tags serialized without a closing tag when they have no children.",
    )
    extra_void_tags: Set[str] = Field(
        default_factory=set,
        alias="extraVoidTags",
        description="Additional void tags merged into voidTags.",
    )
    max_depth: int = Field(
        256,
        alias="maxDepth",
        ge=1,
        le=400,
        description="Maximum nesting depth for nodes and style blocks.",
    )

    model_config = ConfigDict(populate_by_name=True)

    @field_validator("class_prefix")
    @classmethod
    def _check_prefix(cls, value: str) -> str:
        if not _CSS_IDENT_START.match(value):
            raise ValueError(f"classPrefix {value!r} does not start a valid CSS identifier")
        return value

    @field_validator("void_tags", "extra_void_tags")
    @classmethod
    def _check_tags(cls, value: Set[str]) -> Set[str]:
        bad = sorted(tag for tag in value if not _TAG_NAME.match(tag))
        if bad:
            raise ValueError(f"invalid tag names: {', '.join(bad)}")
        return {tag.lower() for tag in value}

    @property
    def resolved_void_tags(self) -> frozenset[str]:
        return frozenset(self.void_tags | self.extra_void_tags)


DiagnosticKind = Literal[
    "MalformedNodeError",
    "UnsupportedAttributeError",
    "UnsupportedChildrenError",
    "InvalidStyleError",
    "StyleConflictWarning",
]


class Diagnostic(BaseModel):
    """Non-fatal problem recorded during a compile call."""

    kind: DiagnosticKind = Field(..., description="Name of the error or warning class.")
    message: str = Field(..., description="Human readable explanation.")
    path: str = Field("", description="Location of the node, e.g. /div/ul[2]/li[0].")

    @classmethod
    def from_error(cls, error) -> "Diagnostic":
        return cls(kind=type(error).__name__, message=error.message, path=error.path)


class CompileResult(BaseModel):
    """HTML and CSS produced by one compile call."""

    html: str = Field(..., description="Serialized HTML fragment.")
    css: str = Field(..., description="Deduplicated stylesheet text.")
    diagnostics: List[Diagnostic] = Field(
        default_factory=list,
        description="Node-local problems that were contained during rendering.",
    )

    @property
    def ok(self) -> bool:
        return not self.diagnostics


def load_options(path: Path) -> CompileOptions:
    """Read compile options from a YAML mapping."""

    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a mapping of options")
    return CompileOptions.model_validate(data)


__all__ = [
    "CompileOptions",
    "CompileResult",
    "Diagnostic",
    "DiagnosticKind",
    "load_options",
]
