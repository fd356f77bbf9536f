"""Exceptions raised while compiling an OMM tree."""

from __future__ import annotations


class OmmError(Exception):
    """Base class for compile errors.

    ``path`` locates the offending node, e.g. ``/div/ul[2]/li[0]``.
    """

    def __init__(self, message: str, *, path: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.path = path

    def __str__(self) -> str:
        if self.path:
            return f"{self.message} (at {self.path})"
        return self.message


class MalformedNodeError(OmmError):
    """No usable tag key, or a reserved key in tag position."""


class UnsupportedAttributeError(OmmError):
    """Attribute value or name the compiler cannot serialize."""


class UnsupportedChildrenError(OmmError):
    """Children payload the compiler cannot render (opaque host values)."""


class InvalidStyleError(OmmError):
    """Style entry that is neither a declaration nor an ``&`` nested block."""


class RecursionLimitError(OmmError):
    """Tree too deep or cyclic; aborts the whole compile call."""


class StyleConflictWarning(UserWarning):
    """Two different declaration sets resolved to the same selector."""

    def __init__(self, message: str, *, path: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.path = path


__all__ = [
    "InvalidStyleError",
    "MalformedNodeError",
    "OmmError",
    "RecursionLimitError",
    "StyleConflictWarning",
    "UnsupportedAttributeError",
    "UnsupportedChildrenError",
]
