"""Ordered, deduplicated stylesheet for one compile call."""

from __future__ import annotations

from typing import Dict, Iterable, List, NamedTuple, Set, Tuple

from .style_flatten import StyleRule
from .types_omm import DeclarationSet


class Placement(NamedTuple):
    """Where a rule ended up.

    ``suffixed_class`` is None unless a selector conflict forced a rename;
    ``new_conflict`` is True only the first time a given rule is renamed.
    """

    selector: str
    suffixed_class: str | None = None
    new_conflict: bool = False


class StylesheetCollector:
    """Collect rules in first-seen order, one declaration set per selector.

    When a rule arrives for a selector that already holds different
    declarations, the owning class token inside the selector is suffixed
    (``.omm-abc:hover`` becomes ``.omm-abc--2:hover``) and the suffixed
    token is reported back so the element can carry it.
    """

    def __init__(self, reserved: Iterable[str] = ()) -> None:
        self.reserved: Set[str] = set(reserved)
        self._rules: List[StyleRule] = []
        self._by_selector: Dict[str, DeclarationSet] = {}
        self._renamed: Dict[Tuple[str, DeclarationSet], Placement] = {}

    def __len__(self) -> int:
        return len(self._rules)

    def __iter__(self):
        return iter(self._rules)

    @property
    def rules(self) -> Tuple[StyleRule, ...]:
        return tuple(self._rules)

    def _store(self, selector: str, declarations: DeclarationSet) -> bool:
        """Store the rule; return False if the selector holds other declarations."""
        existing = self._by_selector.get(selector)
        if existing is None:
            self._by_selector[selector] = declarations
            self._rules.append(StyleRule(selector, declarations))
            return True
        return existing == declarations

    def add(self, rule: StyleRule, owner_class: str) -> Placement:
        """Add ``rule`` and return where it was placed."""
        if self._store(rule.selector, rule.declarations):
            return Placement(rule.selector)
        key = (rule.selector, rule.declarations)
        if key in self._renamed:
            return self._renamed[key]
        owner = f".{owner_class}"
        counter = 2
        while True:
            suffixed = f"{owner_class}--{counter}"
            counter += 1
            if suffixed in self.reserved:
                continue
            if owner in rule.selector:
                selector = rule.selector.replace(owner, f".{suffixed}")
            else:
                selector = f"{rule.selector}.{suffixed}"
            if self._store(selector, rule.declarations):
                self._renamed[key] = Placement(selector, suffixed)
                return Placement(selector, suffixed, new_conflict=True)

    def render(self) -> str:
        if not self._rules:
            return ""
        return "\n".join(rule.render() for rule in self._rules) + "\n"
