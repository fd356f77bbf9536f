"""Deterministic class names for canonical style blocks."""

from __future__ import annotations

import hashlib
from typing import Dict, Iterable, Set

_DIGEST_LENGTHS = (8, 12, 16, 40)


class ClassNameAllocator:
    """Issue one class name per distinct canonical style key.

    The key covers the whole style block, own declarations and ``&`` rules
    alike (see ``canonical_style_key``). Two blocks with the same own
    declarations but different nested rules get different names, so a
    ``:hover`` rule never reaches an element that did not declare it.

    Names are ``prefix`` plus a short SHA-1 digest of the key, so the same
    block gets the same name across runs. ``reserved`` holds class tokens the
    user already wrote; generated names never collide with them. The table is
    scoped to a single compile call.
    """

    def __init__(self, prefix: str = "omm-", reserved: Iterable[str] = ()) -> None:
        self.prefix = prefix
        self.reserved: Set[str] = set(reserved)
        self._by_key: Dict[str, str] = {}
        self._issued: Set[str] = set()

    def __len__(self) -> int:
        return len(self._by_key)

    def lookup(self, canonical: str) -> str | None:
        return self._by_key.get(canonical)

    def allocate(self, canonical: str) -> str:
        existing = self._by_key.get(canonical)
        if existing is not None:
            return existing
        name = self._fresh_name(canonical)
        self._by_key[canonical] = name
        self._issued.add(name)
        return name

    def _taken(self, name: str) -> bool:
        return name in self.reserved or name in self._issued

    def _fresh_name(self, canonical: str) -> str:
        digest = hashlib.sha1(canonical.encode("utf-8")).hexdigest()
        for length in _DIGEST_LENGTHS:
            name = f"{self.prefix}{digest[:length]}"
            if not self._taken(name):
                return name
        counter = 2
        while self._taken(f"{self.prefix}{digest}-{counter}"):
            counter += 1
        return f"{self.prefix}{digest}-{counter}"
