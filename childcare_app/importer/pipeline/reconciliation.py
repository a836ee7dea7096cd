"""
Resolution of free-text family names to canonical ``Family`` rows.

The resolver works off an in-memory index loaded once per run, so lookups are
pure and deterministic: records are resolved in document order and the first
spelling seen for a new name becomes the family's name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Literal

from .mapper import FamilyReference


def family_key(name: str) -> str:
    """Match key for family names: trimmed and case-folded, otherwise exact."""

    return name.strip().casefold()


@dataclass(frozen=True)
class FamilyResolution:
    """
    Outcome of resolving a family reference.

    `action` values:
    - ``existing``: link to ``family_id``.
    - ``create``: no family matches; a new auto-created family named ``name`` is needed.
    - ``projected``: preview only; an earlier record in this run would have created it.
    """

    action: Literal["existing", "create", "projected"]
    name: str
    family_id: int | None = None
    warning: str | None = None


class FamilyResolver:
    def __init__(self, families: Iterable[tuple[int, str]] = ()):
        self._index: dict[str, list[int]] = {}
        self._projected: set[str] = set()
        for family_id, name in families:
            if name and name.strip():
                self._index.setdefault(family_key(name), []).append(family_id)
        for ids in self._index.values():
            ids.sort()

    def resolve(self, reference: FamilyReference) -> FamilyResolution:
        key = family_key(reference.name)
        candidates = self._index.get(key)
        if candidates:
            chosen = candidates[0]
            warning = None
            if len(candidates) > 1:
                warning = (
                    f"Family name '{reference.name}' matches {len(candidates)} families "
                    f"(ids {', '.join(str(c) for c in candidates)}); linked to lowest id {chosen}"
                )
            return FamilyResolution(action="existing", name=reference.name, family_id=chosen, warning=warning)
        if key in self._projected:
            return FamilyResolution(action="projected", name=reference.name)
        return FamilyResolution(action="create", name=reference.name.strip())

    def register(self, family_id: int, name: str) -> None:
        """Make a committed family visible to subsequent resolutions."""

        ids = self._index.setdefault(family_key(name), [])
        ids.append(family_id)
        ids.sort()

    def project(self, name: str) -> None:
        """Record that a preview run would have created ``name``."""

        self._projected.add(family_key(name))

    def __len__(self) -> int:
        return sum(len(ids) for ids in self._index.values())
