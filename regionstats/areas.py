"""
regionstats.areas — Top-level keyed store of Areas.

Design contract:
    - One Area per authority code.
    - upsert() merges into an existing Area (incoming data wins) or inserts
      a copy; repeated identical upserts leave the same state.
    - Iteration is in authority-code order.
    - The collection never shrinks.
"""

from __future__ import annotations

from collections.abc import Iterator

from regionstats.area import Area
from regionstats.errors import NotFoundError


class AreaCollection:
    """All Areas imported during a run, keyed by authority code."""

    def __init__(self) -> None:
        self._areas: dict[str, Area] = {}

    def upsert(self, authority_code: str, area: Area) -> None:
        existing = self._areas.get(authority_code)
        if existing is not None:
            existing.overwrite_from(area)
        else:
            self._areas[authority_code] = area.copy()

    def get(self, authority_code: str) -> Area:
        try:
            return self._areas[authority_code]
        except KeyError:
            raise NotFoundError("area", authority_code) from None

    def codes(self) -> list[str]:
        return sorted(self._areas)

    def merge_from(self, other: AreaCollection) -> None:
        """Upsert every Area of ``other``, in authority-code order."""
        for area in other:
            self.upsert(area.authority_code, area)

    def __len__(self) -> int:
        return len(self._areas)

    def __contains__(self, authority_code: object) -> bool:
        return authority_code in self._areas

    def __iter__(self) -> Iterator[Area]:
        for code in sorted(self._areas):
            yield self._areas[code]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AreaCollection):
            return NotImplemented
        return self._areas == other._areas

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        return f"AreaCollection({self.codes()!r})"
