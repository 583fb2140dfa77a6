"""
regionstats.filters — Pure inclusion predicates shared by every reader.

A filter is either UNFILTERED or a concrete filter value:

    AreaFilter    = Unfiltered | TermFilter
    MeasureFilter = Unfiltered | TermFilter
    YearFilter    = Unfiltered | YearRange

Builders collapse the "include everything" spellings (empty term set,
the (0, 0) year range) to UNFILTERED so predicates never have to
special-case them.

Matching rules:
    - Area:    any term is a case-insensitive substring of the authority
               code or of any checked name.
    - Measure: the codename equals any term, case-insensitively.
    - Year:    start <= year <= end (closed range).
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Union

from regionstats.constants import ALL_KEYWORD, UNRESTRICTED_YEARS


@dataclass(frozen=True, slots=True)
class Unfiltered:
    """Admits everything."""


UNFILTERED = Unfiltered()


@dataclass(frozen=True, slots=True)
class TermFilter:
    """A non-empty set of lowercase match terms."""

    terms: frozenset[str]


@dataclass(frozen=True, slots=True)
class YearRange:
    """A closed, inclusive range of years."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(
                f"Year range start {self.start} is after end {self.end}."
            )


AreaFilter = Union[Unfiltered, TermFilter]
MeasureFilter = Union[Unfiltered, TermFilter]
YearFilter = Union[Unfiltered, YearRange]


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def _term_filter(terms: Iterable[str] | None) -> Unfiltered | TermFilter:
    if terms is None:
        return UNFILTERED
    normalized = frozenset(t.strip().lower() for t in terms if t and t.strip())
    if not normalized or ALL_KEYWORD in normalized:
        return UNFILTERED
    return TermFilter(normalized)


def area_filter(terms: Iterable[str] | None = None) -> AreaFilter:
    """Build an area filter; None, empty or containing "all" → UNFILTERED."""
    return _term_filter(terms)


def measure_filter(terms: Iterable[str] | None = None) -> MeasureFilter:
    """Build a measure filter; None, empty or containing "all" → UNFILTERED."""
    return _term_filter(terms)


def year_filter(start: int = 0, end: int = 0) -> YearFilter:
    """Build a year filter; the (0, 0) range → UNFILTERED."""
    if (start, end) == UNRESTRICTED_YEARS:
        return UNFILTERED
    return YearRange(start, end)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def area_included(flt: AreaFilter, authority_code: str, *names: str) -> bool:
    """True if the area passes ``flt``, checking the code and every name."""
    if isinstance(flt, Unfiltered):
        return True
    haystacks = [authority_code.lower()] + [n.lower() for n in names if n]
    return any(term in hay for term in flt.terms for hay in haystacks)


def measure_included(flt: MeasureFilter, codename: str) -> bool:
    if isinstance(flt, Unfiltered):
        return True
    return codename.lower() in flt.terms


def year_included(flt: YearFilter, year: int) -> bool:
    if isinstance(flt, Unfiltered):
        return True
    return flt.start <= year <= flt.end
