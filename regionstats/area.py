"""
regionstats.area — An administrative area with localized names and measures.

Design contract:
    - authority_code is case-preserving and never changes.
    - Name keys are three-letter lowercase language codes.
    - Measure keys are lowercase codenames.
    - An Area owns its Measures: set_measure() stores a copy.
"""

from __future__ import annotations

from regionstats.constants import LANG_CODE_RE
from regionstats.errors import InvalidFormatError, NotFoundError
from regionstats.measure import Measure


class Area:
    """A named administrative area keyed by its authority code."""

    __slots__ = ("_authority_code", "_names", "_measures")

    def __init__(self, authority_code: str) -> None:
        self._authority_code: str = authority_code
        self._names: dict[str, str] = {}
        self._measures: dict[str, Measure] = {}

    @property
    def authority_code(self) -> str:
        return self._authority_code

    @property
    def names(self) -> dict[str, str]:
        """Copy of lang → name, ordered by language code."""
        return {lang: self._names[lang] for lang in sorted(self._names)}

    @property
    def measures(self) -> dict[str, Measure]:
        """Copy of codename → Measure, ordered by codename."""
        return {code: self._measures[code] for code in sorted(self._measures)}

    def __len__(self) -> int:
        return len(self._measures)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Area):
            return NotImplemented
        return (
            self._authority_code == other._authority_code
            and self._names == other._names
            and self._measures == other._measures
        )

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        return (
            f"Area({self._authority_code!r}, names={self.names!r}, "
            f"measures={sorted(self._measures)!r})"
        )

    # -----------------------------------------------------------------------
    # Names
    # -----------------------------------------------------------------------

    def set_name(self, lang: str, name: str) -> None:
        """Set the display name for a language.

        Raises:
            InvalidFormatError: if ``lang`` is not exactly three letters.
        """
        code = lang.lower()
        if not LANG_CODE_RE.fullmatch(code):
            raise InvalidFormatError(lang)
        self._names[code] = name

    def get_name(self, lang: str) -> str:
        try:
            return self._names[lang.lower()]
        except KeyError:
            raise NotFoundError("name", lang) from None

    def has_name(self, lang: str) -> bool:
        return lang.lower() in self._names

    # -----------------------------------------------------------------------
    # Measures
    # -----------------------------------------------------------------------

    def set_measure(self, codename: str, measure: Measure) -> None:
        """Add a measure, merging into an existing one with the same codename."""
        key = codename.lower()
        existing = self._measures.get(key)
        if existing is not None:
            existing.overwrite_from(measure)
        else:
            self._measures[key] = measure.copy()

    def get_measure(self, codename: str) -> Measure:
        try:
            return self._measures[codename.lower()]
        except KeyError:
            raise NotFoundError("measure", codename) from None

    def has_measure(self, codename: str) -> bool:
        return codename.lower() in self._measures

    # -----------------------------------------------------------------------
    # Merge
    # -----------------------------------------------------------------------

    def overwrite_from(self, other: Area) -> Area:
        """Union names then measures; ``other`` wins on every collision."""
        for lang, name in other._names.items():
            self._names[lang] = name
        for codename, measure in other._measures.items():
            self.set_measure(codename, measure)
        return self

    def copy(self) -> Area:
        clone = Area(self._authority_code)
        clone._names = dict(self._names)
        clone._measures = {code: m.copy() for code, m in self._measures.items()}
        return clone
