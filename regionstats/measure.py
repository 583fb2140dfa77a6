"""
regionstats.measure — A single named metric with a value per year.

Design contract:
    - codename is always lowercase.
    - At most one value per year; set_value() on an existing year replaces it.
    - Every read (series, years, values, statistics) is in ascending year
      order, independent of insertion order.
    - overwrite_from() is a right-biased union: incoming label and values win,
      years only present locally are kept.
"""

from __future__ import annotations

from regionstats.errors import NotFoundError


class Measure:
    """A named statistical metric holding one float per year."""

    __slots__ = ("_codename", "label", "_data")

    def __init__(self, codename: str = "", label: str = "") -> None:
        self._codename: str = codename.lower()
        self.label: str = label
        self._data: dict[int, float] = {}

    @property
    def codename(self) -> str:
        return self._codename

    @property
    def series(self) -> dict[int, float]:
        """Copy of the year → value mapping, ordered by year ascending."""
        return {year: self._data[year] for year in sorted(self._data)}

    @property
    def years(self) -> list[int]:
        return sorted(self._data)

    @property
    def values(self) -> list[float]:
        return [self._data[year] for year in sorted(self._data)]

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, year: object) -> bool:
        return year in self._data

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Measure):
            return NotImplemented
        return (
            self._codename == other._codename
            and self.label == other.label
            and self._data == other._data
        )

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        return f"Measure({self._codename!r}, {self.label!r}, {self.series!r})"

    # -----------------------------------------------------------------------
    # Values
    # -----------------------------------------------------------------------

    def set_value(self, year: int, value: float) -> None:
        """Insert or replace the value for ``year``."""
        self._data[int(year)] = float(value)

    def get_value(self, year: int) -> float:
        """Return the value for ``year``.

        Raises:
            NotFoundError: if there is no value for that year.
        """
        try:
            return self._data[year]
        except KeyError:
            raise NotFoundError("year", year) from None

    # -----------------------------------------------------------------------
    # Derived statistics
    # -----------------------------------------------------------------------

    def get_difference(self) -> float:
        """Last-year value minus first-year value; 0.0 with fewer than 2 years."""
        if len(self._data) < 2:
            return 0.0
        years = sorted(self._data)
        return self._data[years[-1]] - self._data[years[0]]

    def get_difference_as_percentage(self) -> float:
        """Difference as a percentage of the last-year value.

        Returns 0.0 with fewer than 2 years, and 0.0 when the last-year
        value is zero.
        """
        if len(self._data) < 2:
            return 0.0
        last = self._data[max(self._data)]
        if last == 0:
            return 0.0
        return self.get_difference() / last * 100

    def get_average(self) -> float:
        """Arithmetic mean of all values; 0.0 when empty."""
        if not self._data:
            return 0.0
        return sum(self._data.values()) / len(self._data)

    # -----------------------------------------------------------------------
    # Merge
    # -----------------------------------------------------------------------

    def overwrite_from(self, other: Measure) -> Measure:
        """Take ``other``'s label and upsert every one of its values."""
        self.label = other.label
        for year, value in other._data.items():
            self._data[year] = value
        return self

    def copy(self) -> Measure:
        clone = Measure(self._codename, self.label)
        clone._data = dict(self._data)
        return clone
