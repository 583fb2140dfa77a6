"""
tests/test_model.py — Measure, Area and AreaCollection.

Covers:
    - Measure series ordering and derived statistics
    - Right-biased merges at every level
    - Language-code validation on Area names
    - Idempotent upserts and NotFound lookups
"""

from __future__ import annotations

import pytest

from regionstats.area import Area
from regionstats.areas import AreaCollection
from regionstats.errors import InvalidFormatError, NotFoundError
from regionstats.measure import Measure


def _measure(codename: str, label: str, series: dict[int, float]) -> Measure:
    m = Measure(codename, label)
    for year, value in series.items():
        m.set_value(year, value)
    return m


# ===========================================================================
# Measure
# ===========================================================================


class TestMeasure:

    def test_codename_is_lowercased(self):
        assert Measure("POP", "Population").codename == "pop"

    def test_series_is_year_ordered(self):
        m = _measure("pop", "Population", {2005: 3.0, 1999: 1.0, 2001: 2.0})
        assert list(m.series) == [1999, 2001, 2005]
        assert m.years == [1999, 2001, 2005]
        assert m.values == [1.0, 2.0, 3.0]

    def test_set_value_replaces_existing_year(self):
        m = _measure("pop", "Population", {2000: 1.0})
        m.set_value(2000, 5.0)
        assert m.get_value(2000) == 5.0
        assert len(m) == 1

    def test_get_value_missing_year_raises(self):
        with pytest.raises(NotFoundError):
            Measure("pop").get_value(1999)

    def test_series_is_a_copy(self):
        m = _measure("pop", "Population", {2000: 1.0})
        m.series[2001] = 2.0
        assert 2001 not in m

    def test_average(self):
        m = _measure("x", "X", {2000: 10, 2001: 20, 2002: 30})
        assert m.get_average() == 20

    def test_difference_uses_first_and_last_year(self):
        m = _measure("x", "X", {2010: 150, 1999: 100})
        assert m.get_difference() == 50

    def test_difference_as_percentage_of_last_value(self):
        m = _measure("x", "X", {1999: 100, 2010: 150})
        assert m.get_difference_as_percentage() == pytest.approx(33.3333, rel=1e-4)

    def test_statistics_on_empty_measure(self):
        m = Measure("x")
        assert m.get_average() == 0.0
        assert m.get_difference() == 0.0
        assert m.get_difference_as_percentage() == 0.0

    def test_statistics_on_single_value(self):
        m = _measure("x", "X", {2000: 7.0})
        assert m.get_average() == 7.0
        assert m.get_difference() == 0.0
        assert m.get_difference_as_percentage() == 0.0

    def test_percentage_with_zero_last_value(self):
        m = _measure("x", "X", {1999: 10.0, 2000: 0.0})
        assert m.get_difference() == -10.0
        assert m.get_difference_as_percentage() == 0.0

    def test_merge_disjoint_years_is_union(self):
        a = _measure("x", "X", {1999: 1.0})
        b = _measure("x", "X", {2000: 2.0})
        a.overwrite_from(b)
        assert a.series == {1999: 1.0, 2000: 2.0}

    def test_merge_shared_year_keeps_incoming_value(self):
        a = _measure("x", "Old", {1999: 1.0, 2000: 2.0})
        b = _measure("x", "New", {2000: 9.0})
        a.overwrite_from(b)
        assert a.series == {1999: 1.0, 2000: 9.0}
        assert a.label == "New"

    def test_equality(self):
        assert _measure("x", "X", {1: 1.0}) == _measure("X", "X", {1: 1.0})
        assert _measure("x", "X", {1: 1.0}) != _measure("x", "Y", {1: 1.0})
        assert _measure("x", "X", {1: 1.0}) != _measure("x", "X", {1: 2.0})

    def test_copy_is_independent(self):
        a = _measure("x", "X", {1: 1.0})
        b = a.copy()
        b.set_value(2, 2.0)
        assert a == _measure("x", "X", {1: 1.0})


# ===========================================================================
# Area
# ===========================================================================


class TestArea:

    @pytest.mark.parametrize("lang", ["eng", "cym", "fra", "ENG"])
    def test_set_then_get_name(self, lang: str):
        area = Area("W06000001")
        area.set_name(lang, "Anglesey")
        assert area.get_name(lang) == "Anglesey"
        assert area.has_name(lang)

    @pytest.mark.parametrize("lang", ["en", "engl", "e1g", "", "en "])
    def test_invalid_language_code_raises(self, lang: str):
        area = Area("W06000001")
        with pytest.raises(InvalidFormatError):
            area.set_name(lang, "Anglesey")
        assert area.names == {}

    def test_invalid_format_is_a_value_error(self):
        with pytest.raises(ValueError):
            Area("W1").set_name("xx", "X")

    def test_get_missing_name_raises(self):
        with pytest.raises(NotFoundError):
            Area("W1").get_name("eng")

    def test_get_missing_measure_raises(self):
        with pytest.raises(NotFoundError):
            Area("W1").get_measure("pop")

    def test_names_ordered_by_language(self):
        area = Area("W1")
        area.set_name("eng", "Test")
        area.set_name("cym", "Prawf")
        assert list(area.names) == ["cym", "eng"]

    def test_set_measure_stores_a_copy(self):
        area = Area("W1")
        m = _measure("pop", "Population", {2000: 1.0})
        area.set_measure("pop", m)
        m.set_value(2001, 2.0)
        assert area.get_measure("pop").series == {2000: 1.0}

    def test_set_measure_merges_existing_codename(self):
        area = Area("W1")
        area.set_measure("pop", _measure("pop", "Population", {2000: 1.0}))
        area.set_measure("POP", _measure("pop", "Population", {2001: 2.0}))
        assert len(area) == 1
        assert area.get_measure("pop").series == {2000: 1.0, 2001: 2.0}

    def test_overwrite_from_incoming_wins(self):
        a = Area("W1")
        a.set_name("eng", "Old")
        a.set_name("cym", "Hen")
        a.set_measure("pop", _measure("pop", "Population", {2000: 1.0}))

        b = Area("W1")
        b.set_name("eng", "New")
        b.set_measure("pop", _measure("pop", "Population", {2000: 5.0}))
        b.set_measure("dens", _measure("dens", "Density", {2000: 3.0}))

        a.overwrite_from(b)
        assert a.names == {"cym": "Hen", "eng": "New"}
        assert a.get_measure("pop").series == {2000: 5.0}
        assert list(a.measures) == ["dens", "pop"]

    def test_equality(self):
        a, b = Area("W1"), Area("W1")
        a.set_name("eng", "Test")
        b.set_name("eng", "Test")
        assert a == b
        b.set_measure("pop", Measure("pop"))
        assert a != b
        assert Area("W1") != Area("W2")


# ===========================================================================
# AreaCollection
# ===========================================================================


class TestAreaCollection:

    def _area(self, code: str, name: str, series: dict[int, float] | None = None) -> Area:
        area = Area(code)
        area.set_name("eng", name)
        if series:
            area.set_measure("pop", _measure("pop", "Population", series))
        return area

    def test_upsert_inserts(self):
        areas = AreaCollection()
        areas.upsert("W1", self._area("W1", "Test"))
        assert "W1" in areas
        assert len(areas) == 1

    def test_upsert_is_idempotent(self):
        once, twice = AreaCollection(), AreaCollection()
        area = self._area("W1", "Test", {2000: 1.0})
        once.upsert("W1", area)
        twice.upsert("W1", area)
        twice.upsert("W1", area)
        assert once == twice

    def test_upsert_merges_right_biased(self):
        areas = AreaCollection()
        areas.upsert("W1", self._area("W1", "Old", {2000: 1.0, 2001: 2.0}))
        areas.upsert("W1", self._area("W1", "New", {2001: 9.0}))
        area = areas.get("W1")
        assert area.get_name("eng") == "New"
        assert area.get_measure("pop").series == {2000: 1.0, 2001: 9.0}

    def test_upsert_stores_a_copy(self):
        areas = AreaCollection()
        area = self._area("W1", "Test")
        areas.upsert("W1", area)
        area.set_name("eng", "Changed")
        assert areas.get("W1").get_name("eng") == "Test"

    def test_get_missing_raises(self):
        with pytest.raises(NotFoundError, match="W9"):
            AreaCollection().get("W9")

    def test_iteration_in_code_order(self):
        areas = AreaCollection()
        for code in ["W3", "W1", "W2"]:
            areas.upsert(code, self._area(code, code))
        assert [a.authority_code for a in areas] == ["W1", "W2", "W3"]
        assert areas.codes() == ["W1", "W2", "W3"]

    def test_merge_from(self):
        left, right = AreaCollection(), AreaCollection()
        left.upsert("W1", self._area("W1", "One", {2000: 1.0}))
        right.upsert("W1", self._area("W1", "Uno", {2001: 2.0}))
        right.upsert("W2", self._area("W2", "Two"))
        left.merge_from(right)
        assert left.codes() == ["W1", "W2"]
        assert left.get("W1").get_name("eng") == "Uno"
        assert left.get("W1").get_measure("pop").series == {2000: 1.0, 2001: 2.0}
