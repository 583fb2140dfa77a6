"""
tests/test_cli.py — Argument parsing and the regionstats entry point.

Requires: pytest
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from regionstats.cli import (
    EXIT_AREAS_UNAVAILABLE,
    EXIT_INVALID_ARGUMENTS,
    EXIT_OK,
    main,
    parse_years,
    split_list,
)
from regionstats.datasets import COMPLETE_POP
from regionstats.filters import UNFILTERED, YearRange

AREAS_CSV = (
    "Local authority code,Name (eng),Name (cym)\n"
    "W06000001,Isle of Anglesey,Ynys Môn\n"
    "W06000011,Swansea,Abertawe\n"
)

POP_CSV = (
    "AuthorityCode," + ",".join(str(y) for y in range(2001, 2012)) + "\n"
    "W06000001," + ",".join(str(v) for v in range(100, 111)) + "\n"
    "W06000011," + ",".join(str(v) for v in range(200, 211)) + "\n"
)


@pytest.fixture()
def data_dir(tmp_path: Path) -> Path:
    (tmp_path / "areas.csv").write_text(AREAS_CSV, encoding="utf-8")
    (tmp_path / COMPLETE_POP.file).write_text(POP_CSV, encoding="utf-8")
    return tmp_path


# ===========================================================================
# Parsing helpers
# ===========================================================================


class TestParseYears:

    @pytest.mark.parametrize("value", ["0", "0-0", " 0 "])
    def test_unrestricted(self, value: str):
        assert parse_years(value) is UNFILTERED

    def test_single_year(self):
        assert parse_years("2010") == YearRange(2010, 2010)

    def test_range(self):
        assert parse_years("2010-2015") == YearRange(2010, 2015)

    @pytest.mark.parametrize("value", [
        "", "10", "2010-", "2010-15", "abcd", "2010:2015", "2015-2010",
        "\u0662\u0660\u0661\u0660", "\uff12\uff10\uff11\uff10-2012", "2010 2012",
    ])
    def test_invalid(self, value: str):
        with pytest.raises(ValueError):
            parse_years(value)


class TestSplitList:

    def test_none(self):
        assert split_list(None) == []

    def test_comma_and_repeat(self):
        assert split_list(["popden, trains", "biz", " ,"]) == ["popden", "trains", "biz"]


# ===========================================================================
# main()
# ===========================================================================


class TestMain:

    def test_json_output(self, data_dir: Path, capsys: pytest.CaptureFixture[str]):
        code = main(["--dir", str(data_dir), "-d", "complete-pop", "-j"])
        assert code == EXIT_OK
        doc = json.loads(capsys.readouterr().out)
        assert sorted(doc) == ["W06000001", "W06000011"]
        assert doc["W06000011"]["names"] == {"eng": "Swansea", "cym": "Abertawe"}
        assert doc["W06000011"]["measures"]["pop"]["values"]["2001"] == 200.0

    def test_filters(self, data_dir: Path, capsys: pytest.CaptureFixture[str]):
        code = main([
            "--dir", str(data_dir),
            "-d", "complete-pop",
            "-a", "w06000011",
            "-y", "2005-2006",
            "--json",
        ])
        assert code == EXIT_OK
        doc = json.loads(capsys.readouterr().out)
        assert list(doc) == ["W06000011"]
        assert doc["W06000011"]["measures"]["pop"]["values"] == {"2005": 204.0, "2006": 205.0}

    def test_measure_filter_excludes_measure(self, data_dir: Path, capsys: pytest.CaptureFixture[str]):
        main(["--dir", str(data_dir), "-d", "complete-pop", "-m", "dens", "-j"])
        doc = json.loads(capsys.readouterr().out)
        assert "measures" not in doc["W06000001"]

    def test_table_output(self, data_dir: Path, capsys: pytest.CaptureFixture[str]):
        code = main(["--dir", str(data_dir), "-d", "complete-pop", "-y", "2001"])
        assert code == EXIT_OK
        out = capsys.readouterr().out
        assert "Isle of Anglesey / Ynys Môn (W06000001)" in out
        assert "Population (pop)" in out
        assert "100.000000" in out

    def test_missing_datasets_are_reported_not_fatal(
        self,
        data_dir: Path,
        capsys: pytest.CaptureFixture[str],
        caplog: pytest.LogCaptureFixture,
    ):
        code = main(["--dir", str(data_dir), "-j"])
        assert code == EXIT_OK
        assert "Error importing dataset popden" in caplog.text
        assert "W06000001" in json.loads(capsys.readouterr().out)

    def test_missing_areas_file(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]):
        code = main(["--dir", str(tmp_path)])
        assert code == EXIT_AREAS_UNAVAILABLE
        assert capsys.readouterr().out == ""

    def test_invalid_years(self, data_dir: Path, capsys: pytest.CaptureFixture[str]):
        code = main(["--dir", str(data_dir), "-y", "20x0"])
        assert code == EXIT_INVALID_ARGUMENTS
        assert "Invalid input for years argument" in capsys.readouterr().err

    def test_unknown_dataset(self, data_dir: Path, capsys: pytest.CaptureFixture[str]):
        code = main(["--dir", str(data_dir), "-d", "nope"])
        assert code == EXIT_INVALID_ARGUMENTS
        assert "No dataset matches key: nope" in capsys.readouterr().err

    def test_undecodable_areas_file(self, data_dir: Path, capsys: pytest.CaptureFixture[str]):
        (data_dir / "areas.csv").write_bytes(
            b"Local authority code,Name (eng),Name (cym)\nW06000001,\xff,X\n"
        )
        code = main(["--dir", str(data_dir), "-d", "complete-pop"])
        assert code == EXIT_AREAS_UNAVAILABLE
        assert capsys.readouterr().out == ""
