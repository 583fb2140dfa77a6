"""
regionstats.readers — Format readers for the three source shapes.

Supported shapes (SourceDataType):

    authority_code_csv     code,eng name,cym name lookup table
    authority_by_year_csv  one measure per file; code column then one
                           column per year
    welsh_stats_json       {"value": [ {flat record}, ... ]}, one value
                           per record

Contract shared by every reader (entry point: ingest()):
    - Filters are applied while parsing, so discarded rows never build
      Area or Measure objects.
    - Rows are merged into a private staging collection. The target
      AreaCollection is only touched once the whole stream has parsed,
      so a fatal error (SchemaMismatchError, MalformedValueError,
      StreamUnavailableError) leaves it exactly as it was.
    - Recoverable row problems are recorded as warnings on the returned
      IngestReport and logged; parsing continues.
"""

from __future__ import annotations

import csv
import json
import logging
import math
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any, TextIO

from regionstats.area import Area
from regionstats.areas import AreaCollection
from regionstats.constants import LANG_ENGLISH, LANG_WELSH
from regionstats.datasets import (
    ColumnMapping,
    SourceColumn,
    SourceDataType,
    require_columns,
)
from regionstats.errors import (
    MalformedValueError,
    SchemaMismatchError,
    StreamUnavailableError,
)
from regionstats.filters import (
    UNFILTERED,
    AreaFilter,
    MeasureFilter,
    YearFilter,
    area_included,
    measure_included,
    year_included,
)
from regionstats.measure import Measure

logger = logging.getLogger("regionstats.readers")


# ---------------------------------------------------------------------------
# IngestReport — per-source result
# ---------------------------------------------------------------------------


@dataclass
class IngestReport:
    """Outcome of ingesting one source.

    Fields:
        source: Name of the stream (path, URL or "<stream>").
        data_type: Format the source was read as.
        rows_read: Data rows/records parsed, before area filtering.
        areas_merged: Distinct areas merged into the target collection.
        warnings: Row-level problems that did not abort the source.
    """
    source: str
    data_type: SourceDataType
    rows_read: int = 0
    areas_merged: int = 0
    warnings: list[str] = field(default_factory=list)

    def warn(self, row: int, detail: str) -> None:
        message = f"row {row}: {detail}"
        self.warnings.append(message)
        logger.warning("%s: %s", self.source, message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "data_type": self.data_type.value,
            "rows_read": self.rows_read,
            "areas_merged": self.areas_merged,
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True, slots=True)
class _ReadContext:
    source: str
    cols: ColumnMapping
    area_filter: AreaFilter
    measure_filter: MeasureFilter
    year_filter: YearFilter
    expected_columns: int | None


# ---------------------------------------------------------------------------
# Safe conversions
# ---------------------------------------------------------------------------

def _parse_float(raw: Any, source: str, where: str) -> float:
    if isinstance(raw, bool):
        raise MalformedValueError(f"{where}: {raw!r} is not a number", source=source)
    if isinstance(raw, (int, float)):
        value = float(raw)
    else:
        try:
            value = float(str(raw).strip())
        except ValueError:
            raise MalformedValueError(
                f"{where}: {raw!r} is not a number", source=source
            ) from None
    if not math.isfinite(value):
        raise MalformedValueError(f"{where}: {raw!r} is not a finite number", source=source)
    return value


def _parse_text(raw: Any, source: str, where: str) -> str:
    if not isinstance(raw, str):
        raise MalformedValueError(f"{where}: {raw!r} is not a string", source=source)
    return raw


def _parse_year(raw: Any, source: str, where: str) -> int:
    if isinstance(raw, bool):
        raise MalformedValueError(f"{where}: {raw!r} is not a year", source=source)
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float) and raw.is_integer():
        return int(raw)
    try:
        return int(str(raw).strip())
    except ValueError:
        raise MalformedValueError(f"{where}: {raw!r} is not a year", source=source) from None


# ---------------------------------------------------------------------------
# CSV helpers
# ---------------------------------------------------------------------------

def _csv_rows(stream: TextIO, source: str) -> tuple[list[str], Iterator[tuple[int, list[str]]]]:
    """Return (header, numbered data rows). Blank lines are skipped."""
    reader = csv.reader(stream)
    header = next(reader, None)
    if header is None or not any(cell.strip() for cell in header):
        raise StreamUnavailableError("Source has no content", source=source)

    def rows() -> Iterator[tuple[int, list[str]]]:
        for row in reader:
            if not any(cell.strip() for cell in row):
                continue
            yield reader.line_num, row

    return [cell.strip() for cell in header], rows()


# ---------------------------------------------------------------------------
# authority_code_csv
# ---------------------------------------------------------------------------

def _read_authority_code_csv(
    stream: TextIO,
    ctx: _ReadContext,
    staging: AreaCollection,
    report: IngestReport,
) -> None:
    expected = [
        ctx.cols[SourceColumn.AUTH_CODE],
        ctx.cols[SourceColumn.AUTH_NAME_ENG],
        ctx.cols[SourceColumn.AUTH_NAME_CYM],
    ]
    header, rows = _csv_rows(stream, ctx.source)
    if len(header) != len(expected):
        raise SchemaMismatchError(
            f"Expected {len(expected)} columns, found {len(header)}", source=ctx.source
        )
    if header != expected:
        raise SchemaMismatchError(
            f"Incorrect column names: expected {expected}, found {header}",
            source=ctx.source,
        )

    for line_no, row in rows:
        if len(row) != len(expected):
            raise SchemaMismatchError(
                f"row {line_no}: expected {len(expected)} columns, found {len(row)}",
                source=ctx.source,
            )
        code, name_eng, name_cym = (cell.strip() for cell in row)
        report.rows_read += 1

        if not area_included(ctx.area_filter, code, name_eng, name_cym):
            continue

        area = Area(code)
        area.set_name(LANG_ENGLISH, name_eng)
        area.set_name(LANG_WELSH, name_cym)
        staging.upsert(code, area)


# ---------------------------------------------------------------------------
# authority_by_year_csv
# ---------------------------------------------------------------------------

def _parse_year_columns(header: list[str], source: str) -> list[int]:
    years: list[int] = []
    for title in header[1:]:
        try:
            years.append(int(title))
        except ValueError:
            raise SchemaMismatchError(
                f"Column title {title!r} is not a year", source=source
            ) from None
    return years


def _read_authority_by_year_csv(
    stream: TextIO,
    ctx: _ReadContext,
    staging: AreaCollection,
    report: IngestReport,
) -> None:
    code_title = ctx.cols[SourceColumn.AUTH_CODE]
    codename = ctx.cols[SourceColumn.SINGLE_MEASURE_CODE]
    label = ctx.cols[SourceColumn.SINGLE_MEASURE_NAME]

    header, rows = _csv_rows(stream, ctx.source)
    if header[0] != code_title:
        raise SchemaMismatchError(
            f"No column found with title: {code_title}", source=ctx.source
        )
    if ctx.expected_columns is not None and len(header) != ctx.expected_columns:
        raise SchemaMismatchError(
            f"Invalid number of columns: expected {ctx.expected_columns}, "
            f"found {len(header)}",
            source=ctx.source,
        )
    years = _parse_year_columns(header, ctx.source)

    # Single measure per file: decide once.
    include_measure = measure_included(ctx.measure_filter, codename)

    for line_no, row in rows:
        if len(row) != len(header):
            raise SchemaMismatchError(
                f"row {line_no}: expected {len(header)} columns, found {len(row)}",
                source=ctx.source,
            )
        code = row[0].strip()
        report.rows_read += 1

        if not area_included(ctx.area_filter, code):
            continue

        area = Area(code)
        if include_measure:
            measure = Measure(codename, label)
            for year, cell in zip(years, row[1:]):
                if not year_included(ctx.year_filter, year):
                    continue
                if not cell.strip():
                    report.warn(line_no, f"no value for {code} in {year}")
                    continue
                measure.set_value(
                    year, _parse_float(cell, ctx.source, f"row {line_no}, {year}")
                )
            area.set_measure(codename, measure)
        staging.upsert(code, area)


# ---------------------------------------------------------------------------
# welsh_stats_json
# ---------------------------------------------------------------------------

def _field(record: dict[str, Any], name: str, source: str, index: int) -> Any:
    try:
        return record[name]
    except KeyError:
        raise SchemaMismatchError(
            f"record {index}: missing field {name!r}", source=source
        ) from None


def _measure_identity(
    record: dict[str, Any],
    ctx: _ReadContext,
    index: int,
) -> tuple[str, str]:
    """(codename, label) — from the record, or fixed for the whole file."""
    cols = ctx.cols
    if SourceColumn.MEASURE_CODE in cols:
        where = f"record {index}"
        code = _field(record, cols[SourceColumn.MEASURE_CODE], ctx.source, index)
        label = _field(record, cols[SourceColumn.MEASURE_NAME], ctx.source, index)
        return (
            _parse_text(code, ctx.source, where).lower(),
            _parse_text(label, ctx.source, where),
        )
    return (
        cols[SourceColumn.SINGLE_MEASURE_CODE].lower(),
        cols[SourceColumn.SINGLE_MEASURE_NAME],
    )


def _read_welsh_stats_json(
    stream: TextIO,
    ctx: _ReadContext,
    staging: AreaCollection,
    report: IngestReport,
) -> None:
    text = stream.read()
    if not text.strip():
        raise StreamUnavailableError("Source has no content", source=ctx.source)
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedValueError(f"Invalid JSON: {exc}", source=ctx.source) from exc

    records = document.get("value") if isinstance(document, dict) else None
    if not isinstance(records, list):
        raise SchemaMismatchError(
            "Expected a top-level object with a 'value' list", source=ctx.source
        )

    cols = ctx.cols
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise SchemaMismatchError(f"record {index}: not an object", source=ctx.source)

        code = _parse_text(
            _field(record, cols[SourceColumn.AUTH_CODE], ctx.source, index),
            ctx.source,
            f"record {index}",
        )
        name_eng = _parse_text(
            _field(record, cols[SourceColumn.AUTH_NAME_ENG], ctx.source, index),
            ctx.source,
            f"record {index}",
        )
        codename, label = _measure_identity(record, ctx, index)
        year = _parse_year(
            _field(record, cols[SourceColumn.YEAR], ctx.source, index),
            ctx.source,
            f"record {index}",
        )
        value = _parse_float(
            _field(record, cols[SourceColumn.VALUE], ctx.source, index),
            ctx.source,
            f"record {index}",
        )
        report.rows_read += 1

        area = Area(code)
        area.set_name(LANG_ENGLISH, name_eng)

        # Order matters: year → measure → area, each skipping only its own step.
        measure = Measure(codename, label)
        if year_included(ctx.year_filter, year):
            measure.set_value(year, value)

        if measure_included(ctx.measure_filter, codename):
            area.set_measure(codename, measure)

        if area_included(ctx.area_filter, code, name_eng):
            staging.upsert(code, area)


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------

_Reader = Callable[[TextIO, _ReadContext, AreaCollection, IngestReport], None]

_READERS: dict[SourceDataType, _Reader] = {
    SourceDataType.AUTHORITY_CODE_CSV: _read_authority_code_csv,
    SourceDataType.AUTHORITY_BY_YEAR_CSV: _read_authority_by_year_csv,
    SourceDataType.WELSH_STATS_JSON: _read_welsh_stats_json,
}


def ingest(
    stream: TextIO,
    data_type: SourceDataType | str,
    cols: ColumnMapping,
    areas: AreaCollection,
    area_filter: AreaFilter = UNFILTERED,
    measure_filter: MeasureFilter = UNFILTERED,
    year_filter: YearFilter = UNFILTERED,
    *,
    source: str | None = None,
    expected_columns: int | None = None,
) -> IngestReport:
    """Parse one source stream and merge its areas into ``areas``.

    Args:
        stream: Readable text stream positioned at the start of the source.
        data_type: Shape of the source (SourceDataType or its value).
        cols: Column role → header/field name for this source.
        areas: Target collection. Only mutated if the whole stream parses.
        area_filter / measure_filter / year_filter: Inclusion filters.
        source: Name used in errors and logs (default: stream.name).
        expected_columns: Exact header width for authority_by_year_csv.

    Returns:
        IngestReport with row counts and row-level warnings.

    Raises:
        StreamUnavailableError: the stream is empty.
        SchemaMismatchError: header, width or column mapping mismatch.
        MalformedValueError: a year, value or text field cannot be parsed,
            the stream is not valid UTF-8, or the CSV itself is unreadable.
        ValueError: ``data_type`` is not a known SourceDataType.
    """
    data_type = SourceDataType(data_type)
    source = source or str(getattr(stream, "name", "<stream>"))
    require_columns(data_type, cols, source)

    ctx = _ReadContext(
        source=source,
        cols=cols,
        area_filter=area_filter,
        measure_filter=measure_filter,
        year_filter=year_filter,
        expected_columns=expected_columns,
    )
    report = IngestReport(source=source, data_type=data_type)
    staging = AreaCollection()

    try:
        _READERS[data_type](stream, ctx, staging, report)
    except UnicodeDecodeError as exc:
        raise MalformedValueError(f"Invalid UTF-8: {exc}", source=source) from exc
    except csv.Error as exc:
        raise MalformedValueError(f"Unreadable CSV: {exc}", source=source) from exc

    areas.merge_from(staging)
    report.areas_merged = len(staging)
    logger.info(
        "Ingested %s (%s): %d rows, %d areas, %d warnings",
        source, data_type.value, report.rows_read, report.areas_merged,
        len(report.warnings),
    )
    return report
