"""
regionstats.loader — Import the area lookup file and datasets from a directory.

Sources are imported one after another, in the order requested, into one
shared AreaCollection. Merge order decides which value wins on a
conflicting (area, codename, year), so it is never reordered.

A failure while importing one dataset is logged and recorded on the
LoadResult; the remaining datasets are still imported and nothing
already merged is rolled back.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from regionstats.areas import AreaCollection
from regionstats.datasets import AREAS, InputFileSource
from regionstats.errors import RegionStatsError
from regionstats.filters import (
    UNFILTERED,
    AreaFilter,
    MeasureFilter,
    YearFilter,
)
from regionstats.readers import IngestReport, ingest
from regionstats.sources import is_url, open_source

logger = logging.getLogger("regionstats.loader")


@dataclass
class LoadResult:
    """Per-source outcome of a multi-source import."""
    reports: list[IngestReport] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures

    def to_dict(self) -> dict[str, Any]:
        return {
            "ok": self.ok,
            "reports": [r.to_dict() for r in self.reports],
            "failures": dict(self.failures),
        }


def source_location(directory: str | Path, dataset: InputFileSource) -> str:
    """Join a directory (or base URL) and a dataset file name."""
    if is_url(directory):
        return str(directory).rstrip("/") + "/" + dataset.file
    return str(Path(directory) / dataset.file)


def import_source(
    areas: AreaCollection,
    directory: str | Path,
    dataset: InputFileSource,
    area_filter: AreaFilter = UNFILTERED,
    measure_filter: MeasureFilter = UNFILTERED,
    year_filter: YearFilter = UNFILTERED,
) -> IngestReport:
    """Open and ingest a single registered source. Errors propagate."""
    location = source_location(directory, dataset)
    with open_source(location) as stream:
        return ingest(
            stream,
            dataset.type,
            dataset.cols,
            areas,
            area_filter,
            measure_filter,
            year_filter,
            source=location,
            expected_columns=dataset.expected_columns,
        )


def load_areas(
    areas: AreaCollection,
    directory: str | Path,
    area_filter: AreaFilter = UNFILTERED,
) -> IngestReport:
    """Import the area lookup file. Errors propagate to the caller."""
    return import_source(areas, directory, AREAS, area_filter)


def load_datasets(
    areas: AreaCollection,
    directory: str | Path,
    datasets: Iterable[InputFileSource],
    area_filter: AreaFilter = UNFILTERED,
    measure_filter: MeasureFilter = UNFILTERED,
    year_filter: YearFilter = UNFILTERED,
) -> LoadResult:
    """Import each dataset in order; a failing dataset does not stop the rest."""
    result = LoadResult()
    for dataset in datasets:
        try:
            report = import_source(
                areas, directory, dataset, area_filter, measure_filter, year_filter,
            )
        except RegionStatsError as exc:
            logger.error("Error importing dataset %s: %s", dataset.code, exc)
            result.failures[dataset.code] = str(exc)
            continue
        result.reports.append(report)
    return result
