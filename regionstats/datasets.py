"""
regionstats.datasets — Source formats, column roles and the dataset registry.

Each source file is described by an InputFileSource: a display name, a
short code used on the command line, the file name inside the data
directory, its SourceDataType, and a ColumnMapping from abstract column
roles to the concrete header/field names used by that file.

The registry below is static configuration. Nothing is inferred from the
files themselves.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field, model_validator

from regionstats.constants import ALL_KEYWORD
from regionstats.errors import SchemaMismatchError


class SourceColumn(str, Enum):
    AUTH_CODE = "AUTH_CODE"
    AUTH_NAME_ENG = "AUTH_NAME_ENG"
    AUTH_NAME_CYM = "AUTH_NAME_CYM"
    MEASURE_CODE = "MEASURE_CODE"
    MEASURE_NAME = "MEASURE_NAME"
    YEAR = "YEAR"
    VALUE = "VALUE"
    SINGLE_MEASURE_CODE = "SINGLE_MEASURE_CODE"
    SINGLE_MEASURE_NAME = "SINGLE_MEASURE_NAME"


class SourceDataType(str, Enum):
    AUTHORITY_CODE_CSV = "authority_code_csv"
    AUTHORITY_BY_YEAR_CSV = "authority_by_year_csv"
    WELSH_STATS_JSON = "welsh_stats_json"


ColumnMapping = Mapping[SourceColumn, str]

# ---------------------------------------------------------------------------
# Required roles per format
# ---------------------------------------------------------------------------

_REQUIRED_COLUMNS: dict[SourceDataType, tuple[SourceColumn, ...]] = {
    SourceDataType.AUTHORITY_CODE_CSV: (
        SourceColumn.AUTH_CODE,
        SourceColumn.AUTH_NAME_ENG,
        SourceColumn.AUTH_NAME_CYM,
    ),
    SourceDataType.AUTHORITY_BY_YEAR_CSV: (
        SourceColumn.AUTH_CODE,
        SourceColumn.SINGLE_MEASURE_CODE,
        SourceColumn.SINGLE_MEASURE_NAME,
    ),
    SourceDataType.WELSH_STATS_JSON: (
        SourceColumn.AUTH_CODE,
        SourceColumn.AUTH_NAME_ENG,
        SourceColumn.YEAR,
        SourceColumn.VALUE,
    ),
}


def missing_columns(data_type: SourceDataType, cols: ColumnMapping) -> list[SourceColumn]:
    """Return the roles ``data_type`` needs that ``cols`` does not map."""
    missing = [role for role in _REQUIRED_COLUMNS[data_type] if role not in cols]
    if data_type is SourceDataType.WELSH_STATS_JSON:
        # Measure identity comes from per-record fields or is fixed per file.
        if SourceColumn.MEASURE_CODE in cols:
            pair = (SourceColumn.MEASURE_CODE, SourceColumn.MEASURE_NAME)
        else:
            pair = (SourceColumn.SINGLE_MEASURE_CODE, SourceColumn.SINGLE_MEASURE_NAME)
        missing.extend(role for role in pair if role not in cols)
    return missing


def require_columns(
    data_type: SourceDataType,
    cols: ColumnMapping,
    source: str = "<stream>",
) -> None:
    """Raise SchemaMismatchError if ``cols`` lacks a role ``data_type`` needs."""
    missing = missing_columns(data_type, cols)
    if missing:
        raise SchemaMismatchError(
            f"Column mapping for {data_type.value} is missing: "
            f"{', '.join(role.value for role in missing)}",
            source=source,
        )


# ---------------------------------------------------------------------------
# InputFileSource — one registered source file
# ---------------------------------------------------------------------------


class InputFileSource(BaseModel):
    """Static description of a source file and its column mapping."""

    model_config = {"frozen": True}

    name: str
    code: str
    file: str
    type: SourceDataType
    cols: Dict[SourceColumn, str]
    expected_columns: Optional[int] = Field(
        default=None,
        ge=2,
        description="Exact header width for authority_by_year_csv sources.",
    )

    @model_validator(mode="after")
    def _check_columns(self) -> InputFileSource:
        missing = missing_columns(self.type, self.cols)
        if missing:
            raise ValueError(
                f"Dataset '{self.code}' is missing column roles: "
                f"{sorted(role.value for role in missing)}"
            )
        return self


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

AREAS = InputFileSource(
    name="Areas",
    code="areas",
    file="areas.csv",
    type=SourceDataType.AUTHORITY_CODE_CSV,
    cols={
        SourceColumn.AUTH_CODE: "Local authority code",
        SourceColumn.AUTH_NAME_ENG: "Name (eng)",
        SourceColumn.AUTH_NAME_CYM: "Name (cym)",
    },
)

POPDEN = InputFileSource(
    name="Population density",
    code="popden",
    file="popu1009.json",
    type=SourceDataType.WELSH_STATS_JSON,
    cols={
        SourceColumn.AUTH_CODE: "Localauthority_Code",
        SourceColumn.AUTH_NAME_ENG: "Localauthority_ItemName_ENG",
        SourceColumn.MEASURE_CODE: "Measure_Code",
        SourceColumn.MEASURE_NAME: "Measure_ItemName_ENG",
        SourceColumn.YEAR: "Year_Code",
        SourceColumn.VALUE: "Data",
    },
)

BIZ = InputFileSource(
    name="Active Businesses",
    code="biz",
    file="econ0080.json",
    type=SourceDataType.WELSH_STATS_JSON,
    cols={
        SourceColumn.AUTH_CODE: "Area_Code",
        SourceColumn.AUTH_NAME_ENG: "Area_ItemName_ENG",
        SourceColumn.MEASURE_CODE: "Variable_Code",
        SourceColumn.MEASURE_NAME: "Variable_ItemName_ENG",
        SourceColumn.YEAR: "Year_Code",
        SourceColumn.VALUE: "Data",
    },
)

AQI = InputFileSource(
    name="Air Quality Indicators",
    code="aqi",
    file="envi0201.json",
    type=SourceDataType.WELSH_STATS_JSON,
    cols={
        SourceColumn.AUTH_CODE: "Area_Code",
        SourceColumn.AUTH_NAME_ENG: "Area_ItemName_ENG",
        SourceColumn.MEASURE_CODE: "Pollutant_ItemName_ENG",
        SourceColumn.MEASURE_NAME: "Pollutant_ItemName_ENG",
        SourceColumn.YEAR: "Year_Code",
        SourceColumn.VALUE: "Data",
    },
)

TRAINS = InputFileSource(
    name="Rail passenger journeys",
    code="trains",
    file="tran0152.json",
    type=SourceDataType.WELSH_STATS_JSON,
    cols={
        SourceColumn.AUTH_CODE: "LocalAuthority_Code",
        SourceColumn.AUTH_NAME_ENG: "LocalAuthority_ItemName_ENG",
        SourceColumn.YEAR: "Year_Code",
        SourceColumn.VALUE: "Data",
        SourceColumn.SINGLE_MEASURE_CODE: "rail",
        SourceColumn.SINGLE_MEASURE_NAME: "Rail passenger journeys",
    },
)

COMPLETE_POPDEN = InputFileSource(
    name="Population density",
    code="complete-popden",
    file="complete-popu1009-popden.csv",
    type=SourceDataType.AUTHORITY_BY_YEAR_CSV,
    cols={
        SourceColumn.AUTH_CODE: "AuthorityCode",
        SourceColumn.SINGLE_MEASURE_CODE: "dens",
        SourceColumn.SINGLE_MEASURE_NAME: "Population density",
    },
    expected_columns=12,
)

COMPLETE_POP = InputFileSource(
    name="Population",
    code="complete-pop",
    file="complete-popu1009-pop.csv",
    type=SourceDataType.AUTHORITY_BY_YEAR_CSV,
    cols={
        SourceColumn.AUTH_CODE: "AuthorityCode",
        SourceColumn.SINGLE_MEASURE_CODE: "pop",
        SourceColumn.SINGLE_MEASURE_NAME: "Population",
    },
    expected_columns=12,
)

COMPLETE_AREA = InputFileSource(
    name="Land area",
    code="complete-area",
    file="complete-popu1009-area.csv",
    type=SourceDataType.AUTHORITY_BY_YEAR_CSV,
    cols={
        SourceColumn.AUTH_CODE: "AuthorityCode",
        SourceColumn.SINGLE_MEASURE_CODE: "area",
        SourceColumn.SINGLE_MEASURE_NAME: "Land area",
    },
    expected_columns=12,
)

DATASETS: tuple[InputFileSource, ...] = (
    POPDEN,
    BIZ,
    AQI,
    TRAINS,
    COMPLETE_POPDEN,
    COMPLETE_POP,
    COMPLETE_AREA,
)
"""Importable datasets, in default import order. AREAS is loaded separately."""

DATASETS_BY_CODE: dict[str, InputFileSource] = {ds.code: ds for ds in DATASETS}


def resolve_datasets(codes: Iterable[str] | None = None) -> list[InputFileSource]:
    """Map dataset codes to registry entries, preserving request order.

    None, an empty list, or any "all" entry selects every dataset.

    Raises:
        ValueError: "No dataset matches key: <code>" for an unknown code.
    """
    requested = [c.strip().lower() for c in (codes or []) if c and c.strip()]
    if not requested or ALL_KEYWORD in requested:
        return list(DATASETS)

    selected: list[InputFileSource] = []
    for code in requested:
        dataset = DATASETS_BY_CODE.get(code)
        if dataset is None:
            raise ValueError(f"No dataset matches key: {code}")
        if dataset not in selected:
            selected.append(dataset)
    return selected
