"""
regionstats.errors — Error hierarchy.

Source-fatal errors derive from IngestError: they abort ingestion of the
one source being read, never the whole run. NotFoundError and
InvalidFormatError are caller errors raised by the model accessors.
"""

from __future__ import annotations


class RegionStatsError(Exception):
    """Base class for every error raised by regionstats."""


# ---------------------------------------------------------------------------
# Ingestion errors — fatal to a single source
# ---------------------------------------------------------------------------


class IngestError(RegionStatsError):
    """Raised when a source cannot be ingested.

    ``source`` names the stream (file path, URL or "<stream>") and
    ``detail`` is the human-readable reason.
    """

    def __init__(self, detail: str, source: str = "<stream>") -> None:
        self.detail = detail
        self.source = source
        super().__init__(f"{source}: {detail}")


class SchemaMismatchError(IngestError):
    """Header, column count or column mapping does not match the source."""


class MalformedValueError(IngestError):
    """A field could not be parsed as the expected numeric or year type."""


class StreamUnavailableError(IngestError):
    """The source could not be opened, read, or was empty."""


# ---------------------------------------------------------------------------
# Caller errors
# ---------------------------------------------------------------------------


class NotFoundError(RegionStatsError, LookupError):
    """Lookup of a name, measure, area or year that is not present."""

    def __init__(self, kind: str, key: object) -> None:
        self.kind = kind
        self.key = key
        super().__init__(f"No {kind} found matching '{key}'")


class InvalidFormatError(RegionStatsError, ValueError):
    """A language code is not exactly three alphabetic characters."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(
            f"Invalid language code '{value}': must be exactly three letters"
        )
