"""
regionstats.constants — Single source of truth for regionstats constants.

Every module that needs these values MUST import from here.
No hardcoded duplicates anywhere in the codebase.
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Languages
# ---------------------------------------------------------------------------

LANG_ENGLISH: str = "eng"
LANG_WELSH: str = "cym"

DISPLAY_LANGUAGES: tuple[str, ...] = (LANG_ENGLISH, LANG_WELSH)
"""Primary and secondary name languages for the table report, in order."""

LANG_CODE_RE = re.compile(r"[a-z]{3}")
"""A language code is exactly three ASCII letters, after lowercasing."""

# ---------------------------------------------------------------------------
# Table report
# ---------------------------------------------------------------------------

VALUE_PRECISION: int = 6
"""Decimal places used when rendering values and derived statistics."""

UNNAMED_AREA: str = "Unnamed"
NO_MEASURES: str = "<no measures>"
NO_DATA: str = "<no data>"

HEADER_AVERAGE: str = "Average"
HEADER_DIFFERENCE: str = "Diff."
HEADER_DIFFERENCE_PERCENT: str = "% Diff."

# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------

ALL_KEYWORD: str = "all"
"""Filter argument value meaning "no filter" (case-insensitive)."""

UNRESTRICTED_YEARS: tuple[int, int] = (0, 0)
"""Sentinel year range meaning every year is admitted."""
