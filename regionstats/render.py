"""
regionstats.render — Export document and text table renderers.

Export document (export() / export_json()):

    {
      "<authority code>": {
        "names": {"<lang>": "<name>", ...},
        "measures": {                      # omitted when the area has none
          "<codename>": {
            "label": "<label>",
            "values": {"<year>": <float>, ...}
          }
        }
      }
    }

An empty collection exports as {}. JSON text is written with
sort_keys=True so identical collections always serialize identically.

Text table (render_table()):

    Isle of Anglesey / Ynys Môn (W06000001)
    Population (pop)
         1999      2000   Average     Diff.   % Diff.
    10.000000 20.000000 15.000000 10.000000 50.000000

Areas in authority-code order, measures in codename order, years in
chronological order. Each column is right-aligned to the width of its
rendered value (or its header, if wider).
"""

from __future__ import annotations

import json
from typing import Any

from regionstats.area import Area
from regionstats.areas import AreaCollection
from regionstats.constants import (
    DISPLAY_LANGUAGES,
    HEADER_AVERAGE,
    HEADER_DIFFERENCE,
    HEADER_DIFFERENCE_PERCENT,
    NO_DATA,
    NO_MEASURES,
    UNNAMED_AREA,
    VALUE_PRECISION,
)
from regionstats.measure import Measure


# ---------------------------------------------------------------------------
# Export
# ---------------------------------------------------------------------------

def export_measure(measure: Measure) -> dict[str, Any]:
    return {
        "label": measure.label,
        "values": {str(year): value for year, value in measure.series.items()},
    }


def export_area(area: Area) -> dict[str, Any]:
    entry: dict[str, Any] = {"names": area.names}
    if len(area):
        entry["measures"] = {
            codename: export_measure(measure)
            for codename, measure in area.measures.items()
        }
    return entry


def export(areas: AreaCollection) -> dict[str, Any]:
    """Build the export document for every area, keyed by authority code."""
    return {area.authority_code: export_area(area) for area in areas}


def export_json(areas: AreaCollection, indent: int | None = None) -> str:
    return json.dumps(export(areas), sort_keys=True, ensure_ascii=False, indent=indent)


def measure_statistics(measure: Measure) -> dict[str, float]:
    """Derived statistics shown in the last three table columns."""
    return {
        "average": measure.get_average(),
        "difference": measure.get_difference(),
        "difference_percent": measure.get_difference_as_percentage(),
    }


# ---------------------------------------------------------------------------
# Table
# ---------------------------------------------------------------------------

def _fmt(value: float) -> str:
    return f"{value:.{VALUE_PRECISION}f}"


def area_title(area: Area) -> str:
    """Display names followed by the authority code in parentheses.

    Uses the designated display languages in order; falls back to the
    first available name, then to the "Unnamed" placeholder.
    """
    names = area.names
    shown = [names[lang] for lang in DISPLAY_LANGUAGES if lang in names]
    if not shown and names:
        shown = [next(iter(names.values()))]
    title = " / ".join(shown) if shown else UNNAMED_AREA
    return f"{title} ({area.authority_code})"


def render_measure(measure: Measure) -> list[str]:
    lines = [f"{measure.label} ({measure.codename})"]
    if not len(measure):
        lines.append(NO_DATA)
        return lines

    stats = measure_statistics(measure)
    headers = [str(year) for year in measure.years] + [
        HEADER_AVERAGE,
        HEADER_DIFFERENCE,
        HEADER_DIFFERENCE_PERCENT,
    ]
    cells = [_fmt(value) for value in measure.values] + [
        _fmt(stats["average"]),
        _fmt(stats["difference"]),
        _fmt(stats["difference_percent"]),
    ]
    widths = [max(len(h), len(c)) for h, c in zip(headers, cells)]

    lines.append(" ".join(h.rjust(w) for h, w in zip(headers, widths)))
    lines.append(" ".join(c.rjust(w) for c, w in zip(cells, widths)))
    return lines


def render_area(area: Area) -> list[str]:
    lines = [area_title(area)]
    if not len(area):
        lines.append(NO_MEASURES)
        return lines

    for i, measure in enumerate(area.measures.values()):
        if i:
            lines.append("")
        lines.extend(render_measure(measure))
    return lines


def render_table(areas: AreaCollection) -> str:
    """Render every area as a text block; blocks are separated by a blank line."""
    blocks = ["\n".join(render_area(area)) for area in areas]
    if not blocks:
        return ""
    return "\n\n".join(blocks) + "\n"
