"""Display-table derivation from raw statistics and annotations."""

from __future__ import annotations

from typing import Any, Sequence

from covid_report.annotations import AnnotationEntry
from covid_report.clients.disease_sh import StatisticsRecord
from covid_report.constants import (
    ANNOTATION_DATETIME_FORMAT,
    ANNOTATION_HEADER,
    IDENTITY_HEADER,
    MISSING_VALUE_TEXT,
    STATUS_ROWS,
    STYLE_TABLE_HEADER,
)
from covid_report.report.document import DisplayTable, TableCell


def format_count(val: Any) -> str:
    """Group thousands with commas, or return 'N/A' for None.

    >>> format_count(1234567)
    '1,234,567'
    """
    if val is None:
        return MISSING_VALUE_TEXT
    try:
        return f"{int(val):,}"
    except (TypeError, ValueError):
        return str(val)


def _header(text: str) -> TableCell:
    return TableCell(text, STYLE_TABLE_HEADER)


def build_identity_table(display_name: str, record: StatisticsRecord) -> DisplayTable:
    """Two rows: column headers, then name and population."""
    table = DisplayTable()
    table.add_row(*(_header(h) for h in IDENTITY_HEADER))
    table.add_row(display_name, format_count(record.population))
    return table


def build_status_table(record: StatisticsRecord) -> DisplayTable:
    """Six labelled rows in fixed order."""
    table = DisplayTable()
    for label, attr in STATUS_ROWS:
        table.add_row(_header(label), format_count(getattr(record, attr)))
    return table


def build_annotation_table(entries: Sequence[AnnotationEntry]) -> DisplayTable:
    table = DisplayTable()
    table.add_row(*(_header(h) for h in ANNOTATION_HEADER))
    for entry in entries:
        table.add_row(entry.timestamp.strftime(ANNOTATION_DATETIME_FORMAT), entry.text)
    return table
