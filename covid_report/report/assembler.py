"""Report assembly -- statistics + chart + annotations -> PDF file.

Pipeline for one report:

1. Fetch statistics for the target (``all`` = global aggregate).
2. Derive the identity and status tables (skipped when no statistics).
3. Lay out the fixed base blocks: title, creation time, tables, chart.
4. Append the annotation section, starting on a new page, when the
   target has any annotations.
5. Render to PDF and write ``<output_dir>/Report-<id>-<timestamp>.pdf``.

Missing statistics or annotations degrade the report; only an empty
chart handle or a render/write error fail it.

Top-level entry point:
    ``ReportAssembler.assemble(display_timestamp, target_id, chart_image)``
"""

from __future__ import annotations

import enum
import logging
import os
import shutil
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Callable, Protocol

from covid_report.annotations import AnnotationEntry, AnnotationStore, InMemoryAnnotationStore
from covid_report.clients.disease_sh import StatisticsClient, StatisticsRecord
from covid_report.config_loader import ReportConfig
from covid_report.constants import (
    ANNOTATION_HEADING,
    CHART_HEADING,
    CREATED_PREFIX,
    REPORT_FILE_EXTENSION,
    REPORT_FILE_PREFIX,
    STATUS_HEADING,
    TIMESTAMP_TOKEN_FORMAT,
    TITLE_TEXT,
)
from covid_report.localization import CountryNameTranslator, Translator
from covid_report.report.document import (
    ContentBlock,
    DisplayTable,
    DocumentDescription,
    ImageSource,
    StyleRule,
    default_styles,
)
from covid_report.report.renderer import FontRegistry, PdfRenderer
from covid_report.report.tables import (
    build_annotation_table,
    build_identity_table,
    build_status_table,
)

logger = logging.getLogger(__name__)


class StatisticsSource(Protocol):
    def fetch(self, target_id: str) -> StatisticsRecord | None: ...


class FailureKind(str, enum.Enum):
    INVALID_INPUT = "invalid_input"
    RENDER_OR_IO = "render_or_io"


@dataclass
class ReportResult:
    """Outcome of one :meth:`ReportAssembler.assemble` call."""

    path: str | None = None
    failure: FailureKind | None = None
    error: str | None = None
    statistics_available: bool = False
    annotation_count: int = 0
    document: DocumentDescription | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None and self.path is not None


def _is_empty_image(chart_image: ImageSource | None) -> bool:
    if isinstance(chart_image, Path):
        return str(chart_image) in ("", ".")
    return not chart_image


def report_file_name(target_id: str, token: str) -> str:
    return f"{REPORT_FILE_PREFIX}{target_id}-{token}{REPORT_FILE_EXTENSION}"


class ReportAssembler:
    """Builds and writes one PDF report per :meth:`assemble` call.

    Holds only configuration and collaborators, so one instance may
    serve concurrent calls for different targets.

    Parameters
    ----------
    config:
        Base URL, output directory and font settings.
    statistics:
        Source of :class:`StatisticsRecord`; defaults to a
        :class:`StatisticsClient` on ``config.base_url``.
    annotations:
        Annotation store; defaults to an empty in-memory store.
    translator:
        Display names for target identifiers.
    renderer:
        Document renderer; defaults to :class:`PdfRenderer`.
    clock:
        Returns the time used for the output file name.
    """

    def __init__(
        self,
        config: ReportConfig,
        *,
        statistics: StatisticsSource | None = None,
        annotations: AnnotationStore | None = None,
        translator: Translator | None = None,
        renderer: PdfRenderer | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._config = config
        self._statistics = statistics or StatisticsClient(config.base_url, config.timeout_s)
        self._annotations = annotations or InMemoryAnnotationStore()
        self._translator = translator or CountryNameTranslator(config.country_names)
        self._renderer = renderer or PdfRenderer()
        self._clock = clock
        self._fonts = FontRegistry.single(config.font_family, config.font_normal, config.font_bold)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def output_path(self, target_id: str) -> str:
        token = self._clock().strftime(TIMESTAMP_TOKEN_FORMAT)
        return os.path.join(self._config.output_dir, report_file_name(target_id, token))

    def _display_name(self, target_id: str) -> str:
        try:
            name = self._translator.translate(target_id)
        except Exception as exc:
            logger.debug("Name lookup failed for %s (using identifier): %s", target_id, exc)
            return target_id
        return name or target_id

    def _fetch_statistics(self, target_id: str) -> StatisticsRecord | None:
        try:
            return self._statistics.fetch(target_id)
        except Exception as exc:
            logger.debug("Statistics lookup failed for %s (continuing without): %s", target_id, exc)
            return None

    def _fetch_annotations(self, target_id: str) -> list[AnnotationEntry]:
        try:
            return list(self._annotations.get_annotations(target_id))
        except Exception as exc:
            logger.warning("Annotation lookup failed for %s (continuing without): %s", target_id, exc)
            return []

    def _new_document(self) -> DocumentDescription:
        family = self._config.font_family
        return DocumentDescription(
            styles=default_styles(family),
            default_style=StyleRule(font_family=family, font_size=14),
            title=TITLE_TEXT,
        )

    # ------------------------------------------------------------------
    # Document assembly
    # ------------------------------------------------------------------

    def build_document(
        self,
        display_timestamp: str,
        target_id: str,
        chart_image: ImageSource,
        record: StatisticsRecord | None,
        annotations: list[AnnotationEntry],
    ) -> DocumentDescription:
        """Lay out the blocks for one report; pure, no I/O."""
        identity_table: DisplayTable | None = None
        status_table: DisplayTable | None = None
        if record is not None:
            identity_table = build_identity_table(self._display_name(target_id), record)
            status_table = build_status_table(record)

        doc = self._new_document()
        doc.append(ContentBlock.heading(TITLE_TEXT))
        doc.append(ContentBlock.timestamp(CREATED_PREFIX + display_timestamp))
        if identity_table is not None:
            doc.append(ContentBlock.table_block(identity_table))
        doc.append(ContentBlock.subheading(STATUS_HEADING))
        if status_table is not None:
            doc.append(ContentBlock.table_block(status_table))
        doc.append(ContentBlock.subheading(CHART_HEADING))
        doc.append(ContentBlock.image_block(chart_image))

        if annotations:
            doc.append(ContentBlock.subheading(ANNOTATION_HEADING, page_break_before=True))
            doc.append(ContentBlock.table_block(build_annotation_table(annotations)))

        return doc.freeze()

    # ------------------------------------------------------------------
    # Main entry point
    # ------------------------------------------------------------------

    def assemble(
        self,
        display_timestamp: str,
        target_id: str,
        chart_image: ImageSource | None,
    ) -> ReportResult:
        """Build the report for *target_id* and write it to disk.

        Returns a :class:`ReportResult`; ``result.path`` is set only when
        the file was fully written.
        """
        if _is_empty_image(chart_image):
            return ReportResult(failure=FailureKind.INVALID_INPUT, error="chart image is empty")

        record = self._fetch_statistics(target_id)
        output_file = self.output_path(target_id)
        annotations = self._fetch_annotations(target_id)
        result = ReportResult(
            statistics_available=record is not None,
            annotation_count=len(annotations),
        )

        try:
            doc = self.build_document(display_timestamp, target_id, chart_image, record, annotations)
            result.document = doc
            stream = self._renderer.render(doc, self._fonts)

            Path(output_file).parent.mkdir(parents=True, exist_ok=True)
            with open(output_file, "wb") as fh:
                shutil.copyfileobj(stream, fh)
                fh.flush()
                os.fsync(fh.fileno())
        except Exception as exc:
            error = f"{type(exc).__name__}: {exc}"
            logger.error("%s", error)
            result.failure = FailureKind.RENDER_OR_IO
            result.error = error
            return result

        logger.info("%s has been saved.", output_file)
        result.path = output_file
        return result

    def generate_report_file(
        self,
        display_timestamp: str,
        target_id: str,
        chart_image: ImageSource | None,
    ) -> str | None:
        """Path of the written report, or None on any failure."""
        return self.assemble(display_timestamp, target_id, chart_image).path
