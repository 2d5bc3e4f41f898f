"""ReportLab renderer for :class:`DocumentDescription`.

Turns the declarative blocks into platypus flowables and lays them out
on A4 pages.  Pagination is reportlab's natural flow, plus a forced
page break before every block for which the ``page_break_before``
predicate returns True.
"""

from __future__ import annotations

import io
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, Callable
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import (
    Flowable,
    Image,
    Indenter,
    PageBreak,
    Paragraph,
    SimpleDocTemplate,
    Table,
    TableStyle,
)

from covid_report.report.document import (
    Alignment,
    BlockKind,
    ContentBlock,
    DisplayTable,
    DocumentDescription,
)

logger = logging.getLogger(__name__)

PageBreakPredicate = Callable[[ContentBlock], bool]

_ALIGNMENTS = {
    Alignment.LEFT: TA_LEFT,
    Alignment.CENTER: TA_CENTER,
    Alignment.RIGHT: TA_RIGHT,
}

# Families reportlab can draw without a font file.
_STANDARD_FAMILIES = {"Helvetica", "Times-Roman", "Courier"}

_PAGE_MARGIN = 40


class FontRegistryError(Exception):
    """Raised when a font family cannot be made available to reportlab."""

    def __init__(self, family: str, detail: str) -> None:
        self.family = family
        self.detail = detail
        super().__init__(f"Font family {family!r}: {detail}")


@dataclass
class FontRegistry:
    """Font family name -> TrueType file path per weight.

    ``{"IPAexGothic": {"normal": "fonts/ipaexg.ttf", "bold": "fonts/ipaexg.ttf"}}``

    Families without paths must be one of reportlab's built-in families.
    """

    families: dict[str, dict[str, str]] = field(default_factory=dict)

    @classmethod
    def single(cls, family: str, normal: str | None = None, bold: str | None = None) -> FontRegistry:
        paths: dict[str, str] = {}
        if normal:
            paths["normal"] = normal
            paths["bold"] = bold or normal
        return cls({family: paths})

    def register(self) -> None:
        """Register every family with reportlab's ``pdfmetrics``."""
        for family, paths in self.families.items():
            normal = paths.get("normal")
            if not normal:
                if family not in _STANDARD_FAMILIES:
                    raise FontRegistryError(family, "no font file and not a built-in family")
                continue
            if family in pdfmetrics.getRegisteredFontNames():
                continue

            bold = paths.get("bold") or normal
            for path in {normal, bold}:
                if not Path(path).exists():
                    raise FontRegistryError(family, f"font file not found: {path}")

            bold_name = f"{family}-Bold"
            pdfmetrics.registerFont(TTFont(family, normal))
            pdfmetrics.registerFont(TTFont(bold_name, bold))
            pdfmetrics.registerFontFamily(
                family, normal=family, bold=bold_name, italic=family, boldItalic=bold_name,
            )
            logger.debug("Registered font family %s from %s", family, normal)


def default_page_break(block: ContentBlock) -> bool:
    return block.page_break_before


class PdfRenderer:
    """Render a :class:`DocumentDescription` to PDF bytes."""

    def __init__(self, pagesize: tuple[float, float] = A4) -> None:
        self._pagesize = pagesize

    # ------------------------------------------------------------------
    # Style resolution
    # ------------------------------------------------------------------

    def _paragraph_style(self, doc: DocumentDescription, label: str | None) -> ParagraphStyle:
        rule = doc.style_for(label)
        base = doc.default_style
        size = rule.font_size or base.font_size or 12
        left, top, right, bottom = rule.margin
        return ParagraphStyle(
            label or "default",
            fontName=rule.font_family or base.font_family,
            fontSize=size,
            leading=size * 1.2,
            alignment=_ALIGNMENTS[rule.alignment],
            leftIndent=left,
            rightIndent=right,
            spaceBefore=top,
            spaceAfter=bottom,
        )

    # ------------------------------------------------------------------
    # Block -> flowables
    # ------------------------------------------------------------------

    def _column_widths(self, table: DisplayTable, indent: float) -> list[float]:
        ncols = max(len(row) for row in table.rows)
        avail = self._pagesize[0] - 2 * _PAGE_MARGIN - indent
        if ncols == 2:
            # label / value
            return [avail * 0.35, avail * 0.65]
        return [avail / ncols] * ncols

    def _table(self, doc: DocumentDescription, table: DisplayTable) -> list[Flowable]:
        cell_style = self._paragraph_style(doc, None)
        data = [
            [Paragraph(escape(cell.text), cell_style) for cell in row]
            for row in table.rows
        ]
        commands: list[tuple] = [
            ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ]
        for r, row in enumerate(table.rows):
            for c, cell in enumerate(row):
                fill = doc.style_for(cell.style).fill_color if cell.style else None
                if fill:
                    commands.append(("BACKGROUND", (c, r), (c, r), colors.HexColor(fill)))

        rule = doc.style_for(table.style)
        left, top, right, bottom = rule.margin
        flow = Table(
            data,
            colWidths=self._column_widths(table, left + right),
            minRowHeights=[table.row_height] * len(data),
            hAlign="LEFT",
            spaceBefore=top,
            spaceAfter=bottom,
        )
        flow.setStyle(TableStyle(commands))
        return [Indenter(left=left, right=right), flow, Indenter(left=-left, right=-right)]

    def _image(self, block: ContentBlock) -> Flowable:
        source = block.image
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(source)
        elif isinstance(source, Path):
            source = str(source)
        return Image(source, width=block.width, height=block.height)

    def _flowables(self, doc: DocumentDescription, block: ContentBlock) -> list[Flowable]:
        if block.kind is BlockKind.TABLE:
            if block.table is None or not block.table.rows:
                return []
            return self._table(doc, block.table)
        if block.kind is BlockKind.IMAGE:
            return [self._image(block)]
        return [Paragraph(escape(block.text or ""), self._paragraph_style(doc, block.style))]

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    def render(
        self,
        doc: DocumentDescription,
        fonts: FontRegistry,
        page_break_before: PageBreakPredicate | None = None,
    ) -> BinaryIO:
        """Lay out *doc* and return a stream positioned at the start of the PDF."""
        fonts.register()
        predicate = page_break_before or default_page_break

        story: list[Flowable] = []
        for block in doc:
            if predicate(block) and story:
                story.append(PageBreak())
            story.extend(self._flowables(doc, block))

        buffer = io.BytesIO()
        template = SimpleDocTemplate(
            buffer,
            pagesize=self._pagesize,
            leftMargin=_PAGE_MARGIN,
            rightMargin=_PAGE_MARGIN,
            topMargin=_PAGE_MARGIN,
            bottomMargin=_PAGE_MARGIN,
            title=doc.title,
        )
        template.build(story)
        buffer.seek(0)
        return buffer
