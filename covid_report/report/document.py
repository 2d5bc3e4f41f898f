"""Declarative description of a report document.

A :class:`DocumentDescription` is an ordered, append-only list of
:class:`ContentBlock` objects plus the style table the renderer resolves
each block's ``style`` label against.  Blocks never reference fonts or
reportlab objects directly; that is the renderer's job.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Union

from covid_report.constants import (
    CHART_HEIGHT,
    CHART_WIDTH,
    DEFAULT_FONT_FAMILY,
    STYLE_DATETIME,
    STYLE_IMAGE,
    STYLE_SUBTITLE,
    STYLE_TABLE_BODY,
    STYLE_TABLE_HEADER,
    STYLE_TITLE,
    TABLE_HEADER_FILL,
    TABLE_ROW_HEIGHT,
)

# A chart image: a file path or the encoded image bytes.
ImageSource = Union[str, Path, bytes]


class DocumentFrozenError(Exception):
    """Raised when appending to a document that was handed to the renderer."""


class BlockKind(str, enum.Enum):
    HEADING = "heading"
    SUBHEADING = "subheading"
    TIMESTAMP = "timestamp"
    TABLE = "table"
    IMAGE = "image"


class Alignment(str, enum.Enum):
    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


@dataclass(frozen=True)
class StyleRule:
    """Font, size, alignment and margins for one style label.

    ``margin`` is ``(left, top, right, bottom)`` in points.
    """

    font_size: float | None = None
    alignment: Alignment = Alignment.LEFT
    margin: tuple[float, float, float, float] = (0, 0, 0, 0)
    fill_color: str | None = None
    font_family: str | None = None


def default_styles(font_family: str = DEFAULT_FONT_FAMILY) -> dict[str, StyleRule]:
    """The style table every report uses, bound to *font_family*."""
    return {
        STYLE_TITLE: StyleRule(
            font_family=font_family, font_size=24,
            alignment=Alignment.CENTER, margin=(0, 0, 0, 20),
        ),
        STYLE_SUBTITLE: StyleRule(
            font_family=font_family, font_size=20, margin=(0, 10, 0, 10),
        ),
        STYLE_DATETIME: StyleRule(
            font_family=font_family, font_size=16,
            alignment=Alignment.RIGHT, margin=(0, 5, 0, 5),
        ),
        STYLE_TABLE_BODY: StyleRule(margin=(10, 5, 0, 15)),
        STYLE_TABLE_HEADER: StyleRule(fill_color=TABLE_HEADER_FILL),
        STYLE_IMAGE: StyleRule(),
    }


@dataclass(frozen=True)
class TableCell:
    text: str
    style: str | None = None


@dataclass
class DisplayTable:
    """Render-ready rows of cells, distinct from the raw statistics."""

    rows: list[list[TableCell]] = field(default_factory=list)
    style: str = STYLE_TABLE_BODY
    row_height: float = TABLE_ROW_HEIGHT

    def add_row(self, *cells: TableCell | str) -> None:
        self.rows.append([c if isinstance(c, TableCell) else TableCell(c) for c in cells])

    def texts(self) -> list[list[str]]:
        """Plain-text view of the rows."""
        return [[cell.text for cell in row] for row in self.rows]

    def __len__(self) -> int:
        return len(self.rows)


@dataclass(frozen=True)
class ContentBlock:
    """One unit of the document.

    ``page_break_before`` asks the renderer to start a new page right
    before this block.
    """

    kind: BlockKind
    style: str
    text: str | None = None
    table: DisplayTable | None = None
    image: ImageSource | None = None
    width: float | None = None
    height: float | None = None
    page_break_before: bool = False

    @classmethod
    def heading(cls, text: str, style: str = STYLE_TITLE) -> ContentBlock:
        return cls(kind=BlockKind.HEADING, style=style, text=text)

    @classmethod
    def subheading(
        cls, text: str, style: str = STYLE_SUBTITLE, *, page_break_before: bool = False,
    ) -> ContentBlock:
        return cls(
            kind=BlockKind.SUBHEADING, style=style, text=text,
            page_break_before=page_break_before,
        )

    @classmethod
    def timestamp(cls, text: str, style: str = STYLE_DATETIME) -> ContentBlock:
        return cls(kind=BlockKind.TIMESTAMP, style=style, text=text)

    @classmethod
    def table_block(cls, table: DisplayTable) -> ContentBlock:
        return cls(kind=BlockKind.TABLE, style=table.style, table=table)

    @classmethod
    def image_block(
        cls,
        source: ImageSource,
        width: float = CHART_WIDTH,
        height: float = CHART_HEIGHT,
        style: str = STYLE_IMAGE,
    ) -> ContentBlock:
        return cls(kind=BlockKind.IMAGE, style=style, image=source, width=width, height=height)


@dataclass
class DocumentDescription:
    """Ordered blocks plus the style table they refer to."""

    styles: dict[str, StyleRule] = field(default_factory=default_styles)
    default_style: StyleRule = field(
        default_factory=lambda: StyleRule(font_family=DEFAULT_FONT_FAMILY, font_size=14),
    )
    title: str = ""
    _blocks: list[ContentBlock] = field(default_factory=list, repr=False)
    _frozen: bool = field(default=False, repr=False)

    @property
    def blocks(self) -> tuple[ContentBlock, ...]:
        return tuple(self._blocks)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def append(self, block: ContentBlock) -> None:
        if self._frozen:
            raise DocumentFrozenError("document is complete; no more blocks may be added")
        if block.style not in self.styles:
            raise KeyError(f"unknown style label {block.style!r}")
        self._blocks.append(block)

    def freeze(self) -> DocumentDescription:
        self._frozen = True
        return self

    def style_for(self, label: str | None) -> StyleRule:
        if label is None:
            return self.default_style
        return self.styles.get(label, self.default_style)

    def tables(self) -> list[DisplayTable]:
        return [b.table for b in self._blocks if b.kind is BlockKind.TABLE and b.table is not None]

    def outline(self) -> list[tuple[str, str | None]]:
        """``(kind, text)`` pairs; tables and images have no text."""
        return [(b.kind.value, b.text) for b in self._blocks]

    def __iter__(self) -> Iterator[ContentBlock]:
        return iter(self._blocks)

    def __len__(self) -> int:
        return len(self._blocks)
