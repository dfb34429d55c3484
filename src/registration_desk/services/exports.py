"""Printable and tabular exports of registrations."""

import csv
import io
import logging
import re
from dataclasses import dataclass
from typing import Protocol
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from reportlab.platypus.doctemplate import LayoutError

from registration_desk.domain.registrations import RegistrationRecord
from registration_desk.errors import RenderError

logger = logging.getLogger(__name__)

MARGIN = 15 * mm
PHOTO_BOX = 60 * mm
HEADER_MAX_HEIGHT = 40 * mm
VALUE_COLUMN = 50 * mm
LINE_HEIGHT = 10 * mm
LEADING = 1.25

TABLE_HEADERS = ["Name", "Phone", "Age", "Mandalam", "Mekhala", "Unit", "Submitted"]
TABLE_COLUMN_WIDTHS = [38 * mm, 30 * mm, 12 * mm, 25 * mm, 25 * mm, 25 * mm, 25 * mm]
CSV_HEADERS = [
    "id",
    "name",
    "phone",
    "age",
    "mandalam",
    "mekhala",
    "unit",
    "photo_url",
    "submission_date",
]


class PhotoFetcher(Protocol):
    """Interface for resolving a record's photo reference to bytes."""

    async def fetch(self, photo_url: str) -> bytes | None:
        """Return the photo bytes, or None when unavailable."""


def profile_rows(record: RegistrationRecord) -> list[tuple[str, str]]:
    """Return the labeled fields listed on a profile."""
    return [
        ("Registration ID", record.id),
        ("Submitted", record.submission_date.strftime("%Y-%m-%d %H:%M UTC")),
        ("Age", str(record.age)),
        ("Phone Number", record.phone),
        ("Mandalam", record.mandalam),
        ("Mekhala", record.mekhala),
        ("Unit", record.unit),
    ]


def profile_filename(record: RegistrationRecord) -> str:
    """Return the download filename for a profile PDF."""
    slug = re.sub(r"\s+", "_", record.name.strip()).lower()
    slug = re.sub(r"[^\w.-]", "", slug) or "registration"
    return f"{slug}_profile.pdf"


def wrap_text(text: str, font: str, size: float, max_width: float) -> list[str]:
    """Split text into lines no wider than max_width, breaking long words."""
    lines: list[str] = []
    for line in simpleSplit(text, font, size, max_width) or [""]:
        while stringWidth(line, font, size) > max_width and len(line) > 1:
            cut = len(line) - 1
            while cut > 1 and stringWidth(line[:cut], font, size) > max_width:
                cut -= 1
            lines.append(line[:cut])
            line = line[cut:]
        lines.append(line)
    return lines


def fit_within(
    width: float, height: float, max_width: float, max_height: float
) -> tuple[float, float]:
    """Scale a box to fit inside the bounds, preserving aspect ratio."""
    ratio = min(max_width / width, max_height / height)
    return width * ratio, height * ratio


class _PageCursor:
    """Top-down write position on a canvas with page breaks."""

    def __init__(self, pdf: canvas.Canvas) -> None:
        self.pdf = pdf
        self.page_width, self.page_height = A4
        self.y = self.page_height - MARGIN

    def reserve(self, height: float) -> None:
        if self.y - height < MARGIN:
            self.pdf.showPage()
            self.y = self.page_height - MARGIN

    def centered_text(self, text: str, font: str, size: int, advance: float) -> None:
        lines = wrap_text(text, font, size, self.page_width - 2 * MARGIN)
        for index, line in enumerate(lines):
            self.reserve(size)
            self.pdf.setFont(font, size)
            self.pdf.drawCentredString(self.page_width / 2, self.y - size, line)
            self.y -= advance if index == len(lines) - 1 else size * LEADING

    def image(self, reader: ImageReader, max_width: float, max_height: float) -> None:
        source_width, source_height = reader.getSize()
        width, height = fit_within(source_width, source_height, max_width, max_height)
        self.reserve(height)
        x = (self.page_width - width) / 2
        self.pdf.drawImage(reader, x, self.y - height, width=width, height=height)
        self.y -= height + 15 * mm

    def labeled_row(self, label: str, value: str) -> None:
        width = self.page_width - 2 * MARGIN - VALUE_COLUMN
        lines = wrap_text(value, "Helvetica", 12, width)
        self.reserve(LINE_HEIGHT)
        self.pdf.setFont("Helvetica-Bold", 12)
        self.pdf.drawString(MARGIN, self.y - 12, f"{label}:")
        self.pdf.setFont("Helvetica", 12)
        for index, line in enumerate(lines):
            if index:
                self.y -= 12 * LEADING
                self.reserve(LINE_HEIGHT)
                self.pdf.setFont("Helvetica", 12)
            self.pdf.drawString(MARGIN + VALUE_COLUMN, self.y - 12, line)
        self.y -= LINE_HEIGHT


@dataclass
class ExportComposer:
    """Compose profile and table documents for registrations."""

    brand_title: str = "AIYF"
    header_image: bytes | None = None
    compress: bool = True

    def profile_pdf(
        self, record: RegistrationRecord, photo: bytes | None = None
    ) -> bytes:
        """Render a single-record profile.

        A missing or unreadable header image falls back to the brand title,
        and a missing or unreadable photo is omitted; neither fails the
        document.
        """
        buffer = io.BytesIO()
        try:
            pdf = canvas.Canvas(
                buffer, pagesize=A4, pageCompression=1 if self.compress else 0
            )
            pdf.setTitle(f"{record.name} profile")
            cursor = _PageCursor(pdf)
            header = _read_image(self.header_image, "header")
            if header is not None:
                cursor.image(header, cursor.page_width - 2 * MARGIN, HEADER_MAX_HEIGHT)
            else:
                cursor.centered_text(
                    self.brand_title, "Helvetica-Bold", 22, advance=15 * mm
                )
            portrait = _read_image(photo, "photo")
            if portrait is not None:
                cursor.image(portrait, PHOTO_BOX, PHOTO_BOX)
            cursor.centered_text(record.name, "Helvetica-Bold", 16, advance=15 * mm)
            for label, value in profile_rows(record):
                cursor.labeled_row(label, value)
            pdf.showPage()
            pdf.save()
        except (OSError, ValueError) as exc:
            raise RenderError("Could not build the profile PDF") from exc
        return buffer.getvalue()

    def table_pdf(
        self, records: list[RegistrationRecord], title: str = "Registrations"
    ) -> bytes:
        """Render registrations as a table, one row per record."""
        styles = getSampleStyleSheet()
        cell_style = ParagraphStyle(
            "Cell", parent=styles["BodyText"], fontSize=9, leading=11
        )
        story = [
            Paragraph(escape(f"{self.brand_title} {title}"), styles["Heading1"]),
            Spacer(1, 4 * mm),
        ]
        if records:
            rows = [TABLE_HEADERS] + [
                [Paragraph(escape(value), cell_style) for value in _table_row(record)]
                for record in records
            ]
            table = Table(
                rows,
                colWidths=TABLE_COLUMN_WIDTHS,
                repeatRows=1,
            )
            table.setStyle(
                TableStyle(
                    [
                        ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                        ("FONTSIZE", (0, 0), (-1, 0), 9),
                        ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
                        ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ]
                )
            )
            story.append(table)
        else:
            story.append(
                Paragraph("No registrations match the current filters.", cell_style)
            )

        buffer = io.BytesIO()
        document = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=MARGIN,
            rightMargin=MARGIN,
            topMargin=MARGIN,
            bottomMargin=MARGIN,
            title=title,
            pageCompression=1 if self.compress else 0,
        )
        try:
            document.build(story)
        except (LayoutError, OSError, ValueError) as exc:
            raise RenderError("Could not build the registrations PDF") from exc
        return buffer.getvalue()

    def csv_export(self, records: list[RegistrationRecord]) -> str:
        """Render registrations as CSV text."""
        buffer = io.StringIO()
        writer = csv.DictWriter(buffer, fieldnames=CSV_HEADERS)
        writer.writeheader()
        for record in records:
            document = record.to_document()
            writer.writerow({key: document[key] for key in CSV_HEADERS})
        return buffer.getvalue()


@dataclass
class ExportService:
    """Resolve photos and hand records to the composer."""

    composer: ExportComposer
    photo_fetcher: PhotoFetcher

    async def profile_pdf(self, record: RegistrationRecord) -> bytes:
        """Render the profile PDF of a confirmed record."""
        photo = None
        if record.photo_url:
            photo = await self.photo_fetcher.fetch(record.photo_url)
        return self.composer.profile_pdf(record, photo)


def _table_row(record: RegistrationRecord) -> list[str]:
    return [
        record.name,
        record.phone,
        str(record.age),
        record.mandalam,
        record.mekhala,
        record.unit,
        record.submission_date.strftime("%Y-%m-%d"),
    ]


def _read_image(data: bytes | None, label: str) -> ImageReader | None:
    if not data:
        return None
    try:
        reader = ImageReader(io.BytesIO(data))
        reader.getSize()
    except Exception:
        logger.warning("Omitting unreadable image from PDF", extra={"image": label})
        return None
    return reader
