"""
Tabular exports for student and employee lists.

Each export type has a fixed column map; fields outside the map are never
written. Supported formats are ``csv``, ``excel`` (the same CSV bytes
with an ``.xls`` extension), ``text`` (tab-delimited) and ``pdf``.
"""
from __future__ import annotations

import csv
import io
import logging
from dataclasses import dataclass
from decimal import Decimal
from xml.sax.saxutils import escape

from django.utils import timezone
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

logger = logging.getLogger(__name__)

STUDENT_COLUMNS = [
    ('Admission No', 'admission_no'),
    ('Full Name', 'full_name'),
    ('Gender', 'gender'),
    ('Class', 'class_section'),
    ('Section', 'section'),
    ('Mobile', 'phone'),
    ('Father Name', 'father_name'),
    ('Mother Name', 'mother_name'),
    ('Address', 'address'),
    ('Status', 'student_status'),
]

EMPLOYEE_COLUMNS = [
    ('Employee ID', 'id'),
    ('Full Name', 'full_name'),
    ('Designation', 'designation'),
    ('Phone', 'phone'),
    ('Email', 'email'),
    ('Joining Date', 'joining_date'),
    ('Status', 'status'),
]

EXPORT_COLUMNS = {
    'students': STUDENT_COLUMNS,
    'admission_data': STUDENT_COLUMNS,
    'employees': EMPLOYEE_COLUMNS,
}

EXPORT_FORMATS = {
    'csv': ('csv', 'text/csv; charset=utf-8'),
    'excel': ('xls', 'application/vnd.ms-excel'),
    'text': ('txt', 'text/plain; charset=utf-8'),
    'pdf': ('pdf', 'application/pdf'),
}

HEADER_FILL = colors.Color(79 / 255, 70 / 255, 229 / 255)


class ExportError(Exception):
    """Raised for an unknown export type or format"""
    pass


class EmptyExportError(ExportError):
    """Raised when there are no rows to export"""
    pass


@dataclass
class ExportArtifact:
    filename: str
    content_type: str
    content: bytes


def get_columns(export_type):
    try:
        return EXPORT_COLUMNS[export_type]
    except KeyError:
        raise ExportError(f"Unknown export type: {export_type}")


def _cell(item, key):
    if isinstance(item, dict):
        value = item.get(key)
    else:
        value = getattr(item, key, None)
    if value is None:
        return ''
    if isinstance(value, Decimal):
        return format(value, 'f')
    if hasattr(value, 'isoformat'):
        return value.isoformat()
    return str(value)


def format_rows(data, columns):
    return [[_cell(item, key) for _header, key in columns] for item in data]


def render_csv(data, columns) -> str:
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator='\n').writerow([header for header, _key in columns])
    rows = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator='\n')
    rows.writerows(format_rows(data, columns))
    return buffer.getvalue()


def render_text(data, columns) -> str:
    lines = ['\t'.join(header for header, _key in columns)]
    for row in format_rows(data, columns):
        # keep one record per line
        lines.append('\t'.join(cell.replace('\t', ' ').replace('\n', ' ') for cell in row))
    return '\n'.join(lines)


def render_pdf(data, columns, export_type, exported_at=None) -> bytes:
    exported_at = exported_at or timezone.localtime()
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        leftMargin=14 * mm,
        rightMargin=14 * mm,
        topMargin=14 * mm,
        bottomMargin=14 * mm,
    )
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle('ExportTitle', parent=styles['Heading1'], fontSize=18)
    meta_style = ParagraphStyle(
        'ExportMeta', parent=styles['Normal'], fontSize=11, textColor=colors.HexColor('#646464')
    )
    cell_style = ParagraphStyle('ExportCell', parent=styles['Normal'], fontSize=8, leading=10)

    title = export_type[:1].upper() + export_type[1:]
    elements = [
        Paragraph(f"{title} Data", title_style),
        Paragraph(f"Exported on: {exported_at.strftime('%d/%m/%Y, %H:%M:%S')}", meta_style),
        Spacer(1, 12),
    ]

    header = [header for header, _key in columns]
    body = [[Paragraph(escape(cell), cell_style) for cell in row] for row in format_rows(data, columns)]
    table = Table([header] + body, repeatRows=1)
    table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), HEADER_FILL),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 8),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.HexColor('#c8c8c8')),
    ]))
    elements.append(table)
    doc.build(elements)
    return buffer.getvalue()


def export_data(data, export_format, filename, export_type, today=None) -> ExportArtifact:
    """
    Render data with the column map for export_type.

    The download name is ``<filename>_<YYYY-MM-DD>.<ext>``. Raises
    EmptyExportError when data is empty; nothing is rendered in that case.
    """
    data = list(data or [])
    if not data:
        raise EmptyExportError("No data to export")

    columns = get_columns(export_type)
    try:
        extension, content_type = EXPORT_FORMATS[export_format]
    except KeyError:
        raise ExportError(f"Unknown export format: {export_format}")

    today = today or timezone.localdate()
    full_filename = f"{filename}_{today.isoformat()}.{extension}"

    if export_format in ('csv', 'excel'):
        content = render_csv(data, columns).encode('utf-8')
    elif export_format == 'text':
        content = render_text(data, columns).encode('utf-8')
    else:
        content = render_pdf(data, columns, export_type)

    logger.info("Exported %s %s rows as %s", len(data), export_type, full_filename)
    return ExportArtifact(filename=full_filename, content_type=content_type, content=content)
