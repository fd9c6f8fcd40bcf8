"""
Certificate Export Service - PDF Generation

Renders a one-page result certificate for a submitted attempt:
- Title
- Student and exam details
- Score table (score, percentage)
- Instructor feedback and student-entered details, when present

Layout depends only on the stored result; reportlab runs in invariant mode so
re-rendering the same result yields the same bytes.
"""

import logging
import os
from io import BytesIO
from pathlib import Path

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Flowable, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from database.models import Result
from services import clock
from services.grading import percentage

log = logging.getLogger(__name__)

# ─── Configuration ──────────────────────────────────────────────────────────────

CERTIFICATE_DIR = os.getenv("CERTIFICATE_DIR", os.path.join("public", "pdfs"))
CERTIFICATE_URL_PREFIX = "/pdfs"
CERTIFICATE_TITLE = "Exam Result Certificate"


def certificate_filename(result_id: int) -> str:
    return f"exam_result_{result_id}.pdf"


def certificate_url(result_id: int) -> str:
    return f"{CERTIFICATE_URL_PREFIX}/{certificate_filename(result_id)}"


def _escape_html(text) -> str:
    """Escape HTML special characters so ReportLab Paragraph treats them as literal text."""
    if text is None:
        return ""
    text = str(text)
    text = text.replace("&", "&amp;")
    text = text.replace("<", "&lt;")
    text = text.replace(">", "&gt;")
    return text.replace("\n", "<br/>")


def _format_date(value) -> str:
    if value is None:
        return "N/A"
    return clock.as_utc(value).strftime("%d %B %Y")


# ─── Custom Flowables ───────────────────────────────────────────────────────────

class HorizontalLine(Flowable):
    """Draw a horizontal line across the page."""

    def __init__(self, width, thickness=1, color=colors.black):
        Flowable.__init__(self)
        self.width = width
        self.thickness = thickness
        self.color = color

    def draw(self):
        self.canv.setStrokeColor(self.color)
        self.canv.setLineWidth(self.thickness)
        self.canv.line(0, 0, self.width, 0)


# ─── Style Definitions ──────────────────────────────────────────────────────────

def get_certificate_styles():
    styles = getSampleStyleSheet()

    styles.add(ParagraphStyle(
        name='CertificateTitle',
        parent=styles['Heading1'],
        fontSize=22,
        textColor=colors.black,
        alignment=TA_CENTER,
        spaceAfter=12,
        fontName='Helvetica-Bold',
    ))

    styles.add(ParagraphStyle(
        name='CertificateLine',
        parent=styles['Normal'],
        fontSize=13,
        textColor=colors.black,
        alignment=TA_LEFT,
        spaceAfter=4,
        fontName='Helvetica',
        leading=17,
    ))

    styles.add(ParagraphStyle(
        name='CertificateSection',
        parent=styles['Heading3'],
        fontSize=13,
        textColor=colors.black,
        alignment=TA_LEFT,
        spaceBefore=12,
        spaceAfter=6,
        fontName='Helvetica-Bold',
    ))

    styles.add(ParagraphStyle(
        name='CertificateBody',
        parent=styles['Normal'],
        fontSize=11,
        textColor=colors.black,
        alignment=TA_LEFT,
        spaceAfter=4,
        fontName='Helvetica',
        leading=14,
    ))

    styles.add(ParagraphStyle(
        name='CertificateFooter',
        parent=styles['Normal'],
        fontSize=10,
        textColor=colors.grey,
        alignment=TA_CENTER,
        fontName='Helvetica-Oblique',
    ))

    return styles


# ─── Certificate Generator ──────────────────────────────────────────────────────

def generate_certificate(result: Result) -> BytesIO:
    """Build the certificate PDF for a submitted result. Returns BytesIO buffer."""
    student = result.student
    exam = result.exam

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=2*cm,
        leftMargin=2*cm,
        topMargin=2.5*cm,
        bottomMargin=2*cm,
        title=CERTIFICATE_TITLE,
        author="Exam Portal",
        invariant=1,
    )

    styles = get_certificate_styles()
    story = []

    # ─── Header ─────────────────────────────────────────────────────────────────
    story.append(Paragraph(CERTIFICATE_TITLE, styles['CertificateTitle']))
    story.append(HorizontalLine(doc.width, thickness=1.5))
    story.append(Spacer(1, 0.6*cm))

    story.append(Paragraph(f"<b>Student:</b> {_escape_html(student.name if student else 'Unknown')}", styles['CertificateLine']))
    story.append(Paragraph(f"<b>Email:</b> {_escape_html(student.email if student else '')}", styles['CertificateLine']))
    story.append(Spacer(1, 0.4*cm))

    story.append(Paragraph(f"<b>Exam:</b> {_escape_html(exam.title)}", styles['CertificateLine']))
    story.append(Paragraph(f"<b>Description:</b> {_escape_html(exam.description)}", styles['CertificateBody']))
    story.append(Paragraph(f"<b>Date:</b> {_format_date(exam.scheduled_at)}", styles['CertificateBody']))
    story.append(Paragraph(f"<b>Duration:</b> {exam.duration_minutes} minutes", styles['CertificateBody']))
    story.append(Spacer(1, 0.6*cm))

    # ─── Score ──────────────────────────────────────────────────────────────────
    score_table = Table(
        [
            ["Score", f"{result.total_score} / {result.max_possible_score}"],
            ["Percentage", f"{percentage(result.total_score, result.max_possible_score)}%"],
        ],
        colWidths=[5*cm, 6*cm],
    )
    score_table.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTNAME', (1, 0), (1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 0), (-1, -1), 13),
        ('GRID', (0, 0), (-1, -1), 0.75, colors.black),
        ('BACKGROUND', (0, 0), (0, -1), colors.whitesmoke),
        ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
        ('TOPPADDING', (0, 0), (-1, -1), 6),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
    ]))
    story.append(score_table)

    # ─── Feedback & details ─────────────────────────────────────────────────────
    if result.feedback:
        story.append(Paragraph("Feedback", styles['CertificateSection']))
        story.append(Paragraph(_escape_html(result.feedback), styles['CertificateBody']))

    details = result.additional_details if isinstance(result.additional_details, dict) else {}
    details = {k: v for k, v in details.items() if k and v not in (None, "")}
    if details:
        story.append(Paragraph("Additional Details", styles['CertificateSection']))
        for key in sorted(details):
            story.append(Paragraph(f"<b>{_escape_html(key)}:</b> {_escape_html(details[key])}", styles['CertificateBody']))

    # ─── Footer ─────────────────────────────────────────────────────────────────
    story.append(Spacer(1, 1.2*cm))
    story.append(HorizontalLine(doc.width, thickness=0.5, color=colors.grey))
    story.append(Spacer(1, 0.2*cm))
    story.append(Paragraph("This certificate was automatically generated.", styles['CertificateFooter']))
    story.append(Paragraph(f"Submitted on {_format_date(result.end_time)}", styles['CertificateFooter']))

    doc.build(story)
    buffer.seek(0)
    return buffer


def write_certificate(result: Result, directory: str = None) -> Path:
    """Render and write the certificate, overwriting any previous file. Returns the file path."""
    out_dir = Path(directory or CERTIFICATE_DIR)
    out_dir.mkdir(parents=True, exist_ok=True)
    path = out_dir / certificate_filename(result.id)

    buffer = generate_certificate(result)
    path.write_bytes(buffer.getvalue())
    log.info(f"[CERTIFICATE] wrote {path} for result={result.id}")
    return path
