"""
GDM Assessment Report Generator

Writes a one-document PDF summary of a single assessment:
- Colour-coded risk banner and score
- Diagnostic verdict with the per-criterion breakdown
- Recommendations, explanation lines and guideline references
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional
from datetime import datetime
import os
import uuid
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import A4
from reportlab.lib.colors import HexColor, white
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.lib.enums import TA_CENTER
from reportlab.platypus import (
    SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle, Flowable
)
from reportlab.platypus.doctemplate import LayoutError

from gdm_assist import config
from gdm_assist.core.gdm.base import AssessmentInput, AssessmentResult, Diagnostic, RiskLevel
from gdm_assist.core.gdm.thresholds import get_thresholds
from gdm_assist.utils import get_logger, ReportGenerationError

logger = get_logger(__name__)


# Risk level colors
RISK_COLORS = {
    RiskLevel.LOW: HexColor("#22C55E"),       # Green
    RiskLevel.MODERATE: HexColor("#F59E0B"),  # Amber
    RiskLevel.HIGH: HexColor("#EF4444"),      # Red
}

RISK_LABELS = {
    RiskLevel.LOW: "Low Risk",
    RiskLevel.MODERATE: "Moderate Risk",
    RiskLevel.HIGH: "High Risk",
}

DIAGNOSTIC_LABELS = {
    Diagnostic.GDM: "Diagnostic for GDM",
    Diagnostic.NO_GDM: "Below diagnostic thresholds",
    Diagnostic.INDETERMINATE: "Indeterminate (no applicable glucose values)",
}

CRITERION_LABELS = {
    "fasting": "Fasting glucose",
    "ogtt_1h": "1-hour OGTT",
    "ogtt_2h": "2-hour OGTT",
}

CAVEAT = config.DISCLAIMER

NO_LABS_TEXT = "No glucose values supplied; diagnostic criteria were not evaluated."


def _pdf_text(text: str) -> str:
    """Escape Paragraph markup; the base-14 fonts have no glyph for ≥."""
    return escape(text).replace("≥", ">=")


@dataclass
class AssessmentReport:
    """Data container for one exported assessment."""
    report_id: str
    generated_at: datetime
    patient_id: str = "ANONYMOUS"
    guideline: str = "WHO"
    diagnostic: str = Diagnostic.INDETERMINATE.value
    risk_level: str = RiskLevel.LOW.value
    score: int = 0
    pdf_path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "report_id": self.report_id,
            "generated_at": self.generated_at.isoformat(),
            "patient_id": self.patient_id,
            "guideline": self.guideline,
            "diagnostic": self.diagnostic,
            "risk_level": self.risk_level,
            "score": self.score,
            "pdf_path": self.pdf_path,
        }


class RiskBanner(Flowable):
    """Rounded banner filled with the risk level colour."""

    def __init__(self, risk_level: RiskLevel, score: int, width: float = 300, height: float = 40):
        Flowable.__init__(self)
        self.risk_level = risk_level
        self.score = score
        self.width = width
        self.height = height

    def draw(self):
        self.canv.setFillColor(RISK_COLORS[self.risk_level])
        self.canv.roundRect(0, 0, self.width, self.height, 8, fill=1, stroke=0)

        label = f"{RISK_LABELS[self.risk_level]}  ·  score {self.score}/100"
        self.canv.setFillColor(white)
        self.canv.setFont("Helvetica-Bold", 13)
        text_width = self.canv.stringWidth(label, "Helvetica-Bold", 13)
        self.canv.drawString((self.width - text_width) / 2, self.height / 2.5, label)


class AssessmentReportGenerator:
    """Generates PDF reports for GDM risk assessments."""

    def __init__(self, output_dir: str = "reports"):
        self.output_dir = output_dir
        os.makedirs(output_dir, exist_ok=True)

        self._styles = getSampleStyleSheet()
        self._create_custom_styles()

        logger.info(f"AssessmentReportGenerator initialized, output: {output_dir}")

    def _create_custom_styles(self):
        if 'ReportTitle' not in self._styles:
            self._styles.add(ParagraphStyle(
                name='ReportTitle',
                parent=self._styles['Title'],
                fontSize=22,
                spaceAfter=18,
                textColor=HexColor("#1E40AF"),
                alignment=TA_CENTER,
                fontName='Helvetica-Bold'
            ))

        if 'SectionHeader' not in self._styles:
            self._styles.add(ParagraphStyle(
                name='SectionHeader',
                parent=self._styles['Heading2'],
                fontSize=14,
                spaceBefore=18,
                spaceAfter=8,
                textColor=HexColor("#1F2937"),
                fontName='Helvetica-Bold'
            ))

        if 'ReportBody' not in self._styles:
            self._styles.add(ParagraphStyle(
                name='ReportBody',
                parent=self._styles['Normal'],
                fontSize=10.5,
                spaceAfter=5,
                leading=14,
            ))

        if 'Caveat' not in self._styles:
            self._styles.add(ParagraphStyle(
                name='Caveat',
                parent=self._styles['Normal'],
                fontSize=9,
                textColor=HexColor("#6B7280"),
                spaceBefore=5,
                spaceAfter=5
            ))

    def generate(
        self,
        inp: AssessmentInput,
        result: AssessmentResult,
        patient_id: str = "ANONYMOUS",
    ) -> AssessmentReport:
        """
        Write the PDF for one assessment.

        Raises:
            ReportGenerationError: the PDF could not be written.
        """
        report = AssessmentReport(
            report_id=f"GDM-{datetime.now().strftime('%Y%m%d-%H%M%S')}-{uuid.uuid4().hex[:6]}",
            generated_at=datetime.now(),
            patient_id=patient_id,
            guideline=result.guideline.value,
            diagnostic=result.diagnostic.value,
            risk_level=result.risk_level.value,
            score=result.score,
        )

        try:
            report.pdf_path = self._generate_pdf(report, inp, result)
        except (OSError, ValueError, LayoutError) as exc:
            logger.error(
                f"Report failed: {exc}", exc_info=True, extra={"report_id": report.report_id}
            )
            raise ReportGenerationError(str(exc), report_id=report.report_id) from exc

        logger.info(
            "Report written",
            extra={"report_id": report.report_id, "path": report.pdf_path},
        )
        return report

    def _measurement_rows(self, inp: AssessmentInput, result: AssessmentResult):
        thresholds = get_thresholds(result.guideline)
        rows = [["Measurement", "Value", f"{result.guideline.value} threshold", "Met"]]
        for key, value, threshold in (
            ("fasting", inp.fasting_glucose, thresholds.fasting),
            ("ogtt_1h", inp.ogtt_1h, thresholds.one_hour),
            ("ogtt_2h", inp.ogtt_2h, thresholds.two_hour),
        ):
            met = result.criteria.to_dict()[key]
            rows.append([
                CRITERION_LABELS[key],
                f"{value:g} mmol/L" if value is not None else "—",
                f">= {threshold:.1f}" if threshold is not None else "not used",
                "—" if met is None else ("Yes" if met else "No"),
            ])
        return rows

    def _criteria_section(self, inp: AssessmentInput, result: AssessmentResult) -> Flowable:
        if not inp.has_labs:
            return Paragraph(NO_LABS_TEXT, self._styles['ReportBody'])

        table = Table(
            self._measurement_rows(inp, result),
            colWidths=[1.9*inch, 1.5*inch, 1.6*inch, 0.9*inch],
        )
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), HexColor("#1E40AF")),
            ('TEXTCOLOR', (0, 0), (-1, 0), white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 9.5),
            ('GRID', (0, 0), (-1, -1), 0.5, HexColor("#D1D5DB")),
            ('TOPPADDING', (0, 0), (-1, -1), 6),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
        ]))
        return table

    def _generate_pdf(
        self,
        report: AssessmentReport,
        inp: AssessmentInput,
        result: AssessmentResult,
    ) -> str:
        filepath = os.path.join(self.output_dir, f"{report.report_id}.pdf")

        doc = SimpleDocTemplate(
            filepath,
            pagesize=A4,
            rightMargin=0.75*inch,
            leftMargin=0.75*inch,
            topMargin=0.75*inch,
            bottomMargin=0.75*inch
        )

        story = []
        story.append(Paragraph("GDM Risk Assessment", self._styles['ReportTitle']))
        story.append(Paragraph(
            f"Report ID: <b>{report.report_id}</b> | Patient: {_pdf_text(report.patient_id)} | "
            f"Generated: {report.generated_at.strftime('%B %d, %Y at %I:%M %p')}",
            self._styles['Caveat']
        ))
        story.append(Spacer(1, 16))

        # ===== RISK =====
        story.append(RiskBanner(result.risk_level, result.score, width=320, height=42))
        story.append(Spacer(1, 10))
        story.append(Paragraph(
            f"Verdict: <b>{DIAGNOSTIC_LABELS[result.diagnostic]}</b> "
            f"({_pdf_text(get_thresholds(result.guideline).label)})",
            self._styles['ReportBody']
        ))
        if result.bmi is not None:
            story.append(Paragraph(f"BMI: <b>{result.bmi}</b>", self._styles['ReportBody']))

        # ===== CRITERIA =====
        story.append(Paragraph("Glucose criteria", self._styles['SectionHeader']))
        story.append(self._criteria_section(inp, result))

        # ===== ADVICE =====
        story.append(Paragraph("Recommendations", self._styles['SectionHeader']))
        for line in result.recommendations:
            story.append(Paragraph(f"• {_pdf_text(line)}", self._styles['ReportBody']))

        story.append(Paragraph("How this was calculated", self._styles['SectionHeader']))
        for line in result.explanations:
            story.append(Paragraph(f"• {_pdf_text(line)}", self._styles['ReportBody']))

        story.append(Paragraph("References", self._styles['SectionHeader']))
        for ref in result.references:
            story.append(Paragraph(_pdf_text(ref), self._styles['Caveat']))

        story.append(Spacer(1, 18))
        story.append(Paragraph(CAVEAT, self._styles['Caveat']))

        doc.build(story)
        return filepath
