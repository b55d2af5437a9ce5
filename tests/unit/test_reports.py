"""
Unit Tests for PDF export of assessments.
"""
import os

import pytest
from reportlab.platypus import Paragraph, Table
from reportlab.platypus.doctemplate import LayoutError

from gdm_assist import config
from gdm_assist.core.gdm import AssessmentInput, Guideline, assess
from gdm_assist.core.reports import AssessmentReport, AssessmentReportGenerator
from gdm_assist.core.reports.assessment_report import CAVEAT, NO_LABS_TEXT
from gdm_assist.utils import ReportGenerationError


@pytest.fixture
def generator(tmp_path) -> AssessmentReportGenerator:
    return AssessmentReportGenerator(output_dir=str(tmp_path / "reports"))


class TestAssessmentReportGenerator:

    def test_creates_output_dir(self, tmp_path):
        out = tmp_path / "nested" / "reports"
        AssessmentReportGenerator(output_dir=str(out))
        assert out.is_dir()

    def test_generate_writes_pdf(self, generator, example_input):
        result = assess(example_input, Guideline.WHO)
        report = generator.generate(example_input, result, patient_id="TEST-001")

        assert isinstance(report, AssessmentReport)
        assert report.report_id.startswith("GDM-")
        assert report.patient_id == "TEST-001"
        assert report.diagnostic == "GDM"
        assert report.score == 100
        assert os.path.exists(report.pdf_path)
        with open(report.pdf_path, "rb") as f:
            assert f.read(5) == b"%PDF-"

    def test_generate_without_labs_or_bmi(self, generator):
        inp = AssessmentInput(age=24)
        report = generator.generate(inp, assess(inp, Guideline.NICE))

        assert report.diagnostic == "INDETERMINATE"
        assert report.patient_id == "ANONYMOUS"
        assert os.path.getsize(report.pdf_path) > 0

    def test_report_ids_unique(self, generator, example_input):
        result = assess(example_input)
        ids = {generator.generate(example_input, result).report_id for _ in range(3)}
        assert len(ids) == 3

    def test_to_dict(self, generator, example_input):
        data = generator.generate(example_input, assess(example_input, Guideline.NICE)).to_dict()

        assert data["guideline"] == "NICE"
        assert data["risk_level"] == "HIGH"
        assert data["pdf_path"].endswith(".pdf")

    def test_write_failure_raises(self, generator, example_input, monkeypatch):
        def _fail(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(generator, "_generate_pdf", _fail)

        with pytest.raises(ReportGenerationError) as exc_info:
            generator.generate(example_input, assess(example_input))

        assert exc_info.value.code == "REPORT_ERROR"
        assert exc_info.value.details["report_id"].startswith("GDM-")

    def test_layout_failure_raises(self, generator, example_input, monkeypatch):
        def _fail(*args, **kwargs):
            raise LayoutError("Flowable too large on page 1")

        monkeypatch.setattr(generator, "_generate_pdf", _fail)

        with pytest.raises(ReportGenerationError) as exc_info:
            generator.generate(example_input, assess(example_input))

        assert "too large" in exc_info.value.message


class TestCriteriaSection:

    def test_table_when_labs_present(self, generator, example_input):
        section = generator._criteria_section(example_input, assess(example_input))
        assert isinstance(section, Table)

    def test_note_when_no_labs(self, generator, no_labs_input):
        section = generator._criteria_section(no_labs_input, assess(no_labs_input))

        assert isinstance(section, Paragraph)
        assert section.getPlainText() == NO_LABS_TEXT

    def test_caveat_matches_api_disclaimer(self):
        assert CAVEAT == config.DISCLAIMER
