"""
GDM Assist - FastAPI Application

API endpoints for:
- GDM risk assessment (WHO / NICE)
- Self-monitoring reading classification
- PDF export of an assessment
- Guideline reference data and health checks
"""
from contextlib import asynccontextmanager
from datetime import datetime
from collections import OrderedDict
from typing import List
import os

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse

from gdm_assist import config
from gdm_assist.core.gdm import GUIDELINE_THRESHOLDS, AssessmentResult, GdmRiskEngine
from gdm_assist.core.readings import evaluate_glucose
from gdm_assist.core.reports import AssessmentReportGenerator
from gdm_assist.models import (
    AssessmentRequest,
    AssessmentResponse,
    GuidelineResponse,
    HealthResponse,
    ReadingRequest,
    ReadingResponse,
    ReportResponse,
)
from gdm_assist.utils import GdmAssistError, get_logger, setup_logging

logger = get_logger(__name__)


# ---- Application Lifespan ----

@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info(
        f"{config.API_TITLE} {config.API_VERSION} ready "
        f"(default guideline {_engine.default_guideline.value})"
    )
    yield
    logger.info(f"{config.API_TITLE} shut down.")


# ---- FastAPI Application ----

app = FastAPI(
    title=config.API_TITLE,
    description="Guideline-aligned gestational diabetes risk assessment (WHO / NICE)",
    version=config.API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GdmAssistError)
async def gdm_assist_error_handler(request: Request, exc: GdmAssistError):
    logger.log(
        exc.log_level,
        f"{request.method} {request.url.path} failed: {exc.code} {exc.message}",
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


# ---- Engine & generators ----
_engine = GdmRiskEngine(default_guideline=config.DEFAULT_GUIDELINE)
_report_gen = AssessmentReportGenerator(output_dir=config.REPORTS_DIR)

# report_id -> pdf path, oldest first; capped at config.REPORTS_MAX
_reports: "OrderedDict[str, str]" = OrderedDict()
START_TIME = datetime.now()


# ---- Utility Functions ----

def _remember_report(report_id: str, pdf_path: str) -> None:
    """Register a report for download, deleting the oldest PDFs past the cap."""
    _reports[report_id] = pdf_path
    while len(_reports) > config.REPORTS_MAX:
        old_id, old_path = _reports.popitem(last=False)
        if old_path and os.path.exists(old_path):
            os.remove(old_path)
        logger.debug("Report evicted", extra={"report_id": old_id})


def _to_response(result: AssessmentResult) -> AssessmentResponse:
    return AssessmentResponse(
        **result.to_dict(),
        summary=_engine.summarise(result),
        disclaimer=config.DISCLAIMER,
    )


def _health() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=config.API_VERSION,
        timestamp=datetime.now().isoformat(),
        uptime_seconds=(datetime.now() - START_TIME).total_seconds(),
    )


# ---- API Endpoints ----

@app.get("/", response_model=HealthResponse, tags=["Health"])
async def root():
    """API root - health check."""
    return _health()


@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    return _health()


@app.get("/api/v1/guidelines", response_model=List[GuidelineResponse], tags=["Reference"])
async def list_guidelines():
    """Diagnostic thresholds for every supported guideline."""
    return [GuidelineResponse(**t.to_dict()) for t in GUIDELINE_THRESHOLDS.values()]


@app.post("/api/v1/gdm/assess", response_model=AssessmentResponse, tags=["Assessment"])
async def run_assessment(request: AssessmentRequest):
    """
    Assess GDM risk for one patient under the requested guideline.
    """
    logger.info("Assessment requested", extra={"guideline": request.guideline.value})
    result = _engine.assess(request.to_input(), request.guideline)
    return _to_response(result)


@app.post("/api/v1/readings/classify", response_model=ReadingResponse, tags=["Readings"])
async def classify_reading(request: ReadingRequest):
    """
    Traffic-light a self-monitoring reading against NICE targets.
    """
    outcome = evaluate_glucose(request.glucose_mmol, request.context)
    logger.info(
        f"Reading {request.glucose_mmol:g} mmol/L ({request.context.value}): "
        f"{outcome.traffic.value}"
    )
    return ReadingResponse(
        glucose_mmol=request.glucose_mmol,
        context=request.context.value,
        **outcome.to_dict(),
    )


@app.post("/api/v1/gdm/report", response_model=ReportResponse, tags=["Reports"])
def generate_report(request: AssessmentRequest):
    """
    Run an assessment and export it as a PDF report.

    Declared sync so the reportlab build runs in the threadpool.
    """
    logger.info("Report requested", extra={"guideline": request.guideline.value})
    inp = request.to_input()
    result = _engine.assess(inp, request.guideline)
    report = _report_gen.generate(inp, result, patient_id=request.patient_id or "ANONYMOUS")

    _remember_report(report.report_id, report.pdf_path)

    return ReportResponse(
        report_id=report.report_id,
        pdf_path=report.pdf_path or "",
        generated_at=report.generated_at.isoformat(),
        download_url=f"/api/v1/reports/{report.report_id}/download",
        assessment=_to_response(result),
    )


@app.get("/api/v1/reports/{report_id}/download", tags=["Reports"])
async def download_report(report_id: str):
    """
    Download a generated PDF report.
    """
    logger.info("Report download", extra={"report_id": report_id})
    if report_id not in _reports:
        raise HTTPException(status_code=404, detail="Report not found")

    pdf_path = _reports[report_id]

    if not pdf_path or not os.path.exists(pdf_path):
        raise HTTPException(status_code=404, detail="PDF file not found")

    return FileResponse(
        path=pdf_path,
        media_type="application/pdf",
        filename=f"{report_id}.pdf"
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("gdm_assist.main:app", host="0.0.0.0", port=8000, reload=False)
