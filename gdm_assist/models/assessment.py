"""
API request/response schemas.

Range limits mirror the intake form, so the engine only ever sees
plausible values.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from gdm_assist.core.gdm import AssessmentInput, EthnicityRisk, Guideline
from gdm_assist.core.readings import ReadingContext
from gdm_assist.utils.exceptions import UnknownGuidelineError

_NUMERIC_FIELDS = (
    "age", "height_cm", "weight_kg", "gestational_age_weeks",
    "fasting_glucose", "ogtt_1h", "ogtt_2h", "systolic_bp",
)


def coerce_number(value: Any) -> Any:
    """Blank → None; "5,3" → 5.3. Anything else is left for pydantic to judge."""
    if value is None:
        return None
    if isinstance(value, str):
        cleaned = value.replace(",", ".").strip()
        if not cleaned:
            return None
        try:
            return float(cleaned)
        except ValueError:
            return value
    return value


class AssessmentRequest(BaseModel):
    """Patient measurements for one GDM assessment."""
    patient_id: Optional[str] = Field(default=None, description="Shown on exported reports")
    guideline: Guideline = Field(default=Guideline.WHO, description="WHO or NICE")

    age: int = Field(..., ge=15, le=55, description="Years")
    height_cm: Optional[float] = Field(default=None, ge=100, le=250)
    weight_kg: Optional[float] = Field(default=None, ge=30, le=200)
    gestational_age_weeks: Optional[int] = Field(default=None, ge=1, le=42)

    fasting_glucose: Optional[float] = Field(default=None, ge=0, le=30, description="mmol/L")
    ogtt_1h: Optional[float] = Field(default=None, ge=0, le=50, description="mmol/L")
    ogtt_2h: Optional[float] = Field(default=None, ge=0, le=50, description="mmol/L")

    history_gdm: bool = False
    family_history_dm: bool = False
    ethnicity_risk: EthnicityRisk = EthnicityRisk.LOW

    systolic_bp: Optional[float] = Field(default=None, ge=50, le=250, description="mmHg")

    @field_validator(*_NUMERIC_FIELDS, mode="before")
    @classmethod
    def _coerce_numeric(cls, v):
        return coerce_number(v)

    @field_validator("guideline", mode="before")
    @classmethod
    def _parse_guideline(cls, v):
        if v is None:
            return Guideline.WHO
        try:
            return Guideline.parse(v)
        except UnknownGuidelineError as exc:
            raise ValueError(exc.message) from exc

    @field_validator("ethnicity_risk", mode="before")
    @classmethod
    def _upper_ethnicity(cls, v):
        return v.strip().upper() if isinstance(v, str) else v

    def to_input(self) -> AssessmentInput:
        return AssessmentInput(
            age=self.age,
            height_cm=self.height_cm,
            weight_kg=self.weight_kg,
            gestational_age_weeks=self.gestational_age_weeks,
            fasting_glucose=self.fasting_glucose,
            ogtt_1h=self.ogtt_1h,
            ogtt_2h=self.ogtt_2h,
            history_gdm=self.history_gdm,
            family_history_dm=self.family_history_dm,
            ethnicity_risk=self.ethnicity_risk,
            systolic_bp=self.systolic_bp,
        )


class CriteriaResponse(BaseModel):
    fasting: Optional[bool] = None
    ogtt_1h: Optional[bool] = None
    ogtt_2h: Optional[bool] = None


class AssessmentResponse(BaseModel):
    """Assessment outcome as returned by the API."""
    guideline: str
    diagnostic: str
    criteria: CriteriaResponse
    score: int
    risk_level: str
    recommendations: List[str]
    explanations: List[str]
    references: List[str]
    bmi: Optional[float] = None
    summary: Dict[str, Any] = Field(default_factory=dict)
    disclaimer: str = ""


class ReadingRequest(BaseModel):
    """One self-monitoring capillary glucose reading."""
    glucose_mmol: float = Field(..., ge=0, le=50)
    context: ReadingContext = ReadingContext.UNKNOWN

    @field_validator("glucose_mmol", mode="before")
    @classmethod
    def _coerce_glucose(cls, v):
        return coerce_number(v)


class RuleActionResponse(BaseModel):
    label: str
    kind: str
    route: Optional[str] = None


class ReadingResponse(BaseModel):
    glucose_mmol: float
    context: str
    traffic: str
    message: str
    actions: List[RuleActionResponse]


class ReportResponse(BaseModel):
    report_id: str
    pdf_path: str
    generated_at: str
    download_url: str
    assessment: AssessmentResponse


class GuidelineResponse(BaseModel):
    guideline: str
    label: str
    fasting: float
    one_hour: Optional[float] = None
    two_hour: float
    references: List[str]


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: str
    uptime_seconds: float
