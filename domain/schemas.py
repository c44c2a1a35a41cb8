from pydantic import BaseModel, field_validator
from typing import Optional, Dict


class UploadResponse(BaseModel):
    cv_id: Optional[str] = None
    report_id: Optional[str] = None


class EvaluateRequest(BaseModel):
    job_title: Optional[str] = None
    cv_id: str
    report_id: str


class EvaluationRequest(BaseModel):
    job_title: Optional[str] = None
    cv_text: str = ""
    report_text: str = ""

    @field_validator("cv_text", "report_text", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value


class RubricContext(BaseModel):
    cv_rubrics_text: str = ""
    project_rubrics_text: str = ""

    @field_validator("cv_rubrics_text", "project_rubrics_text", mode="before")
    @classmethod
    def _none_to_empty(cls, value):
        return "" if value is None else value


class EvaluationResult(BaseModel):
    cv_score: float
    cv_match_rate: float
    project_score: float
    cv_feedback: str
    project_feedback: str
    overall_summary: str
    raw_cv_scores: Optional[Dict[str, float]] = None
    raw_project_scores: Optional[Dict[str, float]] = None
    used_fallback: bool


class JobStatusResponse(BaseModel):
    id: str
    status: str
    result: Optional[EvaluationResult] = None
    error: Optional[str] = None
