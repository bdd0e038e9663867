# core/models.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --------------------------------------------------
# REQUESTS
# --------------------------------------------------
class AnalyzeResumeRequest(CamelModel):
    resume_text: str = Field(..., description="Plain resume text")
    job_description: Optional[str] = Field(
        None, description="Optional job description to match against"
    )

    @field_validator("resume_text")
    @classmethod
    def _resume_required(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Resume text is required")
        return v

    @field_validator("job_description")
    @classmethod
    def _blank_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not v.strip():
            return None
        return v


class UserCreate(BaseModel):
    username: str
    password: str


# --------------------------------------------------
# RESULTS
# --------------------------------------------------
class AnalysisResult(CamelModel):
    summary: Optional[str] = None
    rating: Optional[int] = None
    rating_explanation: Optional[str] = None
    skills: Optional[List[str]] = None
    highlights: Optional[List[str]] = None
    match_score: Optional[int] = None
    missing_keywords: Optional[List[str]] = None
    suggestions: Optional[List[str]] = None
    cover_letter: Optional[str] = None
    interview_questions: Optional[List[str]] = None
    linkedin_summary: Optional[str] = None


class AnalysisResponse(AnalysisResult):
    id: str


class ResumeAnalysis(AnalysisResult):
    """A stored analysis, as returned by GET /api/analysis/{id}."""

    id: str
    resume_text: str
    job_description: Optional[str] = None
    created_at: datetime


class User(BaseModel):
    id: str
    username: str
    password: str


class ExtractedText(BaseModel):
    text: str
