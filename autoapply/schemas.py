"""
AutoApply - Pydantic schemas for request/response validation.

Field names are snake_case in Python and camelCase on the wire,
matching what the browser chat UI sends and reads.
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Optional, List
from enum import Enum
import re


EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')


def is_valid_email(value: Optional[str]) -> bool:
    """Loose address check, same rule used for extracted company emails."""
    return bool(value) and EMAIL_PATTERN.match(value) is not None


class Eligibility(str, Enum):
    ELIGIBLE = "Eligible"
    NOT_ELIGIBLE = "Not Eligible"


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# --- Analysis ---

class JobAnalysis(CamelModel):
    """Compatibility verdict returned by the model for one job post."""
    compatibility: int = Field(..., ge=0, le=100)
    matching_skills: List[str] = Field(default_factory=list, alias="matchingSkills")
    missing_skills: List[str] = Field(default_factory=list, alias="missingSkills")
    eligibility: Eligibility

    @field_validator("compatibility", mode="before")
    @classmethod
    def round_compatibility(cls, v):
        # Models occasionally answer 72.5 or "72"
        if isinstance(v, str):
            v = v.strip().rstrip("%")
        if isinstance(v, (str, float)):
            return int(round(float(v)))
        return v


class AnalyzeResponse(CamelModel):
    job_text: str = Field(..., alias="jobText")
    analysis: JobAnalysis
    email: str
    company_email: Optional[str] = Field(None, alias="companyEmail")
    job_title: str = Field(..., alias="jobTitle")
    success: bool = True


# --- Email ---

class SendEmailRequest(BaseModel):
    """Fields are optional; the route reports missing ones as a 400."""
    to: Optional[str] = None
    subject: Optional[str] = None
    body: Optional[str] = None

    def missing_fields(self) -> List[str]:
        return [
            name for name in ("to", "subject", "body")
            if not (getattr(self, name) or "").strip()
        ]


class SendEmailResponse(BaseModel):
    success: bool = True
    message: str


# --- System ---

class ErrorResponse(BaseModel):
    error: str
    details: Optional[str] = None


class HealthResponse(BaseModel):
    status: str
    message: str
    version: str
    timestamp: datetime


class AIStatusResponse(CamelModel):
    enabled: bool
    available: bool
    model: str
    vision_model: str = Field(..., alias="visionModel")
    models: List[str]
    cached_items: int = Field(..., alias="cachedItems")
