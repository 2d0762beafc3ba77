from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator
from app.models.enums import EntityType, ReportCategory, ReportStatus


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class LookupEntityIn(BaseModel):
    entity_type: EntityType
    value: str


class ReportSubmission(BaseModel):
    """Raw submission input. Required fields are checked by the report builder."""

    category: str = ''
    title: str = ''
    description: str = ''
    location: Optional[str] = None
    incident_date: Optional[date] = None
    entities: list[LookupEntityIn] = Field(default_factory=list)

    @field_validator('location', 'incident_date', mode='before')
    @classmethod
    def normalize_optional(cls, value):
        return _blank_to_none(value)


class ReportUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    category: Optional[ReportCategory] = None
    location: Optional[str] = None
    incident_date: Optional[date] = None
    status: Optional[ReportStatus] = None

    @field_validator('title', 'description', mode='before')
    @classmethod
    def strip_required(cls, value):
        # min_length then rejects whitespace-only edits
        return value.strip() if isinstance(value, str) else value

    @field_validator('location', 'incident_date', mode='before')
    @classmethod
    def normalize_optional(cls, value):
        return _blank_to_none(value)


class ReportOut(BaseModel):
    id: str
    reference_id: str
    category: ReportCategory
    title: str
    description: str
    location: Optional[str] = None
    incident_date: Optional[date] = None
    evidence_url: Optional[str] = None
    status: ReportStatus
    is_anonymous: bool
    created_at: datetime


class ReportSubmitOut(ReportOut):
    warnings: list[str] = Field(default_factory=list)


class LookupEntityOut(BaseModel):
    id: str
    report_id: str
    entity_type: EntityType
    entity_value: str
    created_at: datetime


class EntityReplace(BaseModel):
    entities: list[LookupEntityIn] = Field(default_factory=list)
