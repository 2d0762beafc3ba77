from datetime import datetime
from typing import Optional
from pydantic import BaseModel
from app.models.enums import EntityType, ReportCategory, ReportStatus


class ReportSummaryOut(BaseModel):
    reference_id: str
    title: str
    category: ReportCategory
    location: Optional[str] = None
    status: ReportStatus
    created_at: datetime


class LookupResultOut(BaseModel):
    id: str
    entity_type: EntityType
    entity_value: str
    created_at: datetime
    report: ReportSummaryOut
