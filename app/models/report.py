from datetime import date
from typing import Optional
import sqlalchemy as sa
from sqlmodel import Field, SQLModel
from app.models.base import IDModel, TimestampModel
from app.models.enums import ReportCategory, ReportStatus, enum_column


class Report(IDModel, TimestampModel, SQLModel, table=True):
    __tablename__ = 'reports'

    reference_id: str = Field(index=True, unique=True, max_length=32)
    user_id: Optional[str] = Field(default=None, index=True)
    category: ReportCategory = Field(sa_column=enum_column(ReportCategory, 'report_category', index=True))
    title: str
    description: str = Field(sa_type=sa.Text)
    location: Optional[str] = None
    incident_date: Optional[date] = None
    evidence_url: Optional[str] = Field(default=None, sa_type=sa.Text)
    status: ReportStatus = Field(
        default=ReportStatus.PENDING,
        sa_column=enum_column(ReportStatus, 'report_status'),
    )

    @property
    def is_anonymous(self) -> bool:
        return self.user_id is None
