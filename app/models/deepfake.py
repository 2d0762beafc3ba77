from typing import Any, Optional
import sqlalchemy as sa
from sqlmodel import Field, SQLModel
from app.models.base import CreatedAtModel, IDModel


class DeepfakeMeta(IDModel, CreatedAtModel, SQLModel, table=True):
    __tablename__ = 'deepfakes'

    report_id: str = Field(foreign_key='reports.id', ondelete='CASCADE', unique=True, index=True)
    file_url: str = Field(default='', sa_type=sa.Text)
    file_name: Optional[str] = None
    file_size: Optional[int] = None
    file_type: Optional[str] = None
    file_metadata: Optional[dict[str, Any]] = Field(
        default=None,
        sa_column=sa.Column('metadata', sa.JSON, nullable=True),
    )
