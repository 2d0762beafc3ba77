from typing import Optional
import sqlalchemy as sa
from sqlmodel import Field, SQLModel
from app.models.base import IDModel, TimestampModel


class Article(IDModel, TimestampModel, SQLModel, table=True):
    """Awareness article. Drafts are visible to their author only."""

    __tablename__ = 'articles'

    user_id: str = Field(index=True)
    title: str = Field(max_length=255)
    author: Optional[str] = None
    content: str = Field(sa_type=sa.Text)
    published: bool = Field(default=False, index=True)
