from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator


def _strip(value):
    return value.strip() if isinstance(value, str) else value


class ArticleCreate(BaseModel):
    title: str = Field(min_length=1, max_length=255)
    content: str = Field(min_length=1)
    author: Optional[str] = None
    published: bool = False

    @field_validator('title', 'content', 'author', mode='before')
    @classmethod
    def strip_text(cls, value):
        return _strip(value)


class ArticleUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=255)
    content: Optional[str] = Field(default=None, min_length=1)
    author: Optional[str] = None
    published: Optional[bool] = None

    @field_validator('title', 'content', 'author', mode='before')
    @classmethod
    def strip_text(cls, value):
        return _strip(value)


class ArticleOut(BaseModel):
    id: str
    user_id: str
    title: str
    author: Optional[str] = None
    content: str
    published: bool
    created_at: datetime
    updated_at: datetime
