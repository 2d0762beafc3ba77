from typing import Optional
from sqlmodel import Field, SQLModel
from app.models.base import TimestampModel


class Profile(TimestampModel, SQLModel, table=True):
    """Identity record kept by the report core, keyed by the provider's user id."""

    __tablename__ = 'profiles'

    id: str = Field(primary_key=True)
    email: Optional[str] = Field(default=None, index=True)
    display_name: Optional[str] = None
