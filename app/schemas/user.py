from typing import Optional
from pydantic import BaseModel, EmailStr
from app.models.enums import UserRole


class UserOut(BaseModel):
    id: str
    email: EmailStr
    name: Optional[str] = None
    is_active: bool
    role: UserRole


class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = None
