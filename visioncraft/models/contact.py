from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Any, Optional
from datetime import datetime


class ContactCreate(BaseModel):
    """Validated contact form payload"""
    name: str = Field(..., min_length=2)
    email: EmailStr
    phone: Optional[str] = None
    message: str = Field(..., min_length=10)

    @field_validator("phone", mode="before")
    @classmethod
    def phone_as_text(cls, value: Any) -> Any:
        # Free-form field; forms sometimes post the number as a JSON number
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


class ContactSubmission(BaseModel):
    """Stored contact form submission"""
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    message: str
    createdAt: datetime
