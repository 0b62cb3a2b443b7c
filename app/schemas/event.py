# Pydantic schemas

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from app.core.constants import EventType, NAME_MAX_LENGTH, DESCRIPTION_MAX_LENGTH


def validate_not_blank(v: str) -> str:
    if not v or not v.strip():
        raise ValueError('Field cannot be empty or whitespace')
    return v


class EventCreate(BaseModel):
    """Schema for creating a single event"""

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    type: EventType
    description: str = Field(..., min_length=1, max_length=DESCRIPTION_MAX_LENGTH)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return validate_not_blank(v)


class EventUpdate(BaseModel):
    """Partial update; only supplied fields are written"""

    name: str | None = Field(None, min_length=1, max_length=NAME_MAX_LENGTH)
    type: EventType | None = None
    description: str | None = Field(None, min_length=1, max_length=DESCRIPTION_MAX_LENGTH)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        return None if v is None else validate_not_blank(v)


class EventResponse(BaseModel):
    """Response schema for event operations"""

    id: int
    name: str
    type: EventType
    description: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
