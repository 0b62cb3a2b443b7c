from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Any
from app.core.constants import PropertyType, NAME_MAX_LENGTH, DESCRIPTION_MAX_LENGTH
from app.schemas.event import validate_not_blank


class PropertyCreate(BaseModel):
    """Schema for creating a single property"""

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    type: PropertyType
    description: str = Field(..., min_length=1, max_length=DESCRIPTION_MAX_LENGTH)
    validation_rules: dict[str, Any] | None = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return validate_not_blank(v)


class PropertyUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=NAME_MAX_LENGTH)
    type: PropertyType | None = None
    description: str | None = Field(None, min_length=1, max_length=DESCRIPTION_MAX_LENGTH)
    validation_rules: dict[str, Any] | None = None

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        return None if v is None else validate_not_blank(v)


class PropertyResponse(BaseModel):
    id: int
    name: str
    type: PropertyType
    description: str
    validation_rules: dict[str, Any] | None = None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
