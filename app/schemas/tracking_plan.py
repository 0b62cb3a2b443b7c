from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from app.core.constants import PropertyType, NAME_MAX_LENGTH, DESCRIPTION_MAX_LENGTH
from app.schemas.event import validate_not_blank


class TrackingPlanProperty(BaseModel):
    """Property definition embedded in a tracking plan event"""

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    type: PropertyType
    required: bool
    description: str = Field(..., min_length=1, max_length=DESCRIPTION_MAX_LENGTH)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return validate_not_blank(v)


class TrackingPlanEvent(BaseModel):
    """Event definition embedded in a tracking plan (reconciled as a 'track' event)"""

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    description: str = Field(..., min_length=1, max_length=DESCRIPTION_MAX_LENGTH)
    properties: list[TrackingPlanProperty]
    additional_properties: bool = Field(..., alias="additionalProperties")

    model_config = ConfigDict(populate_by_name=True)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return validate_not_blank(v)


class TrackingPlanCreate(BaseModel):
    """Schema for creating a tracking plan"""

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    description: str = Field(..., min_length=1, max_length=DESCRIPTION_MAX_LENGTH)
    events: list[TrackingPlanEvent] = Field(..., min_length=1)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        return validate_not_blank(v)


class TrackingPlanUpdate(BaseModel):
    """Partial update; a supplied events list replaces the old one entirely"""

    name: str | None = Field(None, min_length=1, max_length=NAME_MAX_LENGTH)
    description: str | None = Field(None, min_length=1, max_length=DESCRIPTION_MAX_LENGTH)
    events: list[TrackingPlanEvent] | None = Field(None, min_length=1)

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        return None if v is None else validate_not_blank(v)


class TrackingPlanResponse(BaseModel):
    id: int
    name: str
    description: str
    events: list[TrackingPlanEvent]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)


def dump_events(events: list[TrackingPlanEvent]) -> list[dict]:
    """JSON document stored in tracking_plans.events, in wire shape"""
    return [event.model_dump(mode="json", by_alias=True) for event in events]
