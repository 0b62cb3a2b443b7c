# Catalog constants

from typing import Literal

EventType = Literal["track", "identify", "alias", "screen", "page"]
PropertyType = Literal["string", "number", "boolean"]

EVENT_TYPES: tuple[str, ...] = ("track", "identify", "alias", "screen", "page")
PROPERTY_TYPES: tuple[str, ...] = ("string", "number", "boolean")

# Tracking plan events are always reconciled against this event type
TRACKING_PLAN_EVENT_TYPE = "track"

NAME_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 1000

PERMISSIONS: tuple[str, ...] = ("read", "write", "delete")

ERROR_MESSAGES = {
    "EVENT_NOT_FOUND": "Event not found",
    "PROPERTY_NOT_FOUND": "Property not found",
    "TRACKING_PLAN_NOT_FOUND": "Tracking plan not found",
    "EVENT_ALREADY_EXISTS": "Event with this name and type already exists",
    "PROPERTY_ALREADY_EXISTS": "Property with this name and type already exists",
    "TRACKING_PLAN_ALREADY_EXISTS": "Tracking plan with this name already exists",
    "VALIDATION_ERROR": "Validation error",
    "INTERNAL_ERROR": "Internal server error",
    "UNAUTHORIZED": "Unauthorized",
    "FORBIDDEN": "Forbidden",
}
