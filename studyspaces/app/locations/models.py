"""Study location data as supplied by the location directory."""

import enum

import pydantic

from ..checkin.models import CamelModel


class LocationType(enum.StrEnum):
    """Kinds of study location."""

    LIBRARY = 'library'
    QUIET_ZONE = 'quiet-zone'
    COLLABORATIVE = 'collaborative'
    CAFE = 'cafe'
    COWORKING = 'coworking'
    PUBLIC_SPACE = 'public-space'
    ENTREPRENEURIAL = 'entrepreneurial'


class StudyLocation(CamelModel):
    """A place where users can check in."""

    id: str
    name: str
    latitude: float
    longitude: float
    type: LocationType = LocationType.LIBRARY
    description: str | None = None
    address: str | None = None
    capacity: int | None = pydantic.Field(default=None, ge=0)
    current_occupancy: int | None = None
    opening_hours: str | None = None
    amenities: list[str] = []
    quietness_level: str | None = None
