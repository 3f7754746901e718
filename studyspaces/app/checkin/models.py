"""Models for check-in records and the views derived from them."""

from __future__ import annotations

import pydantic
from pydantic.alias_generators import to_camel

from ..clock import UtcDatetime


class CamelModel(pydantic.BaseModel):
    """Base model that reads and writes camelCase JSON keys."""

    model_config = pydantic.ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CheckInRecord(CamelModel):
    """One visit of a user to a location, open until checkout."""

    id: str
    location_id: str
    user_id: str
    start_time: UtcDatetime
    end_time: UtcDatetime | None = None
    duration_minutes: int | None = None
    active: bool = True

    @pydantic.model_validator(mode='after')
    def _check_lifecycle(self) -> CheckInRecord:
        closed = self.end_time is not None and self.duration_minutes is not None
        opened = self.end_time is None and self.duration_minutes is None
        if self.active and not opened:
            raise ValueError('active check-ins cannot have an end time or duration')
        if not self.active and not closed:
            raise ValueError('closed check-ins need an end time and duration')
        return self


class PopularLocation(CamelModel):
    location_id: str
    count: int


class CheckInStats(CamelModel):
    """Totals over every stored check-in."""

    total_check_ins: int
    active_check_ins: int
    average_duration: int
    popular_locations: list[PopularLocation]


class PopularTime(CamelModel):
    hour: int
    count: int


class LocationCheckInData(CamelModel):
    """Check-in activity for a single location."""

    location_id: str
    location_name: str
    total_check_ins: int
    current_occupancy: int
    capacity: int
    last_check_in: UtcDatetime | None = None
    popular_times: list[PopularTime]
