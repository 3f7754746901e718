"""Location directory: the static list of study locations."""

import logging
import pathlib

import pydantic

from .models import StudyLocation

logger = logging.getLogger(__name__)

_locations_adapter = pydantic.TypeAdapter(list[StudyLocation])


class LocationDirectory:
    """Look up study locations by id."""

    def __init__(self, locations: list[StudyLocation] | None = None) -> None:
        self._locations = {loc.id: loc for loc in locations or []}

    def get_locations(self) -> list[StudyLocation]:
        return list(self._locations.values())

    def get_location_by_id(self, location_id: str) -> StudyLocation | None:
        return self._locations.get(location_id)


def load_locations(path: pathlib.Path) -> list[StudyLocation]:
    """Read locations from a JSON list; missing or invalid files give none."""
    try:
        raw = path.read_text(encoding='utf-8')
    except FileNotFoundError:
        logger.info('No locations file at %s', path)
        return []
    try:
        return _locations_adapter.validate_json(raw)
    except pydantic.ValidationError as e:
        logger.warning('Ignoring invalid locations file %s: %s', path, e)
        return []

