"""Study spaces settings read from environment variables."""

import os
import zoneinfo
from pathlib import Path

DATA_DIR: str = os.environ.get('DATA_DIR', '/data')

# IANA zone that defines the calendar day (streaks) and hour of day
# (popular times). Timestamps themselves are always stored in UTC.
TIMEZONE_NAME: str = os.environ.get('STUDYSPACES_TIMEZONE', 'UTC')

RETENTION_DAYS: int = int(os.environ.get('STUDYSPACES_RETENTION_DAYS', '30'))
WRITE_RETRIES: int = int(os.environ.get('STUDYSPACES_WRITE_RETRIES', '3'))

LOCATIONS_FILE: Path = Path(
    os.environ.get('STUDYSPACES_LOCATIONS_FILE', str(Path(DATA_DIR) / 'locations.json'))
)


def get_timezone() -> zoneinfo.ZoneInfo:
    """Return the configured zone for local-day calculations."""
    return zoneinfo.ZoneInfo(TIMEZONE_NAME)
