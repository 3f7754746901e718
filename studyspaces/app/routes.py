"""HTTP API for check-ins, user stats and location activity."""

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session

from . import settings
from .checkin import qr
from .checkin.models import (
    CamelModel,
    CheckInRecord,
    CheckInStats,
    LocationCheckInData,
)
from .database import get_session
from .gamification.models import Achievement, LevelProgress, UserStats
from .locations.models import StudyLocation
from .locations.services import LocationDirectory, load_locations
from .services import CheckInResult, StudySpaceService
from .storage.stores import ConcurrentWriteError, SqlKeyValueStore

router = APIRouter(prefix='/api')

_directory: LocationDirectory | None = None


def get_directory() -> LocationDirectory:
    """Location directory loaded once from the configured locations file."""
    global _directory
    if _directory is None:
        _directory = LocationDirectory(load_locations(settings.LOCATIONS_FILE))
    return _directory


def get_service(
    session: Session = Depends(get_session),
    directory: LocationDirectory = Depends(get_directory),
) -> StudySpaceService:
    return StudySpaceService(SqlKeyValueStore(session), directory)


class CheckInRequest(CamelModel):
    qr_code: str | None = None
    location_id: str | None = None
    user_id: str | None = None


class CheckInResponse(CamelModel):
    check_in: CheckInRecord
    stats: UserStats
    closed: CheckInRecord | None = None


class QrCodeResponse(CamelModel):
    location_id: str
    code: str


def _response(result: CheckInResult) -> CheckInResponse:
    return CheckInResponse(
        check_in=result.check_in, stats=result.stats, closed=result.closed
    )


def _conflict() -> HTTPException:
    return HTTPException(
        status_code=409, detail='Check-in data changed concurrently, try again'
    )


# ---------------------------------------------------------------------------
# Check-ins
# ---------------------------------------------------------------------------


@router.post('/checkins', response_model=CheckInResponse)
async def create_check_in(
    data: CheckInRequest, service: StudySpaceService = Depends(get_service)
) -> CheckInResponse:
    """Check in by scanned QR payload or by location id."""
    try:
        if data.qr_code is not None:
            result = service.check_in_with_qr(data.qr_code, data.user_id)
            if result is None:
                raise HTTPException(status_code=400, detail='Invalid QR code')
        elif data.location_id:
            result = service.check_in(data.location_id, data.user_id)
        else:
            raise HTTPException(
                status_code=400, detail='Either qr_code or location_id is required'
            )
    except ConcurrentWriteError:
        raise _conflict() from None
    return _response(result)


@router.post('/checkins/{check_in_id}/checkout', response_model=CheckInResponse)
async def check_out(
    check_in_id: str, service: StudySpaceService = Depends(get_service)
) -> CheckInResponse:
    """Close an open check-in."""
    try:
        result = service.check_out(check_in_id)
    except ConcurrentWriteError:
        raise _conflict() from None
    if result is None:
        raise HTTPException(status_code=404, detail='No open check-in with that id')
    return _response(result)


@router.get('/checkins/stats', response_model=CheckInStats)
async def check_in_stats(
    service: StudySpaceService = Depends(get_service),
) -> CheckInStats:
    return service.get_stats()


@router.post('/checkins/cleanup')
async def cleanup_check_ins(
    days_to_keep: int = Query(default=settings.RETENTION_DAYS, ge=0),
    service: StudySpaceService = Depends(get_service),
) -> dict[str, int]:
    """Delete closed check-ins older than the retention window."""
    try:
        removed = service.check_ins.cleanup_old_check_ins(days_to_keep)
    except ConcurrentWriteError:
        raise _conflict() from None
    return {'removed': removed}


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------


@router.get('/users/{user_id}/active', response_model=CheckInRecord | None)
async def active_check_in(
    user_id: str, service: StudySpaceService = Depends(get_service)
) -> CheckInRecord | None:
    return service.check_ins.get_active_check_in(user_id)


@router.post('/users/{user_id}/checkout', response_model=CheckInResponse)
async def check_out_user(
    user_id: str, service: StudySpaceService = Depends(get_service)
) -> CheckInResponse:
    """Close whatever check-in the user has open."""
    try:
        result = service.check_out_user(user_id)
    except ConcurrentWriteError:
        raise _conflict() from None
    if result is None:
        raise HTTPException(status_code=404, detail='User has no open check-in')
    return _response(result)


@router.get('/users/{user_id}/stats', response_model=UserStats)
async def user_stats(
    user_id: str, service: StudySpaceService = Depends(get_service)
) -> UserStats:
    return service.stats.get_user_stats(user_id)


@router.delete('/users/{user_id}/stats', status_code=204)
async def reset_user_stats(
    user_id: str, service: StudySpaceService = Depends(get_service)
) -> None:
    service.stats.reset_user_stats(user_id)


@router.get('/users/{user_id}/achievements', response_model=list[Achievement])
async def user_achievements(
    user_id: str, service: StudySpaceService = Depends(get_service)
) -> list[Achievement]:
    return service.stats.get_achievements(user_id)


@router.get('/users/{user_id}/level', response_model=LevelProgress)
async def user_level(
    user_id: str, service: StudySpaceService = Depends(get_service)
) -> LevelProgress:
    return service.stats.get_level_progress(user_id)


# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------


@router.get('/locations', response_model=list[StudyLocation])
async def list_locations(
    service: StudySpaceService = Depends(get_service),
) -> list[StudyLocation]:
    """All locations with live occupancy."""
    return service.list_locations()


@router.get('/locations/{location_id}', response_model=LocationCheckInData)
async def location_data(
    location_id: str, service: StudySpaceService = Depends(get_service)
) -> LocationCheckInData:
    data = service.get_location_data(location_id)
    if data is None:
        raise HTTPException(status_code=404, detail='Location not found')
    return data


@router.get('/locations/{location_id}/qr', response_model=QrCodeResponse)
async def location_qr_code(
    location_id: str, directory: LocationDirectory = Depends(get_directory)
) -> QrCodeResponse:
    """QR payload to print for a location."""
    if directory.get_location_by_id(location_id) is None:
        raise HTTPException(status_code=404, detail='Location not found')
    return QrCodeResponse(location_id=location_id, code=qr.generate_qr_code(location_id))
