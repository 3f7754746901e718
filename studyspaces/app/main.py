"""FastAPI application for the study spaces check-in service."""

import contextlib
from collections.abc import AsyncGenerator

import fastapi
from sqlmodel import Session

import common.app

from . import database, routes, settings
from .checkin.services import CheckInStore
from .storage.stores import SqlKeyValueStore


def sweep_old_check_ins() -> int:
    """Apply the retention window to the stored check-ins."""
    with Session(database.engine) as session:
        store = CheckInStore(SqlKeyValueStore(session))
        return store.cleanup_old_check_ins(settings.RETENTION_DAYS)


@contextlib.asynccontextmanager
async def lifespan(app: fastapi.FastAPI) -> AsyncGenerator[None, None]:
    """Initialize the database and prune old check-ins on startup."""
    database.create_db_and_tables()
    sweep_old_check_ins()
    yield


app = common.app.create_app('Study Spaces', lifespan=lifespan)
app.include_router(routes.router)


if __name__ == '__main__':
    import uvicorn

    uvicorn.run('studyspaces.app.main:app', host='0.0.0.0', port=8000)
