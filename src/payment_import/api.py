"""Read-only status API for the payment import job.

The API never starts a run; runs are scheduled externally and must not overlap.
"""

import logging
from typing import Optional, List

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from pydantic import BaseModel
from slowapi.errors import RateLimitExceeded

from . import database
from .auth import limiter, rate_limit_handler, verify_api_key
from .checkpoint import CheckpointStore, get_checkpoint_store
from .config import SyncConfig
from .database import SyncRunRepository
from .exceptions import CheckpointError, ConfigurationError
from .sync import determine_window

logger = logging.getLogger(__name__)

app = FastAPI(title="Payment Import - Sync Status API")
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_handler)


class WindowResponse(BaseModel):
    start_date: str
    end_date: str
    resume_transaction_id: Optional[str] = None
    empty: bool = False


class CheckpointResponse(BaseModel):
    last_date: Optional[str] = None
    last_transaction_id: Optional[str] = None
    fresh: bool
    next_window: WindowResponse


def get_config() -> SyncConfig:
    """Load configuration from the environment for each request."""
    try:
        return SyncConfig.from_env()
    except ConfigurationError as e:
        logger.error(str(e))
        raise HTTPException(status_code=500, detail="Server configuration error")


def _session_factory(config: SyncConfig):
    if not config.database_url:
        return None
    try:
        return database.get_session_factory()
    except RuntimeError:
        database.init_db(config.database_url)
        return database.get_session_factory()


def get_store(config: SyncConfig = Depends(get_config)) -> CheckpointStore:
    return get_checkpoint_store(config, _session_factory(config))


@app.get("/sync/health")
def health():
    """Health check endpoint."""
    return {"status": "healthy", "service": "payment-import"}


@app.get("/sync/checkpoint", response_model=CheckpointResponse)
@limiter.limit("60/minute")
def read_checkpoint(
    request: Request,
    config: SyncConfig = Depends(get_config),
    store: CheckpointStore = Depends(get_store),
    api_key: str = Depends(verify_api_key),
):
    """
    Show the stored checkpoint and the window the next run would query.
    """
    try:
        checkpoint = store.load()
    except CheckpointError as e:
        logger.error(f"Cannot load checkpoint: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    window = determine_window(config.start_date, checkpoint)
    return CheckpointResponse(
        last_date=None if checkpoint.fresh else checkpoint.last_date.isoformat(),
        last_transaction_id=checkpoint.last_transaction_id,
        fresh=checkpoint.fresh,
        next_window=WindowResponse(
            start_date=window.start_date.isoformat(),
            end_date=window.end_date.isoformat(),
            resume_transaction_id=window.resume_transaction_id,
            empty=window.is_empty,
        ),
    )


@app.get("/sync/runs")
@limiter.limit("60/minute")
def list_runs(
    request: Request,
    limit: int = Query(default=20, ge=1, le=200, description="Number of runs to return"),
    config: SyncConfig = Depends(get_config),
    api_key: str = Depends(verify_api_key),
) -> List[dict]:
    """
    List recent sync runs, newest first. Requires DATABASE_URL.
    """
    session_factory = _session_factory(config)
    if session_factory is None:
        raise HTTPException(status_code=503, detail="Run history requires DATABASE_URL")

    with session_factory() as session:
        runs = SyncRunRepository(session).list_recent(limit)
        return [run.to_dict() for run in runs]
