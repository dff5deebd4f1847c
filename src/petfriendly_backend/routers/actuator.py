from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..configuration import get_settings
from ..database import Database
from ..dependencies import get_database
from ..models import HealthResponse, InfoResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
def health(db: Database = Depends(get_database)):
    if db.ping():
        return HealthResponse(status="UP", database="UP")
    logger.error("Health check reports the database as DOWN")
    return JSONResponse(status_code=503, content={"status": "DOWN", "database": "DOWN"})


@router.get("/info", response_model=InfoResponse)
def info() -> InfoResponse:
    app_settings = get_settings().app
    return InfoResponse(name=app_settings.name, version=app_settings.version, description=app_settings.description)
