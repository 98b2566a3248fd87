"""HTTP route definitions for the service."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse

from app.schemas import (
    AllReadingsResponse,
    CosmosHealth,
    ErrorResponse,
    HealthResponse,
    HistoryResponse,
    LatestResponse,
    StatusResponse,
)
from datastore.base import ReadingStoreError
from models.devices import known_devices, location_name_for
from services.monitor import MonitorService, build_default_monitor
from settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()

_FAILURE_RESPONSES = {status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse}}


def get_monitor() -> MonitorService:
    return build_default_monitor()


def _failure(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(error=message).model_dump(),
    )


@router.get(
    "/api/latest",
    response_model=LatestResponse,
    responses=_FAILURE_RESPONSES,
    summary="Latest reading for every location that has reported.",
)
async def get_latest(monitor: MonitorService = Depends(get_monitor)):
    try:
        data = await run_in_threadpool(monitor.latest_per_location)
    except ReadingStoreError:
        logger.exception("Error fetching latest data", extra={"endpoint": "latest"})
        return _failure("Failed to fetch latest data")
    return LatestResponse(timestamp=datetime.now(timezone.utc), data=data)


@router.get(
    "/api/history/{device_id}",
    response_model=HistoryResponse,
    responses=_FAILURE_RESPONSES,
    summary="Most recent readings for one device, oldest first.",
)
async def get_history(
    device_id: str,
    limit: Optional[str] = Query(
        default=None, description="Number of readings to return (defaults to 12)."
    ),
    monitor: MonitorService = Depends(get_monitor),
):
    try:
        data = await run_in_threadpool(monitor.readings.get_history, device_id, limit)
    except ReadingStoreError:
        logger.exception(
            "Error fetching history", extra={"endpoint": "history", "device_id": device_id}
        )
        return _failure("Failed to fetch historical data")
    return HistoryResponse(
        device_id=device_id,
        location_name=location_name_for(device_id),
        data=data,
    )


@router.get(
    "/api/status",
    response_model=StatusResponse,
    responses=_FAILURE_RESPONSES,
    summary="Overall canal safety status derived from each location's latest reading.",
)
async def get_status(monitor: MonitorService = Depends(get_monitor)):
    try:
        overall, locations = await run_in_threadpool(monitor.overall_status)
    except ReadingStoreError:
        logger.exception("Error fetching status", extra={"endpoint": "status"})
        return _failure("Failed to fetch system status")
    return StatusResponse(overall_status=overall, locations=locations)


@router.get(
    "/api/all",
    response_model=AllReadingsResponse,
    responses=_FAILURE_RESPONSES,
    summary="Every stored reading, newest first. Intended for debugging.",
)
async def get_all(monitor: MonitorService = Depends(get_monitor)):
    try:
        data = await run_in_threadpool(monitor.readings.get_all)
    except ReadingStoreError:
        logger.exception("Error fetching all data", extra={"endpoint": "all"})
        return _failure("Failed to fetch all data")
    return AllReadingsResponse(count=len(data), data=data)


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check endpoint.",
    status_code=status.HTTP_200_OK,
)
async def healthcheck() -> HealthResponse:
    settings = get_settings()
    return HealthResponse(
        timestamp=datetime.now(timezone.utc),
        cosmosdb=CosmosHealth(
            endpoint="configured" if settings.cosmos_endpoint else "missing",
            database=settings.cosmos_database,
            container=settings.cosmos_container,
        ),
        devices=[device.device_id.value for device in known_devices()],
    )
