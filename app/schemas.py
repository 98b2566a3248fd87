"""Pydantic schemas for the HTTP API layer."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    SerializerFunctionWrapHandler,
    field_validator,
    model_serializer,
)

from models.records import SafetyStatus, parse_window_end_time


class Reading(BaseModel):
    """One aggregated measurement window for a device, as stored."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    device_id: str = Field(..., alias="DeviceId")
    window_end_time: datetime = Field(..., alias="WindowEndTime")
    avg_ice_thickness: Optional[float] = Field(default=None, alias="AvgIceThickness")
    avg_surface_temp: Optional[float] = Field(default=None, alias="AvgSurfaceTemp")
    max_snow_accumulation: Optional[float] = Field(
        default=None, alias="MaxSnowAccumulation"
    )
    safety_status: Optional[SafetyStatus] = Field(default=None, alias="SafetyStatus")
    location_name: Optional[str] = Field(default=None, alias="locationName")

    @field_validator("window_end_time", mode="before")
    @classmethod
    def _parse_window_end_time(cls, value: object) -> object:
        if isinstance(value, (str, datetime)):
            return parse_window_end_time(value)
        return value

    @model_serializer(mode="wrap")
    def _omit_missing_location(self, handler: SerializerFunctionWrapHandler):
        # History items carry no location name; leave the key out rather than null.
        data = handler(self)
        if self.location_name is None:
            data.pop("locationName", None)
            data.pop("location_name", None)
        return data


class LocationStatus(BaseModel):
    """Latest safety status projection for one device."""

    model_config = ConfigDict(populate_by_name=True)

    device_id: str = Field(..., alias="deviceId")
    safety_status: Optional[SafetyStatus] = Field(default=None, alias="safetyStatus")
    window_end_time: datetime = Field(..., alias="windowEndTime")
    location_name: Optional[str] = Field(default=None, alias="locationName")


class LatestResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    timestamp: datetime
    data: List[Reading] = Field(default_factory=list)


class HistoryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    device_id: str = Field(..., alias="deviceId")
    location_name: str = Field(..., alias="locationName")
    data: List[Reading] = Field(
        default_factory=list, description="Readings ordered oldest to newest."
    )


class StatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    overall_status: Optional[SafetyStatus] = Field(
        default=None,
        alias="overallStatus",
        description="Null when no device has reported a reading.",
    )
    locations: List[LocationStatus] = Field(default_factory=list)


class AllReadingsResponse(BaseModel):
    success: bool = True
    count: int = Field(..., ge=0)
    data: List[Dict[str, Any]] = Field(
        default_factory=list, description="Raw stored documents, newest first."
    )


class ErrorResponse(BaseModel):
    """Failure envelope shared by every API endpoint."""

    success: bool = False
    error: str


class CosmosHealth(BaseModel):
    endpoint: str = Field(..., description="Either 'configured' or 'missing'.")
    database: Optional[str] = None
    container: Optional[str] = None


class HealthResponse(BaseModel):
    status: str = "healthy"
    timestamp: datetime
    cosmosdb: CosmosHealth
    devices: List[str] = Field(default_factory=list)
