from __future__ import annotations

from pathlib import Path

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from models.devices import known_devices
from settings import DEFAULT_HISTORY_LIMIT, DEFAULT_REFRESH_INTERVAL


templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))


router = APIRouter(include_in_schema=False)


@router.get("/", name="dashboard", response_class=HTMLResponse)
async def dashboard(request: Request) -> HTMLResponse:
    devices = known_devices()
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "devices": devices,
            "device_config": {
                device.device_id.value: {
                    "key": device.key,
                    "name": device.location_name,
                    "color": device.color,
                }
                for device in devices
            },
            "refresh_ms": int(DEFAULT_REFRESH_INTERVAL * 1000),
            "history_limit": DEFAULT_HISTORY_LIMIT,
        },
    )
