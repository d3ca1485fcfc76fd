"""
Image Uploader Backend - Landing Page and Health Check
=======================================================

What:  GET / (small HTML page pointing at the API docs) and GET /health.
How:   /health runs `SELECT 1` against the record store and pings the media
       host with the configured credentials.

Status levels:
    - healthy:   both dependencies reachable
    - degraded:  media host unreachable; listing and deletes of the record
                 store still work, uploads do not
    - unhealthy: record store unreachable (HTTP 503)
"""

import logging
import time

from fastapi import APIRouter, Request
from fastapi.responses import HTMLResponse, JSONResponse
from sqlalchemy import text

from image_uploader import __version__
from image_uploader.database import engine
from image_uploader.schemas.image import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/", response_class=HTMLResponse, include_in_schema=False)
async def index(request: Request) -> str:
    docs_url = request.app.docs_url or "/openapi.json"
    return f'<a href="{docs_url}">Image uploader API documentation</a>'


@router.get(
    "/health",
    response_model=HealthResponse,
    responses={503: {"description": "Record store unreachable", "model": HealthResponse}},
    summary="Service health check",
)
async def health_check(request: Request):
    """Probe the record store and the media host, and report an aggregate status."""
    db_status = "connected"
    media_status = "available"
    overall = "healthy"

    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        db_status = "disconnected"
        overall = "unhealthy"
        logger.warning("Health check: database unreachable: %s", str(e))

    media_host = request.app.state.media_host
    if not await media_host.health_check():
        media_status = "unavailable"
        if overall != "unhealthy":
            overall = "degraded"

    body = HealthResponse(
        status=overall,
        version=__version__,
        database=db_status,
        media_host=media_status,
        uptime_seconds=round(time.time() - _start_time, 2),
    )
    if overall == "unhealthy":
        return JSONResponse(status_code=503, content=body.model_dump())
    return body
