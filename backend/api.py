"""HTTP route definitions for the readings API.

Routes stay thin: parse the raw query string, call a service, map the
outcome onto a status code. Services are looked up on `app.state` so the
app factory decides which repositories back them.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status

from errors import NotFound
from models import RainfallReadingsResponse, RiverReadingsResponse
from params import parse_query
from service_readings import RainfallService, RiverService

logger = logging.getLogger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error when getting readings"

router = APIRouter()


def get_river_service(request: Request) -> RiverService:
    return request.app.state.river_service


def get_rainfall_service(request: Request) -> RainfallService:
    return request.app.state.rainfall_service


def _bad_request(exc: ValueError, path: str) -> HTTPException:
    logger.warning(
        "Invalid query parameter: %s", exc,
        extra={"path": path, "parameter": getattr(exc, "name", None)},
    )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get(
    "/river",
    response_model=RiverReadingsResponse,
    summary="River level readings, oldest first.",
)
def river_readings(
    response: Response,
    page: Optional[str] = Query(None),
    pagesize: Optional[str] = Query(None),
    start: Optional[str] = Query(None),
    svc: RiverService = Depends(get_river_service),
) -> RiverReadingsResponse:
    try:
        page_num, page_size, start_date = parse_query(page, pagesize, start)
    except ValueError as e:
        raise _bad_request(e, "/river") from e

    try:
        result = svc.get_readings(page_num, page_size, start_date)
    except Exception as e:
        logger.exception("Error fetching river readings", extra={"path": "/river"})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=INTERNAL_ERROR_MESSAGE,
        ) from e

    response.headers["X-Total-Count"] = str(result.total)
    return RiverReadingsResponse(readings=result.readings)


@router.get(
    "/rainfall/{station}",
    response_model=RainfallReadingsResponse,
    summary="Rainfall readings for one station, oldest first.",
)
def rainfall_readings(
    station: str,
    response: Response,
    page: Optional[str] = Query(None),
    pagesize: Optional[str] = Query(None),
    start: Optional[str] = Query(None),
    svc: RainfallService = Depends(get_rainfall_service),
) -> RainfallReadingsResponse:
    path = f"/rainfall/{station}"
    try:
        page_num, page_size, start_date = parse_query(page, pagesize, start)
    except ValueError as e:
        raise _bad_request(e, path) from e

    try:
        result = svc.get_readings_by_station(station, page_num, page_size, start_date)
    except NotFound as e:
        logger.info("Unknown station", extra={"path": path, "station": station})
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e)) from e
    except Exception as e:
        logger.exception("Error fetching rainfall readings", extra={"path": path})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=INTERNAL_ERROR_MESSAGE,
        ) from e

    response.headers["X-Total-Count"] = str(result.total)
    return RainfallReadingsResponse(readings=result.readings)


@router.get("/health", summary="Database reachability check.")
def health(svc: RiverService = Depends(get_river_service)) -> dict:
    try:
        svc.health_check()
        return {"ok": True}
    except Exception as e:
        logger.exception("Health check failed", extra={"path": "/health"})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="DB health check failed",
        ) from e
