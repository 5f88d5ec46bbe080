# sitevisits/api/v1/endpoints/admin_visits.py
import logging
from datetime import datetime, timezone
from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse

from sitevisits.api.v1.endpoints.dashboard import render_visits_page
from sitevisits.dependencies import get_visits_context, verify_operator
from sitevisits.models.stats import TimeSeriesResponse, VisitStatsResponse
from sitevisits.services.aggregator import parse_days
from sitevisits.services.schema import NOT_CONFIGURED
from sitevisits.services.visits import VisitsContext

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin Visits"], dependencies=[Depends(verify_operator)])


def _not_configured() -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"ok": False, "error": NOT_CONFIGURED})


def _failed(e: Exception) -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"ok": False, "error": str(e)})


@router.get("/api/visits", response_model=VisitStatsResponse)
async def get_visit_stats(visits: VisitsContext = Depends(get_visits_context)):
    """Просмотры и уникальные посетители за сегодня / 7 дней / 30 дней / все время."""
    if visits.aggregator is None:
        return _not_configured()
    try:
        stats = await visits.aggregator.stats()
    except Exception as e:
        logger.error(f"Failed to compute visit stats: {e}")
        return _failed(e)
    return VisitStatsResponse(stats=stats)


@router.get("/api/visits/timeseries", response_model=TimeSeriesResponse)
async def get_visit_time_series(
    days: Optional[str] = Query(None, description="Количество дней, 1..365 (по умолчанию 30)"),
    visits: VisitsContext = Depends(get_visits_context),
):
    """Дневной ряд за последние N дней, пустые дни заполнены нулями."""
    if visits.aggregator is None:
        return _not_configured()
    n_days = parse_days(days)
    try:
        series = await visits.aggregator.time_series(n_days)
    except Exception as e:
        logger.error(f"Failed to compute visit time series: {e}")
        return _failed(e)
    return TimeSeriesResponse(days=n_days, series=series)


@router.get("/visits", response_class=HTMLResponse)
async def visits_dashboard(request: Request, visits: VisitsContext = Depends(get_visits_context)):
    if visits.aggregator is None:
        return PlainTextResponse(f"{NOT_CONFIGURED}\n", status_code=status.HTTP_400_BAD_REQUEST)
    try:
        stats = await visits.aggregator.stats()
    except Exception as e:
        logger.error(f"Failed to render visits dashboard: {e}")
        return PlainTextResponse(str(e), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
    return render_visits_page(request, stats, generated_at=datetime.now(timezone.utc))
