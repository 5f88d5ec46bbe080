# sitevisits/api/v1/endpoints/health.py
from fastapi import APIRouter, Depends

from sitevisits.dependencies import get_visits_context
from sitevisits.models.stats import HealthResponse, VisitsHealth
from sitevisits.services.visits import VisitsContext

router = APIRouter()


@router.get("/healthz", response_model=HealthResponse, summary="Health check")
async def healthz(visits: VisitsContext = Depends(get_visits_context)):
    """Состояние сервиса и подсистемы визитов. Без авторизации, не трекается."""
    return HealthResponse(
        visits=VisitsHealth(
            enabled=visits.enabled,
            ready=visits.schema.ready,
            init_error=visits.schema.last_error,
        )
    )
