# sitevisits/api/v1/router.py
from fastapi import APIRouter
from sitevisits.api.v1.endpoints import health, admin_visits

api_router_v1 = APIRouter()

# Пути фиксированные (/healthz, /admin/...), поэтому без общего префикса версии
api_router_v1.include_router(health.router, tags=["Health"])
api_router_v1.include_router(admin_visits.router)
