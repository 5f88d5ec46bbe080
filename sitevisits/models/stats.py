# sitevisits/models/stats.py
from datetime import date
from typing import List, Optional
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """База для ответов API: поля в snake_case, JSON в camelCase."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class WindowStats(CamelModel):
    page_views: int = 0
    unique_visitors: int = 0


class VisitStats(CamelModel):
    today: WindowStats
    d7: WindowStats
    d30: WindowStats
    all: WindowStats


class SeriesPoint(CamelModel):
    day: date
    page_views: int = 0
    unique_visitors: int = 0


class VisitStatsResponse(CamelModel):
    ok: bool = True
    stats: VisitStats


class TimeSeriesResponse(CamelModel):
    ok: bool = True
    days: int
    series: List[SeriesPoint]


class VisitsHealth(CamelModel):
    enabled: bool
    ready: bool
    init_error: Optional[str] = None


class HealthResponse(CamelModel):
    ok: bool = True
    visits: VisitsHealth
