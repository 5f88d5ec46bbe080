# sitevisits/api/v1/endpoints/dashboard.py
import os
from datetime import datetime
from fastapi import Request
from fastapi.templating import Jinja2Templates

from sitevisits.models.stats import VisitStats

TEMPLATES_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.dirname(os.path.dirname(__file__)))), "templates")

# Для .html автоэкранирование включено по умолчанию
templates = Jinja2Templates(directory=TEMPLATES_DIR)

WINDOW_LABELS = (
    ("today", "Today"),
    ("d7", "Last 7 days"),
    ("d30", "Last 30 days"),
    ("all", "All time"),
)


def render_visits_page(request: Request, stats: VisitStats, generated_at: datetime):
    """Страница дашборда. График рисуется на клиенте Chart.js'ом по данным /admin/api/visits/timeseries."""
    return templates.TemplateResponse(
        request,
        "admin/visits.html",
        {
            "windows": WINDOW_LABELS,
            "stats": stats,
            "generated_at": generated_at.isoformat(timespec="seconds"),
        },
    )
