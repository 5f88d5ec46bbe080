# sitevisits/api/middleware.py
import logging
from typing import Awaitable, Callable
from fastapi import Request, Response

from sitevisits.services.identity import build_visitor_cookie, resolve_visitor
from sitevisits.services.track_filter import should_track
from sitevisits.services.visits import VisitsContext

logger = logging.getLogger(__name__)


async def track_visits(request: Request, call_next: Callable[[Request], Awaitable[Response]]) -> Response:
    """
    HTTP middleware учета просмотров.
    Визит только ставится в очередь рекордера; запрос к базе ответ не задерживает.
    """
    visits: VisitsContext = request.app.state.visits
    if visits.recorder is None or not should_track(request.method, request.url.path):
        return await call_next(request)

    identity = resolve_visitor(request.headers.get("cookie"))
    try:
        visits.recorder.record(identity.visitor_id, request.url.path or "/")
    except Exception as e:
        # Учет никогда не ломает пользовательский запрос
        logger.warning(f"Could not enqueue visit: {e}")

    response = await call_next(request)
    if identity.is_new:
        response.headers.append("set-cookie", build_visitor_cookie(identity.visitor_id))
    return response
