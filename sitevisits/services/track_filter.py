# sitevisits/services/track_filter.py
import re

HEALTH_PATH = "/healthz"
ADMIN_PREFIX = "/admin"

STATIC_ASSET_RE = re.compile(r"\.(js|css|map|png|jpg|jpeg|gif|webp|svg|ico|txt|xml)\Z", re.IGNORECASE)


def should_track(method: str, path: str) -> bool:
    """Считать ли запрос просмотром страницы."""
    if method != "GET":
        return False

    path = path or "/"
    if path == HEALTH_PATH or path.startswith(ADMIN_PREFIX):
        return False

    # Очевидная статика не считается
    if STATIC_ASSET_RE.search(path):
        return False

    return True
