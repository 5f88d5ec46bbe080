# sitevisits/dependencies.py
import base64
import binascii
import hmac
import logging
from typing import Annotated, Optional
from fastapi import Header, Request, HTTPException, status

from sitevisits.core.config import Settings
from sitevisits.core.exceptions import OperatorAuthError
from sitevisits.services.visits import VisitsContext

logger = logging.getLogger(__name__)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_visits_context(request: Request) -> VisitsContext:
    visits = getattr(request.app.state, 'visits', None)
    if not visits or not isinstance(visits, VisitsContext):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Visits subsystem is not initialized."
        )
    return visits


def _basic_password(authorization: str) -> Optional[str]:
    """Пароль из заголовка 'Basic <base64(user:password)>'. Имя пользователя не важно."""
    scheme, _, encoded = authorization.partition(" ")
    if scheme != "Basic" or not encoded:
        return None
    try:
        decoded = base64.b64decode(encoded).decode("utf-8", errors="replace")
    except (binascii.Error, ValueError):
        return ""
    _, sep, password = decoded.partition(":")
    return password if sep else ""


async def verify_operator(
    request: Request,
    authorization: Annotated[Optional[str], Header()] = None,
) -> bool:
    """
    Зависимость для защиты /admin через HTTP Basic.
    Браузер сам покажет окно ввода пароля благодаря заголовку WWW-Authenticate.
    """
    admin_token = get_settings(request).ADMIN_TOKEN
    if not admin_token:
        logger.critical("ADMIN_TOKEN is not configured on the server!")
        raise OperatorAuthError(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "ADMIN_TOKEN is not set. Set it in the environment before using /admin.",
            challenge=False,
        )

    password = _basic_password(authorization or "")
    if password is None:
        raise OperatorAuthError(status.HTTP_401_UNAUTHORIZED, "Auth required")

    if not hmac.compare_digest(password.encode("utf-8"), admin_token.encode("utf-8")):
        logger.warning(f"Invalid admin password from {request.client.host if request.client else 'unknown'}")
        raise OperatorAuthError(status.HTTP_401_UNAUTHORIZED, "Invalid password")
    return True
