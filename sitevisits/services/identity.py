# sitevisits/services/identity.py
import secrets
from dataclasses import dataclass
from typing import Dict, Optional
from urllib.parse import quote, unquote

VISITOR_COOKIE = "vid"
VISITOR_COOKIE_MAX_AGE = 60 * 60 * 24 * 365
MIN_VISITOR_ID_LENGTH = 16


@dataclass(frozen=True)
class VisitorIdentity:
    visitor_id: str
    is_new: bool


def parse_cookies(header: Optional[str]) -> Dict[str, str]:
    """
    Разбирает заголовок Cookie в словарь.
    Части без '=' и с пустым ключом пропускаются, при дублях побеждает последнее значение.
    """
    cookies: Dict[str, str] = {}
    for part in (header or "").split(";"):
        key, sep, value = part.partition("=")
        if not sep:
            continue
        key = key.strip()
        value = value.strip()
        if not key:
            continue
        try:
            cookies[key] = unquote(value, errors="strict")
        except UnicodeDecodeError:
            cookies[key] = value
    return cookies


def generate_visitor_id() -> str:
    # 16 байт энтропии -> 32 hex-символа
    return secrets.token_hex(16)


def resolve_visitor(cookie_header: Optional[str]) -> VisitorIdentity:
    """Берет vid из cookie, если он выглядит правдоподобно, иначе выдает новый."""
    vid = parse_cookies(cookie_header).get(VISITOR_COOKIE)
    if vid and len(vid) >= MIN_VISITOR_ID_LENGTH:
        return VisitorIdentity(visitor_id=vid, is_new=False)
    return VisitorIdentity(visitor_id=generate_visitor_id(), is_new=True)


def build_visitor_cookie(visitor_id: str) -> str:
    """Значение заголовка Set-Cookie для долгоживущего vid."""
    parts = [
        f"{VISITOR_COOKIE}={quote(visitor_id, safe='')}",
        f"Max-Age={VISITOR_COOKIE_MAX_AGE}",
        "Path=/",
        "HttpOnly",
        "SameSite=Lax",
        "Secure",
    ]
    return "; ".join(parts)
