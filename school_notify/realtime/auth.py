"""Session Authenticator: bearer credential extraction and verification."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs

import jwt
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.settings import api_settings
from rest_framework_simplejwt.tokens import AccessToken

from .exceptions import AuthenticationFailure

BEARER_SCHEME = "bearer"


@dataclass(frozen=True)
class UserRealtimeContext:
    user_id: int
    role: str
    username: str

    def as_session(self) -> dict[str, Any]:
        return {"user_id": self.user_id, "role": self.role, "username": self.username}


def _scope(environ: Any) -> Any:
    if isinstance(environ, dict) and "asgi.scope" in environ:
        inner = environ.get("asgi.scope")
        if isinstance(inner, dict):
            return inner
    return environ


def _header_token(environ: Any) -> str | None:
    value: str | bytes | None = None
    if isinstance(environ, dict):
        value = environ.get("HTTP_AUTHORIZATION")
    scope = _scope(environ)
    if not value and isinstance(scope, dict):
        for name, raw in scope.get("headers") or ():
            if name.lower() == b"authorization":
                value = raw
                break
    if isinstance(value, (bytes, bytearray)):
        value = value.decode(errors="ignore")
    if not isinstance(value, str):
        return None
    scheme, _, credentials = value.strip().partition(" ")
    if scheme.lower() != BEARER_SCHEME:
        return None
    return credentials.strip() or None


def _query_token(environ: Any) -> str | None:
    scope = _scope(environ)
    query_string: str | bytes = ""
    if isinstance(scope, dict) and "query_string" in scope:
        query_string = scope.get("query_string", b"")
    elif isinstance(scope, dict) and "QUERY_STRING" in scope:
        query_string = scope.get("QUERY_STRING", "")

    if isinstance(query_string, (bytes, bytearray)):
        query_string = query_string.decode(errors="ignore")

    token = parse_qs(str(query_string)).get("token", [None])[0]
    return token if isinstance(token, str) and token else None


def extract_token(environ: Any, auth: Any | None) -> str | None:
    """Find the bearer token of a handshake.

    Looked up in order: ``auth: {token}``, the ``Authorization`` header and
    the ``token`` query parameter. Handles both ASGI scopes and WSGI environs.
    """

    if isinstance(auth, dict):
        auth_token = auth.get("token")
        if isinstance(auth_token, str) and auth_token.strip():
            return auth_token.strip()
    return _header_token(environ) or _query_token(environ)


def _is_expired(exc: BaseException) -> bool:
    seen: BaseException | None = exc
    while seen is not None:
        if isinstance(seen, jwt.ExpiredSignatureError):
            return True
        seen = seen.__cause__ or seen.__context__
    return str(exc) == "Token is expired"


def verify_token(token: str) -> int:
    """Return the subject id of a valid access token."""

    try:
        validated = AccessToken(token)
    except TokenError as exc:
        if _is_expired(exc):
            raise AuthenticationFailure(AuthenticationFailure.EXPIRED) from exc
        raise AuthenticationFailure from exc

    try:
        return int(validated[api_settings.USER_ID_CLAIM])
    except (KeyError, TypeError, ValueError) as exc:
        raise AuthenticationFailure from exc
