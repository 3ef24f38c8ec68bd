from __future__ import annotations

import datetime
import json
from typing import Any, Dict, List, Optional

from aiohttp import web
from loguru import logger

from gift_exchange.core.config import Settings
from gift_exchange.db import Exchange, LoginSession, User

SESSION_COOKIE = "session_token"

SETTINGS_KEY = web.AppKey("settings", Settings)


class ErrorCodes:
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    UNAUTHORIZED = "UNAUTHORIZED"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    BAD_REQUEST = "BAD_REQUEST"


class RequestError(RuntimeError):
    status = 400
    code = ErrorCodes.BAD_REQUEST

    def __init__(self, message: str, details: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.details = details


class ValidationFailed(RequestError):
    code = ErrorCodes.VALIDATION_ERROR

    def __init__(self, errors: List[str]) -> None:
        super().__init__(", ".join(errors), details=list(errors))


class AuthenticationRequired(RequestError):
    status = 401
    code = ErrorCodes.AUTHENTICATION_REQUIRED

    def __init__(self) -> None:
        super().__init__("Authentication required")


def error_response(
    message: str,
    status: int,
    code: str,
    details: Optional[List[str]] = None,
) -> web.Response:
    body: Dict[str, Any] = {"success": False, "error": message, "code": code}
    if details:
        body["details"] = details
    return web.json_response(body, status=status)


def success_response(status: int = 200, **payload: Any) -> web.Response:
    return web.json_response({"success": True, **payload}, status=status)


async def read_json(request: web.Request) -> Dict[str, Any]:
    try:
        body = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise RequestError("Request body must be valid JSON") from exc
    if not isinstance(body, dict):
        raise RequestError("Request body must be a JSON object")
    return body


def current_user(request: web.Request) -> User:
    user = request.get("user")
    if user is None:
        raise AuthenticationRequired()
    return user


def set_session_cookie(response: web.StreamResponse, login_session: LoginSession, secure: bool) -> None:
    expires_at = login_session.expires_at
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=datetime.timezone.utc)
    max_age = int((expires_at - datetime.datetime.now(tz=datetime.timezone.utc)).total_seconds())
    response.set_cookie(
        SESSION_COOKIE,
        login_session.token,
        max_age=max(max_age, 0),
        path="/",
        httponly=True,
        secure=secure,
        samesite="Lax",
    )


def clear_session_cookie(response: web.StreamResponse) -> None:
    response.del_cookie(SESSION_COOKIE, path="/")


def serialize_user(user: User) -> Dict[str, Any]:
    return {"id": user.id, "email": user.email, "name": user.name}


def serialize_exchange(exchange: Exchange) -> Dict[str, Any]:
    return {
        "id": exchange.id,
        "name": exchange.name,
        "description": exchange.description,
        "gift_budget": float(exchange.gift_budget) if exchange.gift_budget is not None else None,
        "exchange_date": exchange.exchange_date.isoformat(),
        "code": exchange.code,
        "organizer_id": exchange.organizer_id,
        "assignments_generated": exchange.assignments_generated,
    }


def log_handler_exception(action: str, user_id: Optional[int], error: Exception) -> None:
    logger.bind(action=action, user_id=user_id).exception(
        "Handler error: {error}", error=str(error)
    )
