from __future__ import annotations

from aiohttp import web
from loguru import logger

from gift_exchange.db import get_session
from gift_exchange.services import auth, exchange
from gift_exchange.services.validation import validate_login_form, validate_signup_form
from gift_exchange.web.utils import (
    SESSION_COOKIE,
    SETTINGS_KEY,
    ValidationFailed,
    clear_session_cookie,
    current_user,
    log_handler_exception,
    read_json,
    serialize_user,
    set_session_cookie,
    success_response,
)

routes = web.RouteTableDef()


@routes.post("/api/auth/signup")
async def signup_handler(request: web.Request) -> web.Response:
    settings = request.app[SETTINGS_KEY]
    body = await read_json(request)
    email = body.get("email")
    password = body.get("password")
    name = body.get("name")

    validation = validate_signup_form(email, password, name)
    if not validation.is_valid:
        raise ValidationFailed(validation.errors)

    with get_session() as session:
        user = auth.signup(session, email, password, name)
        login_session = auth.start_session(session, user, settings.session_ttl_days)
        user_payload = serialize_user(user)

    exchange_code = body.get("exchangeCode")
    if isinstance(exchange_code, str) and exchange_code.strip():
        try:
            with get_session() as session:
                exchange.join_exchange(session, user_payload["id"], exchange_code)
        except exchange.ExchangeError as exc:
            # The account exists either way; a stale invite link should not fail signup.
            logger.bind(user_id=user_payload["id"], code=exchange_code).warning(
                "Could not join exchange after signup: {error}", error=str(exc)
            )

    response = success_response(status=201, user=user_payload)
    set_session_cookie(response, login_session, settings.cookie_secure)
    return response


@routes.post("/api/auth/login")
async def login_handler(request: web.Request) -> web.Response:
    settings = request.app[SETTINGS_KEY]
    body = await read_json(request)
    email = body.get("email")
    password = body.get("password")

    validation = validate_login_form(email, password)
    if not validation.is_valid:
        raise ValidationFailed(validation.errors)

    with get_session() as session:
        login_session = auth.login(session, email, password, ttl_days=settings.session_ttl_days)
        user_payload = serialize_user(login_session.user)

    response = success_response(user=user_payload)
    set_session_cookie(response, login_session, settings.cookie_secure)
    return response


@routes.post("/api/auth/logout")
async def logout_handler(request: web.Request) -> web.Response:
    token = request.cookies.get(SESSION_COOKIE)
    if token:
        try:
            with get_session() as session:
                auth.logout(session, token)
        except Exception as exc:
            # The cookie is cleared regardless.
            user = request.get("user")
            log_handler_exception("logout", user.id if user else None, exc)

    response = success_response(message="Logged out")
    clear_session_cookie(response)
    return response


@routes.get("/api/auth/me")
async def me_handler(request: web.Request) -> web.Response:
    return success_response(user=serialize_user(current_user(request)))
