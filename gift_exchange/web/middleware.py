from __future__ import annotations

from typing import Tuple, Type

from aiohttp import web

from gift_exchange.db import get_session
from gift_exchange.services import auth, exchange
from gift_exchange.web.utils import (
    SESSION_COOKIE,
    ErrorCodes,
    RequestError,
    error_response,
    log_handler_exception,
)

# Checked in order, so subclasses go before their bases.
ERROR_MAP: Tuple[Tuple[Type[Exception], int, str], ...] = (
    (auth.EmailAlreadyExists, 409, ErrorCodes.CONFLICT),
    (auth.InvalidCredentials, 401, ErrorCodes.UNAUTHORIZED),
    (auth.AuthError, 400, ErrorCodes.BAD_REQUEST),
    (exchange.ExchangeNotFound, 404, ErrorCodes.NOT_FOUND),
    (exchange.InvalidExchangeCode, 404, ErrorCodes.NOT_FOUND),
    (exchange.AssignmentsNotGenerated, 404, ErrorCodes.NOT_FOUND),
    (exchange.AlreadyParticipant, 409, ErrorCodes.CONFLICT),
    (exchange.NotOrganizer, 403, ErrorCodes.UNAUTHORIZED),
    (exchange.NotParticipant, 403, ErrorCodes.UNAUTHORIZED),
    (exchange.ExchangeError, 400, ErrorCodes.BAD_REQUEST),
)

ERROR_MESSAGES = {
    auth.InvalidCredentials: "Invalid email or password",
    exchange.AlreadyParticipant: "You are already a participant in this exchange",
}


@web.middleware
async def error_middleware(request: web.Request, handler):
    try:
        return await handler(request)
    except web.HTTPException:
        raise
    except RequestError as exc:
        return error_response(str(exc), exc.status, exc.code, exc.details)
    except (auth.AuthError, exchange.ExchangeError) as exc:
        for error_type, status, code in ERROR_MAP:
            if isinstance(exc, error_type):
                message = ERROR_MESSAGES.get(type(exc), str(exc))
                return error_response(message, status, code)
        raise
    except Exception as exc:
        user = request.get("user")
        log_handler_exception(request.path, user.id if user else None, exc)
        return error_response("An unexpected error occurred", 500, ErrorCodes.INTERNAL_ERROR)


@web.middleware
async def session_middleware(request: web.Request, handler):
    token = request.cookies.get(SESSION_COOKIE)
    user = None
    if token:
        with get_session() as session:
            user = auth.validate_session(session, token)
    request["user"] = user
    return await handler(request)
