from __future__ import annotations

from decimal import Decimal

from aiohttp import web

from gift_exchange.db import get_session
from gift_exchange.services import exchange
from gift_exchange.services.invitation import log_invitation_emails
from gift_exchange.services.validation import parse_exchange_date, validate_exchange_form
from gift_exchange.web.utils import (
    SETTINGS_KEY,
    ValidationFailed,
    current_user,
    read_json,
    serialize_exchange,
    success_response,
)

routes = web.RouteTableDef()


@routes.get("/api/exchanges")
async def list_exchanges_handler(request: web.Request) -> web.Response:
    user = current_user(request)
    with get_session() as session:
        exchanges = [serialize_exchange(item) for item in exchange.list_user_exchanges(session, user.id)]
    return success_response(exchanges=exchanges)


@routes.post("/api/exchange/create")
async def create_exchange_handler(request: web.Request) -> web.Response:
    user = current_user(request)
    settings = request.app[SETTINGS_KEY]
    body = await read_json(request)

    name = body.get("name")
    description = body.get("description")
    gift_budget = body.get("gift_budget")
    exchange_date = body.get("exchange_date")

    validation = validate_exchange_form(name, exchange_date, gift_budget)
    if not validation.is_valid:
        raise ValidationFailed(validation.errors)
    if description is not None and not isinstance(description, str):
        raise ValidationFailed(["Description must be text"])

    with get_session() as session:
        created = exchange.create_exchange(
            session,
            organizer_id=user.id,
            name=name,
            exchange_date=parse_exchange_date(exchange_date),
            description=description,
            gift_budget=Decimal(str(gift_budget)) if gift_budget is not None else None,
        )
        payload = serialize_exchange(created)

    invitee_emails = body.get("invitee_emails")
    if isinstance(invitee_emails, list) and invitee_emails:
        log_invitation_emails(
            invitee_emails,
            exchange_name=payload["name"],
            organizer_name=user.name,
            exchange_code=payload["code"],
            base_url=settings.base_url,
        )

    return success_response(status=201, exchange=payload)


@routes.post("/api/exchange/join")
async def join_exchange_handler(request: web.Request) -> web.Response:
    user = current_user(request)
    body = await read_json(request)

    code = body.get("code")
    if not isinstance(code, str) or not code.strip():
        raise ValidationFailed(["Exchange code is required"])

    with get_session() as session:
        participant = exchange.join_exchange(session, user.id, code)
        payload = {
            "id": participant.id,
            "exchange_id": participant.exchange_id,
            "user_id": participant.user_id,
        }
    return success_response(participant=payload)


@routes.get(r"/api/exchange/{exchange_id:\d+}")
async def exchange_detail_handler(request: web.Request) -> web.Response:
    user = current_user(request)
    exchange_id = int(request.match_info["exchange_id"])

    with get_session() as session:
        found = exchange.get_exchange(session, exchange_id)
        exchange.require_participant(session, found.id, user.id)
        participants = [
            {"id": participant.id, "name": participant.name}
            for participant in exchange.list_participants(session, found.id)
        ]
        payload = serialize_exchange(found)

    return success_response(
        exchange=payload,
        participants=participants,
        is_organizer=payload["organizer_id"] == user.id,
    )
