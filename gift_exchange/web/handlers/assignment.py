from __future__ import annotations

from aiohttp import web

from gift_exchange.db import get_session
from gift_exchange.services import exchange
from gift_exchange.web.utils import current_user, success_response

routes = web.RouteTableDef()


@routes.post(r"/api/exchange/{exchange_id:\d+}/assign")
async def assign_handler(request: web.Request) -> web.Response:
    user = current_user(request)
    exchange_id = int(request.match_info["exchange_id"])

    with get_session() as session:
        result = exchange.generate_assignments(session, exchange_id, user.id)
        count = len(result.assignments)

    return success_response(message="Assignments generated successfully", count=count)


@routes.get(r"/api/assignment/{exchange_id:\d+}")
async def my_assignment_handler(request: web.Request) -> web.Response:
    """Only the receiver of the caller's own pair is ever returned."""
    user = current_user(request)
    exchange_id = int(request.match_info["exchange_id"])

    with get_session() as session:
        receiver = exchange.get_assignment_for_giver(session, exchange_id, user.id)
        payload = {"receiver_name": receiver.name, "receiver_email": receiver.email}

    return success_response(assignment=payload)
