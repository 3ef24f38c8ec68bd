from aiohttp import web

from gift_exchange.db import verify_connection
from gift_exchange.web.utils import success_response

routes = web.RouteTableDef()


@routes.get("/health")
async def health_handler(request: web.Request) -> web.Response:
    verify_connection()
    return success_response(database="ok")
