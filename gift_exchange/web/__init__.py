from aiohttp import web

from gift_exchange.core.config import Settings
from gift_exchange.web.handlers import ROUTES
from gift_exchange.web.middleware import error_middleware, session_middleware
from gift_exchange.web.utils import SETTINGS_KEY


def create_app(settings: Settings) -> web.Application:
    app = web.Application(middlewares=[error_middleware, session_middleware])
    app[SETTINGS_KEY] = settings
    app.add_routes(ROUTES)
    return app
