from gift_exchange.web.handlers import assignment, auth, exchange, health

ROUTES = [
    *health.routes,
    *auth.routes,
    *exchange.routes,
    *assignment.routes,
]
