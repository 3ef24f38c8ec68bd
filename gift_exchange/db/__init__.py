from gift_exchange.db.models import (
    Assignment,
    Base,
    Exchange,
    LoginSession,
    Participant,
    User,
)
from gift_exchange.db.session import SessionLocal, get_session, init_engine, verify_connection

__all__ = [
    "Assignment",
    "Base",
    "Exchange",
    "LoginSession",
    "Participant",
    "User",
    "SessionLocal",
    "get_session",
    "init_engine",
    "verify_connection",
]
