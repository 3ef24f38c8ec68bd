from __future__ import annotations

import datetime
import secrets
from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from werkzeug.security import check_password_hash, generate_password_hash

from gift_exchange.db import LoginSession, User, repo

SESSION_TOKEN_BYTES = 32
DEFAULT_SESSION_TTL_DAYS = 7


class AuthError(RuntimeError):
    pass


class EmailAlreadyExists(AuthError):
    pass


class InvalidCredentials(AuthError):
    pass


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(tz=datetime.timezone.utc)


def _is_expired(expires_at: datetime.datetime, now: datetime.datetime) -> bool:
    # SQLite hands back naive datetimes; they were stored as UTC.
    if expires_at.tzinfo is None:
        expires_at = expires_at.replace(tzinfo=datetime.timezone.utc)
    return expires_at < now


def normalize_email(email: str) -> str:
    return email.strip().lower()


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return check_password_hash(password_hash, password)


def signup(session, email: str, password: str, name: str) -> User:
    if not all(isinstance(value, str) and value.strip() for value in (email, password, name)):
        raise AuthError("Missing required fields: email, password, and name are required")

    email = normalize_email(email)
    if repo.get_user_by_email(session, email):
        raise EmailAlreadyExists("Email already exists")

    try:
        user = repo.create_user(session, email, hash_password(password), name.strip())
    except IntegrityError as exc:
        raise EmailAlreadyExists("Email already exists") from exc

    logger.bind(user_id=user.id).info("User signed up")
    return user


def login(
    session,
    email: str,
    password: str,
    ttl_days: int = DEFAULT_SESSION_TTL_DAYS,
) -> LoginSession:
    if not isinstance(email, str) or not isinstance(password, str):
        raise InvalidCredentials("Invalid credentials")

    user = repo.get_user_by_email(session, normalize_email(email))
    if not user or not verify_password(password, user.password_hash):
        raise InvalidCredentials("Invalid credentials")

    login_session = start_session(session, user, ttl_days)
    logger.bind(user_id=user.id).info("User logged in")
    return login_session


def start_session(session, user: User, ttl_days: int = DEFAULT_SESSION_TTL_DAYS) -> LoginSession:
    token = secrets.token_hex(SESSION_TOKEN_BYTES)
    expires_at = _utcnow() + datetime.timedelta(days=ttl_days)
    return repo.create_login_session(session, user.id, token, expires_at)


def logout(session, token: str) -> bool:
    return repo.delete_login_session(session, token) > 0


def validate_session(session, token: Optional[str]) -> Optional[User]:
    if not token:
        return None

    login_session = repo.get_login_session_by_token(session, token)
    if not login_session:
        return None

    if _is_expired(login_session.expires_at, _utcnow()):
        user_id = login_session.user_id
        repo.delete_login_session(session, token)
        logger.bind(user_id=user_id).debug("Expired session removed")
        return None

    return login_session.user
