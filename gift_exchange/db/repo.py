from __future__ import annotations

import datetime
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import and_, delete, func, select, update
from sqlalchemy.exc import IntegrityError

from gift_exchange.db.models import (
    Assignment,
    Exchange,
    LoginSession,
    Participant,
    User,
)


def get_user_by_email(session, email: str) -> Optional[User]:
    return session.scalar(select(User).where(User.email == email))


def create_user(session, email: str, password_hash: str, name: str) -> User:
    user = User(email=email, password_hash=password_hash, name=name)
    session.add(user)
    session.flush()
    return user


def create_login_session(
    session,
    user_id: int,
    token: str,
    expires_at: datetime.datetime,
) -> LoginSession:
    login_session = LoginSession(user_id=user_id, token=token, expires_at=expires_at)
    session.add(login_session)
    session.flush()
    return login_session


def get_login_session_by_token(session, token: str) -> Optional[LoginSession]:
    return session.scalar(select(LoginSession).where(LoginSession.token == token))


def delete_login_session(session, token: str) -> int:
    result = session.execute(delete(LoginSession).where(LoginSession.token == token))
    return result.rowcount or 0


def get_exchange_by_id(session, exchange_id: int) -> Optional[Exchange]:
    return session.scalar(select(Exchange).where(Exchange.id == exchange_id))


def get_exchange_by_code(session, code: str) -> Optional[Exchange]:
    return session.scalar(select(Exchange).where(Exchange.code == code))


def exchange_code_exists(session, code: str) -> bool:
    return session.scalar(select(func.count()).select_from(Exchange).where(Exchange.code == code)) > 0


def create_exchange(
    session,
    organizer_id: int,
    code: str,
    name: str,
    exchange_date: datetime.datetime,
    description: Optional[str],
    gift_budget: Optional[Decimal],
) -> Exchange:
    exchange = Exchange(
        organizer_id=organizer_id,
        code=code,
        name=name,
        exchange_date=exchange_date,
        description=description,
        gift_budget=gift_budget,
    )
    session.add(exchange)
    session.flush()
    return exchange


def list_exchanges_for_user(session, user_id: int) -> List[Exchange]:
    return list(
        session.scalars(
            select(Exchange)
            .join(Participant, Participant.exchange_id == Exchange.id)
            .where(Participant.user_id == user_id)
            .order_by(Exchange.exchange_date, Exchange.id)
        ).all()
    )


def is_user_in_exchange(session, user_id: int, exchange_id: int) -> bool:
    return session.scalar(
        select(func.count())
        .select_from(Participant)
        .where(and_(Participant.user_id == user_id, Participant.exchange_id == exchange_id))
    ) > 0


def add_participant(session, exchange_id: int, user_id: int) -> Optional[Participant]:
    if is_user_in_exchange(session, user_id, exchange_id):
        return None
    participant = Participant(exchange_id=exchange_id, user_id=user_id)
    try:
        with session.begin_nested():
            session.add(participant)
    except IntegrityError:
        return None
    return participant


def list_exchange_participants(session, exchange_id: int) -> List[User]:
    return list(
        session.scalars(
            select(User)
            .join(Participant, Participant.user_id == User.id)
            .where(Participant.exchange_id == exchange_id)
            .order_by(Participant.id)
        ).all()
    )


def claim_assignment_generation(
    session,
    exchange_id: int,
    seed: Optional[int],
    generated_at: datetime.datetime,
) -> bool:
    result = session.execute(
        update(Exchange)
        .where(and_(Exchange.id == exchange_id, Exchange.assignments_generated.is_(False)))
        .values(assignments_generated=True, assignment_seed=seed, generated_at=generated_at)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount == 1


def create_assignments(session, exchange_id: int, pairs: Iterable[Tuple[int, int]]) -> List[Assignment]:
    rows = [
        Assignment(exchange_id=exchange_id, giver_id=giver_id, receiver_id=receiver_id)
        for giver_id, receiver_id in pairs
    ]
    session.add_all(rows)
    session.flush()
    return rows


def list_assignments(session, exchange_id: int) -> List[Assignment]:
    return list(session.scalars(select(Assignment).where(Assignment.exchange_id == exchange_id)).all())


def get_assignment_for_giver(session, exchange_id: int, giver_id: int) -> Optional[Assignment]:
    return session.scalar(
        select(Assignment).where(
            and_(Assignment.exchange_id == exchange_id, Assignment.giver_id == giver_id)
        )
    )
