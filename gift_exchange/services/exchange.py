from __future__ import annotations

import datetime
import random
import secrets
import string
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError

from gift_exchange.db import Assignment, Exchange, Participant, User, repo
from gift_exchange.services.assignment import generate_assignment_cycle, validate_assignment_cycle

EXCHANGE_CODE_LENGTH = 8
EXCHANGE_CODE_ALPHABET = string.ascii_uppercase + string.digits
MAX_CODE_GENERATION_ATTEMPTS = 10
MIN_EXCHANGE_PARTICIPANTS = 3


class ExchangeError(RuntimeError):
    pass


class ExchangeNotFound(ExchangeError):
    pass


class InvalidExchangeCode(ExchangeError):
    pass


class AlreadyParticipant(ExchangeError):
    pass


class ExchangeClosed(ExchangeError):
    pass


class NotOrganizer(ExchangeError):
    pass


class NotParticipant(ExchangeError):
    pass


class AssignmentsAlreadyGenerated(ExchangeError):
    pass


class AssignmentsNotGenerated(ExchangeError):
    pass


class NotEnoughParticipants(ExchangeError):
    pass


@dataclass(frozen=True)
class GenerationResult:
    exchange: Exchange
    assignments: List[Assignment]
    seed: int


def _utcnow() -> datetime.datetime:
    return datetime.datetime.now(tz=datetime.timezone.utc)


def _new_code() -> str:
    return "".join(secrets.choice(EXCHANGE_CODE_ALPHABET) for _ in range(EXCHANGE_CODE_LENGTH))


def normalize_code(code: str) -> str:
    return code.strip().upper()


def generate_unique_exchange_code(session) -> str:
    for _ in range(MAX_CODE_GENERATION_ATTEMPTS):
        code = _new_code()
        if not repo.exchange_code_exists(session, code):
            return code
    raise ExchangeError("Failed to generate unique exchange code")


def create_exchange(
    session,
    organizer_id: int,
    name: str,
    exchange_date: datetime.datetime,
    description: Optional[str] = None,
    gift_budget: Optional[Decimal] = None,
) -> Exchange:
    if not isinstance(name, str) or not name.strip() or exchange_date is None:
        raise ExchangeError("Missing required fields: name and exchange_date are required")

    code = generate_unique_exchange_code(session)
    exchange = repo.create_exchange(
        session,
        organizer_id=organizer_id,
        code=code,
        name=name.strip(),
        exchange_date=exchange_date,
        description=description or None,
        gift_budget=gift_budget,
    )
    repo.add_participant(session, exchange.id, organizer_id)
    logger.bind(exchange_id=exchange.id, organizer_id=organizer_id).info("Exchange created")
    return exchange


def get_exchange(session, exchange_id: int) -> Exchange:
    exchange = repo.get_exchange_by_id(session, exchange_id)
    if not exchange:
        raise ExchangeNotFound("Exchange not found")
    return exchange


def list_user_exchanges(session, user_id: int) -> List[Exchange]:
    return repo.list_exchanges_for_user(session, user_id)


def join_exchange(session, user_id: int, code: str) -> Participant:
    exchange = repo.get_exchange_by_code(session, normalize_code(code or ""))
    if not exchange:
        raise InvalidExchangeCode("Invalid exchange code")

    if repo.is_user_in_exchange(session, user_id, exchange.id):
        raise AlreadyParticipant("User is already a participant in this exchange")

    if exchange.assignments_generated:
        raise ExchangeClosed("Assignments have already been generated for this exchange")

    participant = repo.add_participant(session, exchange.id, user_id)
    if participant is None:
        raise AlreadyParticipant("User is already a participant in this exchange")

    logger.bind(exchange_id=exchange.id, user_id=user_id).info("Participant joined")
    return participant


def list_participants(session, exchange_id: int) -> List[User]:
    return repo.list_exchange_participants(session, exchange_id)


def require_participant(session, exchange_id: int, user_id: int) -> None:
    if not repo.is_user_in_exchange(session, user_id, exchange_id):
        raise NotParticipant("You are not a participant in this exchange")


def generate_assignments(
    session,
    exchange_id: int,
    user_id: int,
    seed: Optional[int] = None,
) -> GenerationResult:
    exchange = get_exchange(session, exchange_id)

    if exchange.organizer_id != user_id:
        raise NotOrganizer("Only the organizer can generate assignments")
    if exchange.assignments_generated:
        raise AssignmentsAlreadyGenerated("Assignments have already been generated for this exchange")

    participant_ids = [user.id for user in repo.list_exchange_participants(session, exchange.id)]
    if len(participant_ids) < MIN_EXCHANGE_PARTICIPANTS:
        raise NotEnoughParticipants(
            f"At least {MIN_EXCHANGE_PARTICIPANTS} participants are required to generate assignments"
        )

    if seed is None:
        seed = random.SystemRandom().randint(1, 2**31 - 1)

    pairs = generate_assignment_cycle(participant_ids, seed=seed)
    validate_assignment_cycle(participant_ids, pairs)

    # Conditional update is the only guard against two concurrent requests.
    if not repo.claim_assignment_generation(session, exchange.id, seed, _utcnow()):
        raise AssignmentsAlreadyGenerated("Assignments have already been generated for this exchange")

    try:
        assignments = repo.create_assignments(
            session, exchange.id, [(pair.giver, pair.receiver) for pair in pairs]
        )
    except IntegrityError as exc:
        raise AssignmentsAlreadyGenerated(
            "Assignments have already been generated for this exchange"
        ) from exc

    session.refresh(exchange)
    logger.bind(exchange_id=exchange.id, participants=len(participant_ids), seed=seed).info(
        "Assignments generated"
    )
    return GenerationResult(exchange=exchange, assignments=assignments, seed=seed)


def get_assignment_for_giver(session, exchange_id: int, user_id: int) -> User:
    require_participant(session, exchange_id, user_id)

    assignment = repo.get_assignment_for_giver(session, exchange_id, user_id)
    if not assignment:
        raise AssignmentsNotGenerated("Assignments have not been generated yet")
    return assignment.receiver
