from gift_exchange.services.assignment import (
    AssignmentError,
    AssignmentPair,
    InsufficientParticipants,
    InvalidAssignmentCycle,
    generate_assignment_cycle,
)
from gift_exchange.services.auth import AuthError
from gift_exchange.services.exchange import ExchangeError

__all__ = [
    "AssignmentError",
    "AssignmentPair",
    "InsufficientParticipants",
    "InvalidAssignmentCycle",
    "generate_assignment_cycle",
    "AuthError",
    "ExchangeError",
]
