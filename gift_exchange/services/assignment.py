"""Secret assignment generation.

The generator turns a list of participants into a single gift-giving cycle:
everybody gives exactly once, receives exactly once, never to themselves, and
following giver -> receiver from anyone visits the whole group before coming
back. It is a pure function of its input and the random source it is handed.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Dict, Hashable, List, Optional, Sequence

MIN_PARTICIPANTS = 2


class AssignmentError(RuntimeError):
    pass


class InsufficientParticipants(AssignmentError):
    pass


class InvalidAssignmentCycle(AssignmentError):
    pass


@dataclass(frozen=True)
class AssignmentPair:
    giver: Hashable
    receiver: Hashable


def generate_assignment_cycle(
    participants: Sequence[Hashable],
    seed: Optional[int] = None,
    rng: Optional[random.Random] = None,
) -> List[AssignmentPair]:
    """Return one giver -> receiver pair per participant forming a single cycle.

    ``rng`` takes precedence over ``seed``. Without either a fresh
    ``random.Random`` is created for the call, so concurrent callers never
    share generator state. The input sequence is not modified.
    """
    if len(participants) < MIN_PARTICIPANTS:
        raise InsufficientParticipants(
            f"At least {MIN_PARTICIPANTS} participants are required to create assignments."
        )

    if rng is None:
        rng = random.Random(seed)

    # Fisher-Yates over a copy.
    shuffled = list(participants)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]

    count = len(shuffled)
    return [
        AssignmentPair(giver=shuffled[i], receiver=shuffled[(i + 1) % count])
        for i in range(count)
    ]


def assignment_map(pairs: Sequence[AssignmentPair]) -> Dict[Hashable, Hashable]:
    return {pair.giver: pair.receiver for pair in pairs}


def validate_assignment_cycle(
    participants: Sequence[Hashable],
    pairs: Sequence[AssignmentPair],
) -> None:
    """Raise InvalidAssignmentCycle unless ``pairs`` is one full cycle over ``participants``."""
    expected = set(participants)
    givers = [pair.giver for pair in pairs]
    receivers = [pair.receiver for pair in pairs]

    if not pairs or len(pairs) != len(participants):
        raise InvalidAssignmentCycle(
            f"Expected {len(participants)} assignments, got {len(pairs)}."
        )
    if len(set(givers)) != len(givers) or set(givers) != expected:
        raise InvalidAssignmentCycle("Every participant must give exactly once.")
    if len(set(receivers)) != len(receivers) or set(receivers) != expected:
        raise InvalidAssignmentCycle("Every participant must receive exactly once.")

    for pair in pairs:
        if pair.giver == pair.receiver:
            raise InvalidAssignmentCycle(f"Participant {pair.giver!r} is assigned to themselves.")

    mapping = assignment_map(pairs)
    start = pairs[0].giver
    current = start
    visited = set()
    for _ in range(len(pairs)):
        visited.add(current)
        current = mapping[current]
        if current == start:
            break
    if current != start or len(visited) != len(expected):
        raise InvalidAssignmentCycle(
            f"Assignments split into smaller cycles ({len(visited)} of {len(expected)} reached)."
        )
