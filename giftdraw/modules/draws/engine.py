"""
Draw algorithm.

Members are shuffled with an unbiased Fisher-Yates shuffle (random.shuffle)
and each member gives to the next one in the shuffled order, wrapping around
at the end. The result is a single cycle through every member, so nobody is
assigned to themselves and everybody gives and receives exactly once.

Never shuffle with sorted(key=random) or a random comparator: those orders are
not uniformly distributed.
"""
import random
from typing import Dict, Hashable, List, Mapping, Optional, Sequence, TypeVar

from giftdraw.core.errors import AppError, PreconditionError

T = TypeVar("T", bound=Hashable)

MIN_PARTICIPANTS = 3

_system_random = random.SystemRandom()


class InvalidAssignmentError(AppError):
    """An assignment breaks the single-cycle derangement invariant."""
    status_code = 500


def shuffled(participants: Sequence[T], rng: Optional[random.Random] = None) -> List[T]:
    order = list(participants)
    (rng or _system_random).shuffle(order)
    return order


def build_cycle(
    participants: Sequence[T],
    rng: Optional[random.Random] = None,
    min_participants: int = MIN_PARTICIPANTS,
) -> Dict[T, T]:
    """Map every participant to the one they give to."""
    if len(set(participants)) != len(participants):
        raise ValueError("Participants must be distinct")
    if len(participants) < max(min_participants, MIN_PARTICIPANTS):
        raise PreconditionError(
            f"At least {max(min_participants, MIN_PARTICIPANTS)} participants are needed for the draw"
        )
    order = shuffled(participants, rng)
    n = len(order)
    return {order[i]: order[(i + 1) % n] for i in range(n)}


def cycle_length(assignment: Mapping[T, T], start: T) -> int:
    seen = set()
    current = start
    while current not in seen:
        seen.add(current)
        current = assignment[current]
    return len(seen) if current == start else 0


def validate_assignment(assignment: Mapping[T, T], participants: Sequence[T]) -> None:
    """Raise InvalidAssignmentError unless assignment is a single cycle over participants."""
    members = set(participants)
    if set(assignment.keys()) != members:
        raise InvalidAssignmentError("Every participant must give exactly once")
    if set(assignment.values()) != members or len(set(assignment.values())) != len(members):
        raise InvalidAssignmentError("Every participant must receive exactly once")
    if any(giver == receiver for giver, receiver in assignment.items()):
        raise InvalidAssignmentError("Nobody may be assigned to themselves")
    if members and cycle_length(assignment, next(iter(members))) != len(members):
        raise InvalidAssignmentError("Assignment must form a single cycle")


def derangement_count(n: int) -> int:
    """D(n): number of permutations of n items without fixed points."""
    if n == 0:
        return 1
    previous, current = 1, 0
    for k in range(2, n + 1):
        previous, current = current, (k - 1) * (previous + current)
    return current
