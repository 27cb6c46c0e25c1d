"""Random pairing of team members."""

import random
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")


def make_pairs(members: Sequence[T], rng: random.Random | None = None) -> list[tuple[T, T]]:
    """Randomly pair members.

    The members are shuffled and consecutive members are paired. With an
    odd number of members, the last one after shuffling is left unpaired.

    Args:
        members: Members to pair.
        rng: Random number generator. Defaults to the module-level generator.

    Returns:
        Disjoint pairs of members.

    Example:
        >>> pairs = make_pairs(["ada", "grace", "alan"], random.Random(0))
        >>> len(pairs)
        1
    """
    shuffled = list(members)
    (rng or random).shuffle(shuffled)
    return [(shuffled[i], shuffled[i + 1]) for i in range(0, len(shuffled) - 1, 2)]
