"""Random permutation helpers used by the draw."""

import random
from typing import Optional, Sequence, TypeVar

T = TypeVar("T")


def make_rng(random_seed: Optional[int] = None) -> random.Random:
    """Return a private random generator, seeded when ``random_seed`` is given."""
    return random.Random(random_seed)


def shuffle(items: Sequence[T], rng: random.Random) -> list[T]:
    """Return a uniformly shuffled copy of ``items``.

    The input sequence is left untouched.

    Examples:
        >>> shuffle([1, 2, 3], make_rng(1)) == shuffle([1, 2, 3], make_rng(1))
        True
    """
    result = list(items)
    rng.shuffle(result)
    return result
