from __future__ import annotations

"""Randomness helpers: seeding and unbiased sampling."""

import os
import random
from typing import List, MutableSequence, Optional, Sequence, TypeVar

import numpy as np

T = TypeVar("T")


def seed_if_needed() -> None:
    """Seed RNGs if SEED env var is set."""
    seed = os.environ.get("SEED")
    if seed is None:
        return
    try:
        s = int(seed)
    except ValueError:
        return
    random.seed(s)
    np.random.seed(s)


def shuffle(items: MutableSequence[T], rng: Optional[random.Random] = None) -> MutableSequence[T]:
    """In-place Fisher-Yates shuffle; every permutation is equally likely."""
    rand = rng or random
    for i in range(len(items) - 1, 0, -1):
        j = rand.randrange(i + 1)
        items[i], items[j] = items[j], items[i]
    return items


def sample(items: Sequence[T], k: int, rng: Optional[random.Random] = None) -> List[T]:
    """Take k items without replacement, in uniformly random order."""
    pool = list(items)
    shuffle(pool, rng)
    return pool[: max(0, min(k, len(pool)))]
