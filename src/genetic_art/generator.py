from __future__ import annotations

import random
from typing import List, Sequence

from .program import Element, Individual, Program


def rand_element(rng: random.Random, catalog: Sequence[Element]) -> Element:
    return rng.choice(catalog)


def make_random_program(catalog: Sequence[Element], max_initial_size: int, rng: random.Random) -> Program:
    if not catalog:
        raise ValueError("catalog must not be empty")
    if max_initial_size < 1:
        raise ValueError("max_initial_size must be >= 1")
    n = rng.randint(1, max_initial_size)
    return tuple(rand_element(rng, catalog) for _ in range(n))


def init_population(size: int, catalog: Sequence[Element], max_initial_size: int, rng: random.Random) -> List[Individual]:
    return [Individual.from_program(make_random_program(catalog, max_initial_size, rng)) for _ in range(size)]
