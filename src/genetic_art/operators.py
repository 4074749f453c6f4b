from __future__ import annotations

import random
from typing import List, Sequence, Tuple

from .generator import rand_element
from .program import Element, Program

ADDITION_RATE = 0.05
DELETION_RATE = 0.05
TAIL_KEEP_RATE = 0.5


def uniform_crossover(prog_a: Sequence[Element], prog_b: Sequence[Element], rng: random.Random) -> Program:
    """Pick each aligned element from either parent with equal chance.

    Past the end of the shorter parent, every remaining element of the longer
    one is kept independently with probability 0.5.
    """
    child: List[Element] = []
    n = min(len(prog_a), len(prog_b))
    for i in range(n):
        child.append(prog_a[i] if rng.randrange(2) == 0 else prog_b[i])
    tail = prog_a[n:] if len(prog_a) > n else prog_b[n:]
    child.extend(e for e in tail if rng.random() < TAIL_KEEP_RATE)
    return tuple(child)


def pick_cut_points(prog: Sequence[Element], rng: random.Random) -> Tuple[int, int]:
    n = len(prog)
    if n == 0:
        return 0, 0
    first = rng.randrange(n)
    if n == 1:
        return first, first
    second = rng.choice([i for i in range(n) if i != first])
    return (first, second) if first < second else (second, first)


def two_point_crossover(prog_a: Sequence[Element], prog_b: Sequence[Element], rng: random.Random) -> Program:
    a0, a1 = pick_cut_points(prog_a, rng)
    b0, b1 = pick_cut_points(prog_b, rng)
    return tuple(prog_b[:b0]) + tuple(prog_a[a0:a1]) + tuple(prog_b[b1:])


def uniform_addition(prog: Sequence[Element], catalog: Sequence[Element], rng: random.Random) -> Program:
    child: List[Element] = []
    for e in prog:
        child.append(e)
        if rng.random() < ADDITION_RATE:
            child.append(rand_element(rng, catalog))
    if rng.random() < ADDITION_RATE:
        child.append(rand_element(rng, catalog))
    return tuple(child)


def uniform_deletion(prog: Sequence[Element], rng: random.Random) -> Program:
    return tuple(e for e in prog if rng.random() >= DELETION_RATE)
