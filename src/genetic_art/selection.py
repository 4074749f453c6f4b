from __future__ import annotations

import random
from enum import Enum
from typing import List, Sequence

import numpy as np

from .program import Individual


class SelectionMethod(str, Enum):
    TOURNAMENT = "tournament"
    LEXICASE = "lexicase"


def tournament_selection(population: Sequence[Individual], rng: random.Random, tournament_size: int) -> Individual:
    if not population:
        raise ValueError("population is empty")
    if tournament_size < 1:
        raise ValueError("tournament_size must be >= 1")
    members = [rng.choice(population) for _ in range(tournament_size)]
    # min() keeps the first of equal keys
    return min(members, key=lambda ind: ind.total_error)


def case_tolerance(errors: Sequence[float], epsilon: float | None) -> float:
    if epsilon is not None:
        return float(epsilon)
    return float(np.std(np.asarray(errors, dtype=np.float64)))


def lexicase_selection(population: Sequence[Individual], rng: random.Random, epsilon: float | None = None) -> Individual:
    """Epsilon-lexicase selection.

    One shuffled order of case indices is used for every individual in this
    call. At each case the candidates within ``min + tolerance`` survive, where
    the tolerance is ``epsilon`` when given and otherwise the standard
    deviation of the candidates' errors on that case. If filtering ever
    leaves nobody, a random member of the whole population is returned.
    """
    if not population:
        raise ValueError("population is empty")
    if not all(ind.evaluated for ind in population):
        raise ValueError("lexicase selection needs evaluated individuals")
    n_cases = len(population[0].errors)
    order = list(range(n_cases))
    rng.shuffle(order)

    candidates: List[Individual] = list(population)
    for case in order:
        if len(candidates) == 1:
            return candidates[0]
        errs = [ind.errors[case] for ind in candidates]
        threshold = min(errs) + case_tolerance(errs, epsilon)
        candidates = [ind for ind, e in zip(candidates, errs) if e <= threshold]
        if not candidates:
            return rng.choice(population)
    if len(candidates) == 1:
        return candidates[0]
    return rng.choice(candidates)


def select_parent(
    population: Sequence[Individual],
    rng: random.Random,
    method: SelectionMethod,
    tournament_size: int = 7,
    epsilon: float | None = None,
) -> Individual:
    if method == SelectionMethod.TOURNAMENT:
        return tournament_selection(population, rng, tournament_size)
    if method == SelectionMethod.LEXICASE:
        return lexicase_selection(population, rng, epsilon=epsilon)
    raise ValueError(f"unknown selection method: {method}")
