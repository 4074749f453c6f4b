from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Sequence, Tuple

from .generator import init_population
from .operators import two_point_crossover, uniform_addition, uniform_crossover, uniform_deletion
from .program import Element, Individual, Program
from .selection import SelectionMethod, select_parent
from .state import PushState

logger = logging.getLogger(__name__)

ErrorFunction = Callable[[Individual, PushState, Any, Any], Individual]
Reporter = Callable[[Sequence[Individual], int], None]


class RunStatus(str, Enum):
    RUNNING = "running"
    SUCCESS = "success"
    EXHAUSTED = "exhausted"


class Operator(str, Enum):
    UNIFORM_CROSSOVER = "uniform_crossover"
    TWO_POINT_CROSSOVER = "two_point_crossover"
    UNIFORM_ADDITION = "uniform_addition"
    UNIFORM_DELETION = "uniform_deletion"


OPERATOR_PROBABILITIES: Tuple[Tuple[Operator, float], ...] = (
    (Operator.UNIFORM_CROSSOVER, 0.25),
    (Operator.TWO_POINT_CROSSOVER, 0.25),
    (Operator.UNIFORM_ADDITION, 0.25),
    (Operator.UNIFORM_DELETION, 0.25),
)


@dataclass(frozen=True)
class EvolutionConfig:
    catalog: Tuple[Element, ...] = ()
    population_size: int = 10
    max_generations: int = 2
    max_initial_program_size: int = 30
    selection_method: SelectionMethod = SelectionMethod.LEXICASE
    tournament_size: int = 10
    lexicase_epsilon: float | None = None
    seed: int | None = None

    def validate(self) -> None:
        if not self.catalog:
            raise ValueError("catalog must not be empty")
        if self.population_size <= 0:
            raise ValueError("population_size must be > 0")
        if self.max_generations < 0:
            raise ValueError("max_generations must be >= 0")
        if self.max_initial_program_size < 1:
            raise ValueError("max_initial_program_size must be >= 1")
        if self.tournament_size < 1:
            raise ValueError("tournament_size must be >= 1")


@dataclass(frozen=True)
class EvolutionResult:
    status: RunStatus
    generation: int
    best: Individual
    final_population: List[Individual]
    history_best_error: List[float] = field(default_factory=list)
    history_mean_error: List[float] = field(default_factory=list)


def pick_operator(rng: random.Random) -> Operator:
    r = rng.random()
    acc = 0.0
    for op, p in OPERATOR_PROBABILITIES:
        acc += p
        if r < acc:
            return op
    return OPERATOR_PROBABILITIES[-1][0]


def vary(op: Operator, parent1: Program, parent2: Program, catalog: Sequence[Element], rng: random.Random) -> Program:
    if op == Operator.UNIFORM_CROSSOVER:
        return uniform_crossover(parent1, parent2, rng)
    if op == Operator.TWO_POINT_CROSSOVER:
        return two_point_crossover(parent1, parent2, rng)
    if op == Operator.UNIFORM_ADDITION:
        return uniform_addition(parent1, catalog, rng)
    if op == Operator.UNIFORM_DELETION:
        return uniform_deletion(parent1, rng)
    raise ValueError(f"unknown operator: {op}")


def without(population: Sequence[Individual], chosen: Individual) -> List[Individual]:
    """Population minus the first entry that *is* ``chosen``."""
    for i, ind in enumerate(population):
        if ind is chosen:
            return list(population[:i]) + list(population[i + 1:])
    return list(population)


def select_and_vary(population: Sequence[Individual], cfg: EvolutionConfig, rng: random.Random) -> Individual:
    def select(pool: Sequence[Individual]) -> Individual:
        return select_parent(
            pool,
            rng=rng,
            method=cfg.selection_method,
            tournament_size=cfg.tournament_size,
            epsilon=cfg.lexicase_epsilon,
        )

    parent1 = select(population)
    # a population of one has nobody left after removal
    pool = without(population, parent1) or list(population)
    parent2 = select(pool)
    child = vary(pick_operator(rng), parent1.program, parent2.program, cfg.catalog, rng)
    return Individual.from_program(child)


def make_child_population(population: Sequence[Individual], cfg: EvolutionConfig, rng: random.Random) -> List[Individual]:
    return [select_and_vary(population, cfg, rng) for _ in range(cfg.population_size)]


def best_of(population: Sequence[Individual]) -> Individual:
    if not population:
        raise ValueError("population is empty")
    return min(population, key=lambda ind: ind.total_error)


class Evolution:
    """Generational loop driven one generation at a time by :meth:`step`.

    Each step reports the current (evaluated) population, checks for a zero
    error individual and the generation limit, and otherwise replaces the
    population with evaluated children.
    """

    def __init__(
        self,
        cfg: EvolutionConfig,
        error_function: ErrorFunction,
        initial_state: PushState,
        inputs: Any = (),
        target: Any = None,
        report: Reporter | None = None,
        rng: random.Random | None = None,
    ) -> None:
        cfg.validate()
        self.cfg = cfg
        self.error_function = error_function
        self.initial_state = initial_state
        self.inputs = inputs
        self.target = target
        self.report = report
        self.rng = rng if rng is not None else random.Random(cfg.seed)
        self.population: List[Individual] = []
        self.generation = 0
        self.status = RunStatus.RUNNING
        self.history_best_error: List[float] = []
        self.history_mean_error: List[float] = []
        self._started = False

    def evaluate(self, individuals: Sequence[Individual]) -> List[Individual]:
        return [self.error_function(ind, self.initial_state, self.inputs, self.target) for ind in individuals]

    def start(self) -> None:
        fresh = init_population(self.cfg.population_size, self.cfg.catalog, self.cfg.max_initial_program_size, self.rng)
        self.population = self.evaluate(fresh)
        self.generation = 0
        self._started = True

    def step(self) -> RunStatus:
        if self.status != RunStatus.RUNNING:
            return self.status
        if not self._started:
            self.start()

        best = best_of(self.population)
        mean = sum(ind.total_error for ind in self.population) / len(self.population)
        self.history_best_error.append(best.total_error)
        self.history_mean_error.append(mean)
        logger.info("generation %d best=%s mean=%s", self.generation, best.total_error, mean)
        if self.report is not None:
            self.report(self.population, self.generation)

        if any(ind.total_error == 0 for ind in self.population):
            self.status = RunStatus.SUCCESS
            logger.info("zero-error individual found at generation %d", self.generation)
            return self.status
        if self.generation >= self.cfg.max_generations:
            self.status = RunStatus.EXHAUSTED
            logger.info("no solution after %d generations", self.generation)
            return self.status

        children = make_child_population(self.population, self.cfg, self.rng)
        self.population = self.evaluate(children)
        self.generation += 1
        return self.status

    def result(self) -> EvolutionResult:
        return EvolutionResult(
            status=self.status,
            generation=self.generation,
            best=best_of(self.population),
            final_population=list(self.population),
            history_best_error=list(self.history_best_error),
            history_mean_error=list(self.history_mean_error),
        )

    def run(self) -> EvolutionResult:
        while self.step() == RunStatus.RUNNING:
            pass
        return self.result()


def push_gp(
    cfg: EvolutionConfig,
    error_function: ErrorFunction,
    initial_state: PushState,
    inputs: Any = (),
    target: Any = None,
    report: Reporter | None = None,
    rng: random.Random | None = None,
) -> EvolutionResult:
    return Evolution(cfg, error_function, initial_state, inputs, target, report=report, rng=rng).run()
