from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Mapping, Sequence, TextIO, Tuple

from .errors import FuelExhaustedError
from .evolve import best_of
from .image_io import save_image
from .interp import run_program
from .program import Individual, format_program, program_size
from .registry import InstructionFn
from .state import NO_VALUE, PushState, Stack, load_inputs, peek

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GenerationSummary:
    generation: int
    best_total_error: float
    mean_total_error: float
    best_size: int
    best_program: str
    best_errors: Tuple[float, ...]


def summarize(population: Sequence[Individual], generation: int) -> GenerationSummary:
    best = best_of(population)
    mean = sum(ind.total_error for ind in population) / len(population)
    return GenerationSummary(
        generation=generation,
        best_total_error=float(best.total_error),
        mean_total_error=float(mean),
        best_size=program_size(best.program),
        best_program=format_program(best.program),
        best_errors=tuple(best.errors),
    )


def format_summary(s: GenerationSummary) -> str:
    return (
        f"GEN {s.generation:03d} best={s.best_total_error:.6f} mean={s.mean_total_error:.6f} "
        f"size={s.best_size} program={s.best_program}"
    )


class ConsoleReporter:
    """Per-generation report: one ``GEN`` line, optionally the best image.

    When ``results_dir`` is set the best individual is re-run and the image it
    leaves on the image stack is written to ``gen<NNN>.png``.
    """

    def __init__(
        self,
        stream: TextIO | None = None,
        instructions: Mapping[str, InstructionFn] | None = None,
        initial_state: PushState | None = None,
        inputs: Sequence[Any] = (),
        results_dir: str | Path | None = None,
        fuel: int | None = None,
        image_size: Tuple[int, int] | None = None,
    ) -> None:
        self.stream = stream if stream is not None else sys.stdout
        self.instructions = instructions
        self.initial_state = initial_state
        self.inputs = inputs
        self.results_dir = Path(results_dir) if results_dir is not None else None
        self.fuel = fuel
        self.image_size = image_size
        self.summaries: List[GenerationSummary] = []

    def __call__(self, population: Sequence[Individual], generation: int) -> None:
        s = summarize(population, generation)
        self.summaries.append(s)
        print(format_summary(s), file=self.stream)
        logger.debug("generation %d best errors: %s", generation, list(s.best_errors))
        if self.results_dir is not None:
            self.write_best_image(best_of(population), generation)

    def write_best_image(self, best: Individual, generation: int) -> Path | None:
        if self.instructions is None or self.initial_state is None or self.results_dir is None:
            return None
        state = load_inputs(self.initial_state, self.inputs)
        try:
            final = run_program(best.program, state, self.instructions, fuel=self.fuel)
        except FuelExhaustedError:
            logger.warning("best program of generation %d ran out of fuel; no image written", generation)
            return None
        img = peek(final, Stack.IMAGE)
        if img is NO_VALUE:
            logger.warning("best program of generation %d left no image", generation)
            return None
        return save_image(img, self.results_dir / f"gen{generation:03d}.png", self.image_size)
