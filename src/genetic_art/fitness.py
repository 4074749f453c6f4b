from __future__ import annotations

import logging
from typing import Any, Dict, List, Mapping, Sequence, Tuple

import numpy as np

from .errors import FuelExhaustedError
from .interp import run_program
from .program import Individual
from .registry import InstructionFn
from .state import NO_VALUE, PushState, Stack, load_inputs, peek

logger = logging.getLogger(__name__)

MISSING_OUTPUT_PENALTY = 10_000_000_000
DEFAULT_GRID = 10

GRAY_WEIGHTS = np.array([0.299, 0.587, 0.114], dtype=np.float64)


def to_gray(img: np.ndarray) -> np.ndarray:
    a = np.asarray(img, dtype=np.float64)
    if a.ndim == 2:
        return a
    return a[..., :3] @ GRAY_WEIGHTS


def sectionalize(img: np.ndarray, grid: int = DEFAULT_GRID) -> List[np.ndarray]:
    """Cut ``img`` into full ``(H // grid) x (W // grid)`` sections, row-major.

    Trailing rows and columns that do not fill a whole section are ignored.
    """
    h, w = img.shape[:2]
    sh = max(1, h // grid)
    sw = max(1, w // grid)
    out: List[np.ndarray] = []
    for y in range(0, h - sh + 1, sh):
        for x in range(0, w - sw + 1, sw):
            out.append(img[y:y + sh, x:x + sw])
    return out


def region_determinant(section: np.ndarray) -> float:
    gray = to_gray(section)
    n = min(gray.shape)
    return float(np.linalg.det(gray[:n, :n]))


def case_values(img: np.ndarray, grid: int = DEFAULT_GRID) -> List[float]:
    return [region_determinant(s) for s in sectionalize(img, grid)]


def abs_differences(target: Sequence[float], produced: Sequence[float] | None) -> List[float]:
    if produced is None:
        return [MISSING_OUTPUT_PENALTY] * len(target)
    out: List[float] = []
    for i, t in enumerate(target):
        if i < len(produced):
            out.append(abs(t - produced[i]))
        else:
            out.append(MISSING_OUTPUT_PENALTY)
    return out


class DeterminantErrorFunction:
    """Scores an individual by region determinants of its output image.

    The program runs on ``initial_state`` with ``inputs`` registered as
    ``in1, in2, ...``; the image left on top of the image stack is cut into
    sections and compared case by case against the target's sections.
    """

    def __init__(
        self,
        instructions: Mapping[str, InstructionFn],
        grid: int = DEFAULT_GRID,
        fuel: int | None = None,
    ) -> None:
        if grid < 1:
            raise ValueError("grid must be >= 1")
        self.instructions = instructions
        self.grid = grid
        self.fuel = fuel
        self._targets: Dict[int, Tuple[Any, List[float]]] = {}

    def target_values(self, target: np.ndarray) -> List[float]:
        cached = self._targets.get(id(target))
        if cached is not None and cached[0] is target:
            return cached[1]
        values = case_values(target, self.grid)
        self._targets[id(target)] = (target, values)
        return values

    def output_image(self, individual: Individual, initial_state: PushState, inputs: Sequence[Any]) -> Any:
        state = load_inputs(initial_state, inputs)
        try:
            final = run_program(individual.program, state, self.instructions, fuel=self.fuel)
        except FuelExhaustedError as exc:
            logger.debug("program ran out of fuel after %d steps", exc.fuel)
            return NO_VALUE
        return peek(final, Stack.IMAGE)

    def __call__(self, individual: Individual, initial_state: PushState, inputs: Sequence[Any], target: np.ndarray) -> Individual:
        expected = self.target_values(target)
        result = self.output_image(individual, initial_state, inputs)
        produced = None if result is NO_VALUE else case_values(result, self.grid)
        return individual.with_errors(abs_differences(expected, produced))
