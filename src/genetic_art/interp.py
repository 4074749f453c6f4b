from __future__ import annotations

from typing import Mapping, Sequence, Tuple

from .errors import FuelExhaustedError, UnknownInstructionError
from .program import Element, Instruction, Literal, SubProgram
from .registry import InstructionFn
from .state import PushState, Stack, peek, pop, push


def load_exec(program: Sequence[Element], state: PushState) -> PushState:
    return state.with_stack(Stack.EXEC, tuple(program) + state.stack(Stack.EXEC))


def _resolve(instructions: Mapping[str, InstructionFn], name: str) -> InstructionFn:
    fn = instructions.get(name)
    if fn is None:
        raise UnknownInstructionError(name)
    return fn


def validate_program(program: Sequence[Element], instructions: Mapping[str, InstructionFn], path: Tuple[int, ...] = ()) -> None:
    for i, e in enumerate(program):
        if isinstance(e, SubProgram):
            validate_program(e.elements, instructions, path + (i,))
        elif isinstance(e, Instruction) and e.name not in instructions:
            raise UnknownInstructionError(e.name, path + (i,))


def step(state: PushState, instructions: Mapping[str, InstructionFn]) -> PushState:
    """Execute the top element of the exec stack.

    Literals go to the stack of their type, sub-programs are spliced onto the
    front of exec in their own order, and identifiers are resolved and applied.
    An empty exec stack is returned unchanged.
    """
    if state.is_empty(Stack.EXEC):
        return state
    e = peek(state, Stack.EXEC)
    state = pop(state, Stack.EXEC)

    if isinstance(e, Literal):
        if isinstance(e.value, bool):
            return push(state, Stack.BOOL, e.value)
        return push(state, Stack.INTEGER, e.value)
    if isinstance(e, SubProgram):
        return load_exec(e.elements, state)
    if isinstance(e, Instruction):
        return _resolve(instructions, e.name)(state)
    raise TypeError(f"unexpected exec element: {e!r}")


def run_program(
    program: Sequence[Element],
    state: PushState,
    instructions: Mapping[str, InstructionFn],
    fuel: int | None = None,
) -> PushState:
    """Run ``program`` on top of ``state`` until the exec stack is empty.

    With ``fuel=None`` there is no step limit, so a self-replicating program
    never returns. An integer ``fuel`` bounds the number of steps and raises
    :class:`FuelExhaustedError` when it runs out before the program halts.
    """
    validate_program(program, instructions)
    state = load_exec(program, state)
    steps = 0
    while not state.is_empty(Stack.EXEC):
        if fuel is not None and steps >= fuel:
            raise FuelExhaustedError(state, fuel)
        state = step(state, instructions)
        steps += 1
    return state
