from __future__ import annotations

from typing import Any, Callable, Dict, Iterable, Iterator, Mapping, Sequence, Tuple

from .errors import UnknownInstructionError
from .program import Element, Instruction, to_element
from .state import NO_VALUE, PushState, Stack, input_key, invoke, peek, pop, push


InstructionFn = Callable[[PushState], PushState]
Catalog = Tuple[Element, ...]

EXEC_DUP = "exec_dup"
EXEC_IF = "exec_if"


def make_instruction(fn: Callable[..., Any], arg_stacks: Sequence[str], return_stack: str) -> InstructionFn:
    """Build a ``PushState -> PushState`` instruction from a value function.

    The returned instruction is a no-op when any of ``arg_stacks`` is short of
    values; otherwise it pops one value per entry and pushes ``fn(*args)``.
    """
    arg_stacks = tuple(arg_stacks)

    def instruction(state: PushState) -> PushState:
        return invoke(state, fn, arg_stacks, return_stack)

    instruction.__name__ = getattr(fn, "__name__", "instruction")
    return instruction


def exec_dup(state: PushState) -> PushState:
    top = peek(state, Stack.EXEC)
    if top is NO_VALUE:
        return state
    # exec_dup directly followed by exec_dup would duplicate itself forever
    if isinstance(top, Instruction) and top.name == EXEC_DUP:
        return state
    return push(state, Stack.EXEC, top)


def exec_if(state: PushState) -> PushState:
    if state.is_empty(Stack.BOOL) or state.size(Stack.EXEC) < 2:
        return state
    cond = peek(state, Stack.BOOL)
    state = pop(state, Stack.BOOL)
    items = state.stack(Stack.EXEC)
    if cond:
        return state.with_stack(Stack.EXEC, items[:1] + items[2:])
    return state.with_stack(Stack.EXEC, items[1:])


def make_input_instruction(key: str) -> InstructionFn:
    """Instruction that pushes input ``key`` back into the program.

    Literal and program inputs go onto the exec stack so the interpreter routes
    them by type; anything else is an image and goes onto the image stack.
    """

    def instruction(state: PushState) -> PushState:
        if key not in state.inputs:
            return state
        value = state.inputs[key]
        if isinstance(value, (bool, int, str, list, tuple)):
            return push(state, Stack.EXEC, to_element(value))
        return push(state, Stack.IMAGE, value)

    instruction.__name__ = key
    return instruction


def input_instructions(n: int) -> Dict[str, InstructionFn]:
    return {input_key(i): make_input_instruction(input_key(i)) for i in range(1, n + 1)}


class InstructionSet(Mapping[str, InstructionFn]):
    def __init__(self, instructions: Mapping[str, InstructionFn] | None = None) -> None:
        self._fns: Dict[str, InstructionFn] = {EXEC_DUP: exec_dup, EXEC_IF: exec_if}
        if instructions:
            for name, fn in instructions.items():
                self.register(name, fn)

    def register(self, name: str, fn: InstructionFn) -> None:
        if not callable(fn):
            raise TypeError(f"instruction {name!r} is not callable")
        self._fns[name] = fn

    def resolve(self, name: str) -> InstructionFn:
        fn = self._fns.get(name)
        if fn is None:
            raise UnknownInstructionError(name)
        return fn

    def __getitem__(self, name: str) -> InstructionFn:
        return self._fns[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fns)

    def __len__(self) -> int:
        return len(self._fns)


def make_catalog(entries: Iterable[Any]) -> Catalog:
    return tuple(to_element(e) for e in entries)
