from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Sequence, Tuple


class Stack(str, Enum):
    EXEC = "exec"
    INTEGER = "integer"
    BOOL = "bool"
    IMAGE = "image"
    INPUT = "input"


SEQUENCE_STACKS = (Stack.EXEC, Stack.INTEGER, Stack.BOOL, Stack.IMAGE)


class _NoValue:
    _instance = None

    def __new__(cls) -> "_NoValue":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_VALUE"

    def __bool__(self) -> bool:
        return False


NO_VALUE = _NoValue()


def _empty_stacks() -> Dict[str, Tuple[Any, ...]]:
    return {s.value: () for s in SEQUENCE_STACKS}


@dataclass(frozen=True)
class PushState:
    """Immutable set of typed stacks.

    Every sequence stack is a tuple whose index 0 is the top. ``inputs`` maps
    ``in1, in2, ...`` to values; its keys stay contiguous from ``in1``, so
    the newest input (highest key) is the top of the ``input`` stack.
    """

    stacks: Mapping[str, Tuple[Any, ...]] = field(default_factory=_empty_stacks)
    inputs: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "PushState":
        return cls()

    def stack(self, name: str) -> Tuple[Any, ...]:
        name = _stack_name(name)
        if name == Stack.INPUT.value:
            return tuple(self.inputs.values())
        return self.stacks.get(name, ())

    def size(self, name: str) -> int:
        return len(self.stack(name))

    def is_empty(self, name: str) -> bool:
        return self.size(name) == 0

    def with_stack(self, name: str, items: Iterable[Any]) -> "PushState":
        name = _stack_name(name)
        if name == Stack.INPUT.value:
            raise ValueError("input stack is append-only; use push()")
        stacks = dict(self.stacks)
        stacks[name] = tuple(items)
        return PushState(stacks=stacks, inputs=self.inputs)


@dataclass(frozen=True)
class TakenArgs:
    state: PushState
    args: List[Any]


def _stack_name(stack: str) -> str:
    return stack.value if isinstance(stack, Stack) else str(stack)


def input_key(n: int) -> str:
    return f"in{n}"


def push(state: PushState, stack: str, value: Any) -> PushState:
    name = _stack_name(stack)
    if name == Stack.INPUT.value:
        inputs = dict(state.inputs)
        inputs[input_key(len(inputs) + 1)] = value
        return PushState(stacks=state.stacks, inputs=inputs)
    return state.with_stack(name, (value,) + state.stack(name))


def pop(state: PushState, stack: str) -> PushState:
    name = _stack_name(stack)
    if name == Stack.INPUT.value:
        if not state.inputs:
            return state
        inputs = dict(state.inputs)
        del inputs[input_key(len(inputs))]
        return PushState(stacks=state.stacks, inputs=inputs)
    items = state.stack(name)
    if not items:
        return state
    return state.with_stack(name, items[1:])


def peek(state: PushState, stack: str) -> Any:
    items = state.stack(stack)
    if not items:
        return NO_VALUE
    if _stack_name(stack) == Stack.INPUT.value:
        return items[-1]
    return items[0]


def take_args(state: PushState, stacks: Sequence[str]) -> TakenArgs | None:
    args: List[Any] = []
    cur = state
    for stack in stacks:
        if cur.is_empty(stack):
            return None
        args.append(peek(cur, stack))
        cur = pop(cur, stack)
    return TakenArgs(state=cur, args=args)


def invoke(state: PushState, fn: Callable[..., Any], arg_stacks: Sequence[str], return_stack: str) -> PushState:
    taken = take_args(state, arg_stacks)
    if taken is None:
        return state
    return push(taken.state, return_stack, fn(*taken.args))


def load_images(state: PushState, images: Iterable[Any]) -> PushState:
    for img in images:
        state = push(state, Stack.IMAGE, img)
    return state


def load_inputs(state: PushState, values: Iterable[Any]) -> PushState:
    for v in values:
        state = push(state, Stack.INPUT, v)
    return state
