from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Sequence, Tuple, Union


@dataclass(frozen=True)
class Literal:
    value: Union[bool, int]

    # True == 1 in Python; literals of different types must stay distinct
    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Literal):
            return NotImplemented
        return type(self.value) is type(other.value) and self.value == other.value

    def __hash__(self) -> int:
        return hash((type(self.value), self.value))


@dataclass(frozen=True)
class Instruction:
    name: str


@dataclass(frozen=True)
class SubProgram:
    elements: Tuple["Element", ...]


Element = Union[Literal, Instruction, SubProgram]
Program = Tuple[Element, ...]


def to_element(raw: Any) -> Element:
    """Convert plain Python data to a program element.

    ``True``/``False`` and ints become literals, strings become instruction
    identifiers and lists/tuples become nested sub-programs. Elements are
    returned unchanged.
    """
    if isinstance(raw, (Literal, Instruction, SubProgram)):
        return raw
    if isinstance(raw, bool) or isinstance(raw, int):
        return Literal(raw)
    if isinstance(raw, str):
        return Instruction(raw)
    if isinstance(raw, (list, tuple)):
        return SubProgram(tuple(to_element(x) for x in raw))
    raise TypeError(f"cannot convert {type(raw).__name__} to a program element")


def parse_program(raw: Iterable[Any]) -> Program:
    return tuple(to_element(x) for x in raw)


def format_element(e: Element) -> str:
    if isinstance(e, Literal):
        if isinstance(e.value, bool):
            return "true" if e.value else "false"
        return str(e.value)
    if isinstance(e, Instruction):
        return e.name
    return format_program(e.elements)


def format_program(program: Sequence[Element]) -> str:
    return "(" + " ".join(format_element(e) for e in program) + ")"


def program_size(program: Sequence[Element]) -> int:
    """Number of elements, counting the contents of nested sub-programs."""
    n = 0
    for e in program:
        if isinstance(e, SubProgram):
            n += program_size(e.elements)
        else:
            n += 1
    return n


@dataclass(frozen=True)
class Individual:
    program: Program
    errors: Tuple[float, ...] = ()
    total_error: float = 0

    @classmethod
    def from_program(cls, program: Iterable[Element]) -> "Individual":
        return cls(program=tuple(program))

    @property
    def evaluated(self) -> bool:
        return len(self.errors) > 0

    def with_errors(self, errors: Iterable[float]) -> "Individual":
        errs = tuple(errors)
        return Individual(program=self.program, errors=errs, total_error=sum(errs))
