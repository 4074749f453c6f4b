from __future__ import annotations

from enum import Enum
from typing import Any, Tuple


class ErrCode(str, Enum):
    UNKNOWN_INSTRUCTION = "UnknownInstruction"
    TIMEOUT = "Timeout"


class PushError(Exception):
    code: ErrCode


class UnknownInstructionError(PushError, LookupError):
    """Raised when a program names an instruction the registry does not know.

    ``path`` is the index path of the element inside the (possibly nested)
    program, e.g. ``(3, 0)`` for the first element of the fourth element.
    It is empty when the identifier was met on the exec stack mid-run.
    """

    code = ErrCode.UNKNOWN_INSTRUCTION

    def __init__(self, name: str, path: Tuple[int, ...] = ()) -> None:
        self.name = name
        self.path = tuple(path)
        where = f" at position {list(self.path)}" if self.path else ""
        super().__init__(f"unknown instruction: {name!r}{where}")


class FuelExhaustedError(PushError):
    code = ErrCode.TIMEOUT

    def __init__(self, state: Any, fuel: int) -> None:
        self.state = state
        self.fuel = fuel
        super().__init__(f"out of fuel after {fuel} steps")
