from .errors import *
from .state import (
    NO_VALUE,
    PushState,
    Stack,
    TakenArgs,
    invoke,
    load_images,
    load_inputs,
    peek,
    pop,
    push,
    take_args,
)
from .program import (
    Element,
    Individual,
    Instruction,
    Literal,
    Program,
    SubProgram,
    format_program,
    parse_program,
)
from .registry import InstructionSet, exec_dup, exec_if, make_catalog, make_instruction
from .interp import load_exec, run_program, step
from .generator import init_population, make_random_program
from .operators import two_point_crossover, uniform_addition, uniform_crossover, uniform_deletion
from .selection import SelectionMethod, lexicase_selection, select_parent, tournament_selection
from .evolve import (
    Evolution,
    EvolutionConfig,
    EvolutionResult,
    RunStatus,
    push_gp,
)
from .images import default_catalog, image_instruction_set, image_instructions
from .fitness import MISSING_OUTPUT_PENALTY, DeterminantErrorFunction
