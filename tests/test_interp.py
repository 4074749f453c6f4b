import random
import unittest

from genetic_art.errors import ErrCode, FuelExhaustedError, UnknownInstructionError
from genetic_art.generator import make_random_program
from genetic_art.interp import load_exec, run_program, step
from genetic_art.program import Instruction, Literal, SubProgram, format_program, parse_program
from genetic_art.registry import (
    InstructionSet,
    exec_dup,
    exec_if,
    input_instructions,
    make_catalog,
    make_instruction,
)
from genetic_art.state import PushState, Stack, push


def _int_set():
    return InstructionSet({
        "integer_add": make_instruction(lambda a, b: a + b, [Stack.INTEGER, Stack.INTEGER], Stack.INTEGER),
        "integer_lt": make_instruction(lambda a, b: b < a, [Stack.INTEGER, Stack.INTEGER], Stack.BOOL),
    })


class TestInterp(unittest.TestCase):
    def test_literals_routed_by_type(self):
        out = run_program(parse_program([True, 3, False, 4]), PushState.empty(), InstructionSet())
        self.assertEqual(out.stack(Stack.BOOL), (False, True))
        self.assertEqual(out.stack(Stack.INTEGER), (4, 3))
        self.assertEqual(out.stack(Stack.EXEC), ())

    def test_trailing_exec_dup_is_noop(self):
        out = run_program(parse_program([True, 3, "exec_dup"]), PushState.empty(), InstructionSet())
        self.assertEqual(out.stack(Stack.BOOL), (True,))
        self.assertEqual(out.stack(Stack.INTEGER), (3,))

    def test_exec_dup_duplicates_next_element(self):
        out = run_program(parse_program([True, "exec_dup", 3]), PushState.empty(), InstructionSet())
        self.assertEqual(out.stack(Stack.BOOL), (True,))
        self.assertEqual(out.stack(Stack.INTEGER), (3, 3))

    def test_exec_dup_guard_against_itself(self):
        dup = Instruction("exec_dup")
        s = load_exec((dup, dup, Literal(1)), PushState.empty())
        out = step(s, InstructionSet())
        self.assertEqual(out.stack(Stack.EXEC), (dup, Literal(1)))

    def test_exec_dup_empty_exec(self):
        s = PushState.empty()
        self.assertIs(exec_dup(s), s)

    def test_exec_if_true_keeps_first(self):
        prog = parse_program([True, "exec_if", 1, 2, 3])
        out = run_program(prog, PushState.empty(), InstructionSet())
        self.assertEqual(out.stack(Stack.INTEGER), (3, 1))
        self.assertEqual(out.stack(Stack.BOOL), ())

    def test_exec_if_false_keeps_second(self):
        prog = parse_program([False, "exec_if", [1, 10], [2, 20]])
        out = run_program(prog, PushState.empty(), InstructionSet())
        self.assertEqual(out.stack(Stack.INTEGER), (20, 2))

    def test_exec_if_requires_two_exec_elements(self):
        s = push(load_exec((Literal(1),), PushState.empty()), Stack.BOOL, True)
        self.assertIs(exec_if(s), s)

    def test_exec_if_requires_bool(self):
        s = load_exec((Literal(1), Literal(2)), PushState.empty())
        self.assertIs(exec_if(s), s)

    def test_nested_program_spliced_in_order(self):
        prog = parse_program([[1, [2, 3]], 4])
        s = load_exec(prog, PushState.empty())
        s = step(s, InstructionSet())
        self.assertEqual(s.stack(Stack.EXEC), (Literal(1), SubProgram((Literal(2), Literal(3))), Literal(4)))
        out = run_program(prog, PushState.empty(), InstructionSet())
        self.assertEqual(out.stack(Stack.INTEGER), (4, 3, 2, 1))

    def test_program_loaded_ahead_of_pending_exec(self):
        s = load_exec((Literal(9),), PushState.empty())
        out = run_program(parse_program([1]), s, InstructionSet())
        self.assertEqual(out.stack(Stack.INTEGER), (9, 1))

    def test_registered_instruction(self):
        out = run_program(parse_program([2, 5, "integer_add", 1, "integer_lt"]), PushState.empty(), _int_set())
        self.assertEqual(out.stack(Stack.INTEGER), ())
        self.assertEqual(out.stack(Stack.BOOL), (False,))

    def test_underflow_is_silent(self):
        out = run_program(parse_program(["integer_add", "integer_add", 1]), PushState.empty(), _int_set())
        self.assertEqual(out.stack(Stack.INTEGER), (1,))

    def test_unknown_instruction_fails_fast(self):
        with self.assertRaises(UnknownInstructionError) as ctx:
            run_program(parse_program([1, [True, "no_such_op"]]), PushState.empty(), InstructionSet())
        self.assertEqual(ctx.exception.name, "no_such_op")
        self.assertEqual(ctx.exception.path, (1, 1))
        self.assertEqual(ctx.exception.code, ErrCode.UNKNOWN_INSTRUCTION)
        self.assertIn("no_such_op", str(ctx.exception))

    def test_step_on_unknown_instruction(self):
        s = load_exec((Instruction("nope"),), PushState.empty())
        with self.assertRaises(UnknownInstructionError):
            step(s, InstructionSet())

    def test_fuel_bounds_self_replicating_program(self):
        # exec cycles between (X X) and (exec_dup X) forever
        prog = parse_program(["exec_dup", ["exec_dup"]])
        with self.assertRaises(FuelExhaustedError) as ctx:
            run_program(prog, PushState.empty(), InstructionSet(), fuel=200)
        self.assertEqual(ctx.exception.code, ErrCode.TIMEOUT)
        self.assertFalse(ctx.exception.state.is_empty(Stack.EXEC))

    def test_input_instructions(self):
        instrs = InstructionSet(input_instructions(3))
        s = push(push(PushState.empty(), Stack.INPUT, 4), Stack.INPUT, [True, 5])
        out = run_program(parse_program(["in2", "in1", "in3"]), s, instrs)
        self.assertEqual(out.stack(Stack.INTEGER), (4, 5))
        self.assertEqual(out.stack(Stack.BOOL), (True,))

    def test_instruction_consuming_input_stack(self):
        instrs = InstructionSet({"input_to_int": make_instruction(lambda v: v, [Stack.INPUT], Stack.INTEGER)})
        s = push(PushState.empty(), Stack.INPUT, 4)
        out = run_program(parse_program(["input_to_int", "input_to_int"]), s, instrs)
        self.assertEqual(out.stack(Stack.INTEGER), (4,))
        self.assertEqual(dict(out.inputs), {})

    def test_unknown_input_instruction_rejected(self):
        with self.assertRaises(UnknownInstructionError):
            run_program(parse_program(["in3"]), PushState.empty(), InstructionSet(input_instructions(2)))

    def test_format_program(self):
        self.assertEqual(format_program(parse_program([True, 3, ["exec_dup", False]])), "(true 3 (exec_dup false))")

    def test_random_programs_halt(self):
        rng = random.Random(7)
        catalog = make_catalog(["exec_if", "integer_add", "integer_lt", True, False, 1, 2])
        instrs = _int_set()
        for _ in range(300):
            prog = make_random_program(catalog, 20, rng)
            out = run_program(prog, PushState.empty(), instrs)
            self.assertEqual(out.stack(Stack.EXEC), ())


if __name__ == "__main__":
    unittest.main()
