import random
import unittest

import numpy as np

from genetic_art.fitness import (
    MISSING_OUTPUT_PENALTY,
    DeterminantErrorFunction,
    abs_differences,
    case_values,
    region_determinant,
    sectionalize,
)
from genetic_art.images import image_instructions
from genetic_art.program import Individual, parse_program
from genetic_art.registry import InstructionSet, input_instructions
from genetic_art.state import PushState, load_images


def _noise(h, w, seed):
    return np.random.default_rng(seed).integers(0, 256, size=(h, w, 3), dtype=np.uint8)


def _instrs():
    instrs = InstructionSet(image_instructions(random.Random(0)))
    for name, fn in input_instructions(2).items():
        instrs.register(name, fn)
    return instrs


def _ind(raw):
    return Individual.from_program(parse_program(raw))


class TestSections(unittest.TestCase):
    def test_sectionalize_counts(self):
        img = _noise(20, 30, 0)
        sections = sectionalize(img, 10)
        self.assertEqual(len(sections), 100)
        self.assertTrue(all(s.shape == (2, 3, 3) for s in sections))

    def test_sectionalize_row_major(self):
        img = np.arange(16, dtype=np.uint8).reshape(4, 4)
        sections = sectionalize(img, 2)
        self.assertEqual([int(s[0, 0]) for s in sections], [0, 2, 8, 10])

    def test_region_determinant(self):
        gray = np.array([[2, 0], [0, 3]], dtype=np.uint8)
        section = np.stack([gray, gray, gray], axis=-1)
        self.assertAlmostEqual(region_determinant(section), 6.0, places=6)

    def test_non_square_section_uses_leading_block(self):
        gray = np.array([[2, 0, 9], [0, 3, 9]], dtype=np.uint8)
        self.assertAlmostEqual(region_determinant(np.stack([gray] * 3, axis=-1)), 6.0, places=6)

    def test_abs_differences(self):
        self.assertEqual(abs_differences([1.0, 5.0], [2.0, 1.0]), [1.0, 4.0])
        self.assertEqual(abs_differences([1.0, 5.0], None), [MISSING_OUTPUT_PENALTY] * 2)
        self.assertEqual(abs_differences([1.0, 5.0], [1.0]), [0.0, MISSING_OUTPUT_PENALTY])


class TestDeterminantError(unittest.TestCase):
    def setUp(self):
        self.target = _noise(20, 20, 1)
        self.other = _noise(20, 20, 2)
        self.fn = DeterminantErrorFunction(_instrs(), grid=4, fuel=500)

    def test_target_passthrough_scores_zero(self):
        scored = self.fn(_ind(["in1"]), PushState.empty(), [self.target, self.other], self.target)
        self.assertEqual(len(scored.errors), 16)
        self.assertEqual(scored.total_error, 0)

    def test_image_stack_top_is_the_output(self):
        state = load_images(PushState.empty(), [self.other, self.target])
        scored = self.fn(_ind([]), state, [], self.target)
        self.assertEqual(scored.total_error, 0)

    def test_other_image_scores_positive(self):
        scored = self.fn(_ind(["in2"]), PushState.empty(), [self.target, self.other], self.target)
        expected = abs_differences(case_values(self.target, 4), case_values(self.other, 4))
        self.assertEqual(list(scored.errors), expected)
        self.assertGreater(scored.total_error, 0)

    def test_no_output_gets_penalty(self):
        scored = self.fn(_ind([True, 1]), PushState.empty(), [self.target], self.target)
        self.assertEqual(scored.errors, (MISSING_OUTPUT_PENALTY,) * 16)

    def test_fuel_exhaustion_gets_penalty(self):
        scored = self.fn(_ind(["in1", "exec_dup", ["exec_dup"]]), PushState.empty(), [self.target], self.target)
        self.assertEqual(scored.errors, (MISSING_OUTPUT_PENALTY,) * 16)

    def test_invalid_grid(self):
        with self.assertRaises(ValueError):
            DeterminantErrorFunction(_instrs(), grid=0)


if __name__ == "__main__":
    unittest.main()
