from __future__ import annotations

import random

import numpy as np

from genetic_art.images import image_instruction_set
from genetic_art.interp import run_program
from genetic_art.program import format_program, parse_program
from genetic_art.state import PushState, Stack, load_images, peek


def main():
    # program:
    # push true, then exec_if keeps the inverted branch and drops the edge filter;
    # the result is xor-ed with the second input image
    prog = parse_program([True, "exec_if", ["invert_colors"], ["edge_filter"], "section_xor"])

    rng = random.Random(0)
    a = np.zeros((8, 8, 3), dtype=np.uint8)
    b = np.full((8, 8, 3), 200, dtype=np.uint8)
    state = load_images(PushState.empty(), [a, b])

    out = run_program(prog, state, image_instruction_set(rng), fuel=1_000)
    img = peek(out, Stack.IMAGE)
    print("Program:", format_program(prog))
    print("Images left:", out.size(Stack.IMAGE))
    print("Top-left pixel:", img[0, 0].tolist())


if __name__ == "__main__":
    main()
