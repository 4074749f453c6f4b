"""Image instructions.

Every instruction takes its images from the ``image`` stack and pushes exactly
one new ``(H, W, 3)`` uint8 array back. Inputs are never modified in place.
Instructions that need randomness draw from the ``random.Random`` handed to
:func:`image_instructions`.
"""
from __future__ import annotations

import random
from typing import Callable, Dict

import numpy as np

from .registry import EXEC_DUP, EXEC_IF, Catalog, InstructionFn, InstructionSet, make_catalog, make_instruction
from .state import Stack

ONE_IMAGE = (Stack.IMAGE,)
TWO_IMAGES = (Stack.IMAGE, Stack.IMAGE)

LAPLACE_KERNEL = np.array([[0, -1, 0], [-1, 4, -1], [0, -1, 0]], dtype=np.float64)
EMBOSS_KERNEL = np.array([[-2, -1, 0], [-1, 1, 1], [0, 1, 2]], dtype=np.float64)
EDGE_KERNEL = np.array([[-1, -1, -1], [-1, 8, -1], [-1, -1, -1]], dtype=np.float64)
NOISE_AMPLITUDE = 32


def _to_uint8(a: np.ndarray) -> np.ndarray:
    return np.clip(np.rint(a), 0, 255).astype(np.uint8)


def convolve3(img: np.ndarray, kernel: np.ndarray, offset: float = 0.0) -> np.ndarray:
    """3x3 convolution per channel with a replicated border; same shape out."""
    src = np.asarray(img, dtype=np.float64)
    pad = [(1, 1), (1, 1)] + [(0, 0)] * (src.ndim - 2)
    padded = np.pad(src, pad, mode="edge")
    h, w = src.shape[:2]
    out = np.zeros_like(src)
    for dy in range(3):
        for dx in range(3):
            out += kernel[dy, dx] * padded[dy:dy + h, dx:dx + w]
    return _to_uint8(out + offset)


def invert_colors(img: np.ndarray) -> np.ndarray:
    return 255 - np.asarray(img, dtype=np.uint8)


def laplace_filter(img: np.ndarray) -> np.ndarray:
    return convolve3(img, LAPLACE_KERNEL)


def emboss_filter(img: np.ndarray) -> np.ndarray:
    return convolve3(img, EMBOSS_KERNEL, offset=128.0)


def edge_filter(img: np.ndarray) -> np.ndarray:
    return convolve3(img, EDGE_KERNEL)


def _overlap(img1: np.ndarray, img2: np.ndarray) -> tuple[int, int]:
    return min(img1.shape[0], img2.shape[0]), min(img1.shape[1], img2.shape[1])


def _bitwise(op: Callable[[np.ndarray, np.ndarray], np.ndarray], name: str) -> Callable[[np.ndarray, np.ndarray], np.ndarray]:
    def combine(img1: np.ndarray, img2: np.ndarray) -> np.ndarray:
        h, w = _overlap(img1, img2)
        out = np.array(img2, dtype=np.uint8, copy=True)
        out[:h, :w] = op(np.asarray(img1, dtype=np.uint8)[:h, :w], out[:h, :w])
        return out

    combine.__name__ = name
    return combine


section_and = _bitwise(np.bitwise_and, "section_and")
section_or = _bitwise(np.bitwise_or, "section_or")
section_xor = _bitwise(np.bitwise_xor, "section_xor")


def make_noise_filter(rng: random.Random) -> Callable[[np.ndarray], np.ndarray]:
    def noise_filter(img: np.ndarray) -> np.ndarray:
        gen = np.random.default_rng(rng.getrandbits(64))
        src = np.asarray(img, dtype=np.int16)
        noise = gen.integers(-NOISE_AMPLITUDE, NOISE_AMPLITUDE + 1, size=src.shape)
        return _to_uint8(src + noise)

    return noise_filter


def make_hsplit_combine(rng: random.Random) -> Callable[[np.ndarray, np.ndarray], np.ndarray]:
    def hsplit_combine(img1: np.ndarray, img2: np.ndarray) -> np.ndarray:
        out = np.array(img2, dtype=np.uint8, copy=True)
        if out.shape[0] < 2:
            return out
        row = rng.randint(1, out.shape[0] - 1)
        h, w = _overlap(img1, img2)
        rows = min(row, h)
        out[:rows, :w] = np.asarray(img1, dtype=np.uint8)[:rows, :w]
        return out

    return hsplit_combine


def make_vsplit_combine(rng: random.Random) -> Callable[[np.ndarray, np.ndarray], np.ndarray]:
    def vsplit_combine(img1: np.ndarray, img2: np.ndarray) -> np.ndarray:
        out = np.array(img2, dtype=np.uint8, copy=True)
        if out.shape[1] < 2:
            return out
        col = rng.randint(1, out.shape[1] - 1)
        h, w = _overlap(img1, img2)
        cols = min(col, w)
        out[:h, :cols] = np.asarray(img1, dtype=np.uint8)[:h, :cols]
        return out

    return vsplit_combine


def make_section_rotate(rng: random.Random) -> Callable[[np.ndarray], np.ndarray]:
    def section_rotate(img: np.ndarray) -> np.ndarray:
        out = np.array(img, dtype=np.uint8, copy=True)
        h, w = out.shape[:2]
        if h == 0 or w == 0:
            return out
        x = rng.randrange(w)
        y = rng.randrange(h)
        dim = rng.randint(1, min(w - x, h - y))
        section = out[y:y + dim, x:x + dim].copy()
        out[y:y + dim, x:x + dim] = np.rot90(section, k=rng.choice((1, 2, 3)))
        return out

    return section_rotate


def make_scramble_grid(rng: random.Random) -> Callable[[np.ndarray], np.ndarray]:
    def scramble_grid(img: np.ndarray) -> np.ndarray:
        out = np.array(img, dtype=np.uint8, copy=True)
        hh, hw = out.shape[0] // 2, out.shape[1] // 2
        if hh == 0 or hw == 0:
            return out
        corners = [(0, 0), (0, hw), (hh, 0), (hh, hw)]
        quads = [out[y:y + hh, x:x + hw].copy() for y, x in corners]
        rng.shuffle(quads)
        for (y, x), q in zip(corners, quads):
            out[y:y + hh, x:x + hw] = q
        return out

    return scramble_grid


def image_instructions(rng: random.Random) -> Dict[str, InstructionFn]:
    one = {
        "invert_colors": invert_colors,
        "laplace_filter": laplace_filter,
        "emboss_filter": emboss_filter,
        "edge_filter": edge_filter,
        "noise_filter": make_noise_filter(rng),
        "section_rotate": make_section_rotate(rng),
        "scramble_grid": make_scramble_grid(rng),
    }
    two = {
        "section_and": section_and,
        "section_or": section_or,
        "section_xor": section_xor,
        "hsplit_combine": make_hsplit_combine(rng),
        "vsplit_combine": make_vsplit_combine(rng),
    }
    out: Dict[str, InstructionFn] = {}
    for name, fn in one.items():
        out[name] = make_instruction(fn, ONE_IMAGE, Stack.IMAGE)
    for name, fn in two.items():
        out[name] = make_instruction(fn, TWO_IMAGES, Stack.IMAGE)
    return out


def image_instruction_set(rng: random.Random) -> InstructionSet:
    return InstructionSet(image_instructions(rng))


def default_catalog() -> Catalog:
    return make_catalog([
        EXEC_DUP,
        EXEC_IF,
        "invert_colors",
        "laplace_filter",
        "emboss_filter",
        "edge_filter",
        "laplace_filter",
        "noise_filter",
        "scramble_grid",
        "section_and",
        "section_or",
        "section_xor",
        "hsplit_combine",
        "section_rotate",
        "section_rotate",
        "section_rotate",
        True,
        False,
        1,
    ])
