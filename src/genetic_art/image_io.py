from __future__ import annotations

from pathlib import Path
from typing import List, Sequence, Tuple

import numpy as np
from PIL import Image


def load_image(path: str | Path, size: Tuple[int, int] | None = None) -> np.ndarray:
    """Read an image as an ``(H, W, 3)`` uint8 array, resized to ``size=(W, H)``."""
    with Image.open(path) as im:
        rgb = im.convert("RGB")
        if size is not None:
            rgb = rgb.resize(size)
        return np.array(rgb, dtype=np.uint8)


def load_images(paths: Sequence[str | Path], size: Tuple[int, int] | None = None) -> List[np.ndarray]:
    return [load_image(p, size) for p in paths]


def save_image(img: np.ndarray, path: str | Path, size: Tuple[int, int] | None = None) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    im = Image.fromarray(np.asarray(img, dtype=np.uint8))
    if size is not None:
        im = im.resize(size, Image.Resampling.NEAREST)
    im.save(out, format="PNG")
    return out
