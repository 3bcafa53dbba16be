from __future__ import annotations

import os
from typing import Tuple

import numpy as np
from PIL import Image

from mandelstripe.util.logging_setup import get_logger

def write_image(path: str, pixels: np.ndarray, bounds: Tuple[int, int]) -> str:
    logger = get_logger()
    width, height = bounds
    pixels = np.asarray(pixels, dtype=np.uint8)
    if pixels.size != width * height:
        raise ValueError(f"Buffer holds {pixels.size} pixels, expected {width}x{height}={width * height}")

    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)

    # A 2-D uint8 array becomes a single-channel "L" image.
    img = Image.fromarray(pixels.reshape((height, width)))
    img.save(path, format="PNG", optimize=True)
    logger.info("Image written: %s (%sx%s grayscale)", path, width, height)
    return path
