# -*- coding: utf-8 -*-
import numpy as np

# 15 distinct colors (RGB 0..255), cycled by plane index
_PALETTE = np.array([
    [0, 0, 0],  # black
    [255, 0, 0],  # red
    [0, 255, 0],  # green
    [0, 0, 255],  # blue
    [255, 255, 0],  # yellow
    [255, 0, 255],  # magenta
    [0, 255, 255],  # cyan
    [255, 255, 255],  # white
    [127, 0, 0],
    [0, 127, 0],
    [0, 0, 127],
    [127, 127, 0],
    [127, 0, 127],
    [0, 127, 127],
    [127, 127, 127],
], dtype=np.uint8)
_PALETTE.setflags(write=False)


def color_palette() -> np.ndarray:
    return _PALETTE.copy()


def color_for(plane_index: int) -> np.ndarray:
    return _PALETTE[plane_index % len(_PALETTE)].copy()
