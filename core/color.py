import math

import numpy as np
from numba import njit

MIN_CHANNEL = 0
MAX_CHANNEL = 255


@njit(cache=True)
def to_channel(c):
    """Map a linear component to an 8-bit channel: clamp(round(c * 255), 0, 255)."""
    value = math.floor(c * 255.0 + 0.5)
    if value < MIN_CHANNEL:
        return MIN_CHANNEL
    if value > MAX_CHANNEL:
        return MAX_CHANNEL
    return int(value)


@njit(cache=True)
def pack_rgb(r, g, b):
    """Pack three linear components into a 24-bit (R<<16)|(G<<8)|B integer."""
    return (to_channel(r) << 16) | (to_channel(g) << 8) | to_channel(b)


@njit(cache=True)
def pack_rgb_buffer(colors, out):
    # colors: (N, 3) float64, out: (N,) uint32
    for i in range(colors.shape[0]):
        out[i] = pack_rgb(colors[i, 0], colors[i, 1], colors[i, 2])


def vec_to_rgb(color) -> int:
    return int(pack_rgb(color.x, color.y, color.z))


def unpack_rgb(rgb: int):
    return (rgb >> 16) & 0xFF, (rgb >> 8) & 0xFF, rgb & 0xFF


def unpack_rgb_array(packed: np.ndarray) -> np.ndarray:
    """(...,) uint32 packed cells -> (..., 3) uint8 channels."""
    packed = packed.astype(np.uint32)
    return np.stack([(packed >> 16) & 0xFF, (packed >> 8) & 0xFF, packed & 0xFF], axis=-1).astype(np.uint8)
