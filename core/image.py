from pathlib import Path
from typing import Tuple

import numpy as np
from PIL import Image as PILImage

from core.color import pack_rgb_buffer, unpack_rgb, unpack_rgb_array
from core.errors import SceneArgumentError


class Image:
    """
    Row-major grid of 24-bit RGB cells, width x height.

    Cell (row, col) lives at address row * width + col. Row 0 is the bottom
    of the viewport, matching the renderer's v axis.
    """

    def __init__(self, width: int, height: int, pixels: np.ndarray = None):
        if width <= 0 or height <= 0:
            raise SceneArgumentError(f"Image size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        if pixels is None:
            pixels = np.zeros(width * height, dtype=np.uint32)
        elif pixels.shape != (width * height,):
            raise SceneArgumentError(f"Pixel buffer must hold {width * height} cells, got {pixels.shape}")
        self._pixels = pixels.astype(np.uint32, copy=False)

    @classmethod
    def from_radiance(cls, width: int, height: int, colors: np.ndarray) -> "Image":
        """Quantize an (N, 3) float buffer of linear colors and freeze the result."""
        packed = np.zeros(width * height, dtype=np.uint32)
        pack_rgb_buffer(np.ascontiguousarray(colors, dtype=np.float64), packed)
        image = cls(width, height, packed)
        image.freeze()
        return image

    def freeze(self):
        self._pixels.flags.writeable = False

    @property
    def rows(self) -> int:
        return self.height

    @property
    def columns(self) -> int:
        return self.width

    def _address(self, row: int, col: int) -> int:
        if not (0 <= row < self.height and 0 <= col < self.width):
            raise IndexError(f"Pixel ({row}, {col}) outside {self.width}x{self.height} image")
        return row * self.width + col

    def get_value(self, row: int, col: int) -> int:
        return int(self._pixels[self._address(row, col)])

    def set_value(self, row: int, col: int, rgb: int):
        self._pixels[self._address(row, col)] = rgb & 0xFFFFFF

    def get_rgb(self, row: int, col: int) -> Tuple[int, int, int]:
        return unpack_rgb(self.get_value(row, col))

    def to_array(self) -> np.ndarray:
        """(height, width, 3) uint8 array indexed by grid row."""
        return unpack_rgb_array(self._pixels.reshape(self.height, self.width))

    def to_pil(self) -> PILImage.Image:
        # grid row 0 is the bottom of the picture
        image_array = np.flip(self.to_array(), axis=0)
        return PILImage.fromarray(np.ascontiguousarray(image_array), "RGB")

    def save(self, path):
        path = Path(path)
        if path.parent and not path.parent.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
        self.to_pil().save(path, format="PNG")

    def __eq__(self, other):
        if not isinstance(other, Image):
            return NotImplemented
        return (self.width == other.width and self.height == other.height
                and bool(np.array_equal(self._pixels, other._pixels)))

    __hash__ = None

    def __repr__(self):
        return f"Image({self.width}x{self.height})"
