from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .errors import InvalidImage


@dataclass(frozen=True)
class Image:
    """
    Decoded still image: packed RGB bytes, 3 bytes per pixel, row-major.
    """

    width: int
    height: int
    data: bytes

    @classmethod
    def from_array(cls, image_rgb: np.ndarray) -> "Image":
        """
        Build from an (H, W, 3) RGB or (H, W, 4) RGBA uint8 array. Alpha is dropped.
        """

        if image_rgb is None or not hasattr(image_rgb, "shape"):
            raise InvalidImage("image must be a NumPy array (RGB/RGBA).")
        if image_rgb.ndim != 3 or image_rgb.shape[2] not in (3, 4):
            raise InvalidImage(f"Expected image shape (H, W, 3|4), got {getattr(image_rgb, 'shape', None)}")
        rgb = image_rgb[:, :, :3]
        h, w = rgb.shape[:2]
        return cls(width=int(w), height=int(h), data=np.ascontiguousarray(rgb, dtype=np.uint8).tobytes())

    @classmethod
    def from_bgr(cls, frame_bgr: np.ndarray) -> "Image":
        """
        Build from an OpenCV-style BGR frame.
        """

        if frame_bgr is None or not hasattr(frame_bgr, "shape"):
            raise InvalidImage("frame_bgr must be a NumPy array (BGR).")
        if frame_bgr.ndim != 3 or frame_bgr.shape[2] != 3:
            raise InvalidImage(f"Expected frame shape (H, W, 3), got {getattr(frame_bgr, 'shape', None)}")
        return cls.from_array(frame_bgr[:, :, ::-1])

    def to_array(self) -> np.ndarray:
        """
        (H, W, 3) uint8 view over `data`. Raises InvalidImage on zero size or a short/long buffer.
        """

        if self.width <= 0 or self.height <= 0:
            raise InvalidImage(f"Image must have non-zero size (got {self.width}x{self.height}).")
        expected = self.width * self.height * 3
        if len(self.data) != expected:
            raise InvalidImage(f"RGB buffer has {len(self.data)} bytes, expected {expected}.")
        return np.frombuffer(self.data, dtype=np.uint8).reshape(self.height, self.width, 3)


@dataclass(frozen=True)
class Detection:
    """
    One labeled box in original-image pixel coordinates.
    """

    x1: float
    y1: float
    x2: float
    y2: float
    label: str
    score: float
    class_id: int

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        return self.x1, self.y1, self.x2, self.y2
