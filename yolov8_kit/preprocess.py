from dataclasses import dataclass
from typing import Tuple

import numpy as np

from .errors import InvalidImage
from .types import Image

INPUT_SIZE = 640


@dataclass(frozen=True)
class PreprocessResult:
    blob: np.ndarray
    orig_size: Tuple[int, int]


def fill_resize(image: np.ndarray, size: int = INPUT_SIZE) -> np.ndarray:
    """
    Stretch an (H, W, C) image to exactly (size, size), each axis independently.

    No aspect-ratio preservation and no padding: the decoder undoes this with a
    plain per-axis ratio, so the two steps stay exact inverses.
    """
    try:
        import cv2  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError("OpenCV is required for fill_resize(). Install with `pip install opencv-python`.") from e

    h, w = image.shape[:2]
    if (w, h) == (size, size):
        return image
    if not image.flags.writeable:
        image = image.copy()
    return cv2.resize(image, (size, size), interpolation=cv2.INTER_LINEAR)


def build_input_tensor(image: Image, input_size: int = INPUT_SIZE) -> np.ndarray:
    """
    Convert a decoded RGB image into a planar float32 tensor of shape (3, size, size).

    Each channel is scaled to [0, 1] by dividing by 255 and laid out R, G, B.

    Raises:
        InvalidImage: zero-size image, bad buffer length, or unexpected resize output.
    """

    pixels = image.to_array()
    resized = fill_resize(pixels, input_size)
    if resized.size != input_size * input_size * 3:
        raise InvalidImage(f"Invalid image dimensions: {resized.size} bytes after resize")

    # HWC -> CHW
    blob = resized.astype(np.float32) / 255.0
    return np.ascontiguousarray(np.transpose(blob, (2, 0, 1)))
