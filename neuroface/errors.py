from __future__ import annotations

from typing import Any

import numpy as np


class InvalidImageError(ValueError):
    """Raised when an image buffer is missing or has no pixels."""


def validate_image(image: Any) -> np.ndarray:
    if image is None:
        raise InvalidImageError("Image is missing")
    if not isinstance(image, np.ndarray):
        raise InvalidImageError(f"Expected a numpy array, got {type(image).__name__}")
    if image.ndim not in (2, 3):
        raise InvalidImageError(f"Expected a 2D or 3D image array, got {image.ndim} dimensions")
    h, w = image.shape[:2]
    if h == 0 or w == 0 or (image.ndim == 3 and image.shape[2] == 0):
        raise InvalidImageError(f"Image has zero size: {image.shape}")
    return image
