from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

import cv2
import numpy as np

from .geometry import PixelPoint

logger = logging.getLogger(__name__)

MIN_SAMPLE_FACTOR = 0.05
MAX_SAMPLE_FACTOR = 3.0


class WarpKind(str, Enum):
    RADIAL = "radial"
    LINEAR = "linear"


@dataclass(frozen=True)
class WarpParameters:
    center: PixelPoint
    radius: float
    strength: float
    kind: WarpKind = WarpKind.RADIAL
    angle: float = 0.0  # axis of the linear bump, radians; 0 is horizontal


def _is_degenerate(params: WarpParameters) -> bool:
    if not math.isfinite(params.radius) or params.radius <= 0:
        logger.debug(f"Skipping warp with degenerate radius {params.radius}")
        return True
    if not (math.isfinite(params.center.x) and math.isfinite(params.center.y)):
        logger.debug(f"Skipping warp with non-finite center {params.center}")
        return True
    if not math.isfinite(params.strength):
        logger.debug(f"Skipping warp with non-finite strength {params.strength}")
        return True
    return False


def _influence_bounds(
    center: PixelPoint,
    radius: float,
    shape: Tuple[int, int],
) -> Optional[Tuple[int, int, int, int]]:
    h, w = shape
    cx, cy = center.x, center.y
    x0 = max(int(math.floor(cx - radius)), 0)
    x1 = min(int(math.ceil(cx + radius)) + 1, w)
    y0 = max(int(math.floor(cy - radius)), 0)
    y1 = min(int(math.ceil(cy + radius)) + 1, h)
    if x1 <= x0 or y1 <= y0:
        return None
    return x0, y0, x1, y1


def bump_maps(
    grid_x: np.ndarray,
    grid_y: np.ndarray,
    params: WarpParameters,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return (map_x, map_y, inside) sampling maps for a bump warp.

    Each pixel inside the radius samples the source at its offset from the
    center multiplied by ``1 - strength * falloff``; ``falloff`` is 1 at the
    center and reaches 0 at the radius. The linear kind only rescales the
    offset component along its axis.
    """
    cx, cy = params.center.x, params.center.y
    dx = grid_x - cx
    dy = grid_y - cy
    dist = np.sqrt(dx**2 + dy**2)
    inside = dist < params.radius

    falloff = np.clip(1.0 - dist / params.radius, 0.0, 1.0) ** 2
    factor = np.clip(1.0 - params.strength * falloff, MIN_SAMPLE_FACTOR, MAX_SAMPLE_FACTOR)

    if params.kind == WarpKind.LINEAR:
        ux, uy = math.cos(params.angle), math.sin(params.angle)
        along = dx * ux + dy * uy
        shift = along * (factor - 1.0)
        map_x = grid_x + shift * ux
        map_y = grid_y + shift * uy
    else:
        map_x = cx + dx * factor
        map_y = cy + dy * factor

    return map_x.astype(np.float32), map_y.astype(np.float32), inside


def apply(image: np.ndarray, params: WarpParameters) -> np.ndarray:
    """Apply one bump warp to *image* and return a new buffer.

    Never raises for bad geometry or OpenCV failures: the input image is
    returned unchanged instead. Pixels at or beyond the radius are copied
    untouched.
    """
    if params.strength == 0 or _is_degenerate(params):
        return image

    h, w = image.shape[:2]
    bounds = _influence_bounds(params.center, params.radius, (h, w))
    if bounds is None:
        logger.debug(f"Warp at {params.center} (r={params.radius:.1f}) lies outside {w}x{h} image")
        return image
    x0, y0, x1, y1 = bounds

    grid_x, grid_y = np.meshgrid(
        np.arange(x0, x1, dtype=np.float32),
        np.arange(y0, y1, dtype=np.float32),
    )
    map_x, map_y, inside = bump_maps(grid_x, grid_y, params)
    if not np.any(inside):
        return image

    # maps cover the influence square but index into the full image
    try:
        warped_roi = cv2.remap(
            image,
            map_x,
            map_y,
            interpolation=cv2.INTER_CUBIC,
            borderMode=cv2.BORDER_REPLICATE,
        )
    except cv2.error as exc:
        logger.warning(f"{params.kind.value} warp at {params.center} failed: {exc}")
        return image
    if warped_roi is None or warped_roi.shape[:2] != inside.shape:
        logger.warning(f"{params.kind.value} warp at {params.center} produced no output")
        return image

    result = image.copy()
    roi = result[y0:y1, x0:x1]
    roi[inside] = warped_roi.reshape(roi.shape)[inside]
    return result


def apply_warp(
    image: np.ndarray,
    center: PixelPoint,
    radius: float,
    strength: float,
    kind: WarpKind = WarpKind.RADIAL,
    angle: float = 0.0,
) -> np.ndarray:
    return apply(image, WarpParameters(center=center, radius=radius, strength=strength, kind=kind, angle=angle))
