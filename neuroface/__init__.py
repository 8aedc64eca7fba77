"""Landmark-driven local warping of face outline, eyes and nose."""

from .errors import InvalidImageError
from .geometry import (
    BoundingBox,
    FaceObservation,
    LandmarkRegion,
    NormalizedPoint,
    PixelPoint,
    box_center,
    to_pixel,
)
from .pipeline import FaceTransformPipeline, transform
from .warp import WarpKind, WarpParameters, apply_warp

__all__ = [
    "BoundingBox",
    "FaceObservation",
    "FaceTransformPipeline",
    "InvalidImageError",
    "LandmarkRegion",
    "NormalizedPoint",
    "PixelPoint",
    "WarpKind",
    "WarpParameters",
    "apply_warp",
    "box_center",
    "to_pixel",
    "transform",
]
