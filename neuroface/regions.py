from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import numpy as np

from .geometry import (
    BoundingBox,
    FaceObservation,
    LandmarkRegion,
    box_center,
    box_size,
    scaled_centroid,
    to_pixel,
)
from .warp import WarpKind, WarpParameters, apply

logger = logging.getLogger(__name__)

OVAL_RADIUS_FACTOR = 0.9
FEATURE_RADIUS_FACTOR = 0.15
EYE_CENTROID_Y_FACTOR = 0.8
NOSE_CENTROID_Y_FACTOR = 1.7
POINT_WARP_RADIUS_PX = 50.0

PlannedWarp = Tuple[str, WarpParameters]


def oval_warp(box: BoundingBox, width: int, height: int, strength: float) -> WarpParameters:
    box_w, box_h = box_size(box, width, height)
    return WarpParameters(
        center=box_center(box, width, height),
        radius=OVAL_RADIUS_FACTOR * min(box_w, box_h),
        strength=strength,
        kind=WarpKind.LINEAR,
    )


def _feature_warp(
    region: Optional[LandmarkRegion],
    box: BoundingBox,
    width: int,
    height: int,
    strength: float,
    y_factor: float,
) -> Optional[WarpParameters]:
    if region is None or region.point_count == 0:
        return None
    center = to_pixel(scaled_centroid(region, y_factor), box, width, height)
    box_w, _ = box_size(box, width, height)
    return WarpParameters(
        center=center,
        radius=FEATURE_RADIUS_FACTOR * box_w,
        strength=strength,
        kind=WarpKind.RADIAL,
    )


def eye_warp(
    region: Optional[LandmarkRegion],
    box: BoundingBox,
    width: int,
    height: int,
    strength: float,
) -> Optional[WarpParameters]:
    return _feature_warp(region, box, width, height, strength, EYE_CENTROID_Y_FACTOR)


def nose_warp(
    region: Optional[LandmarkRegion],
    box: BoundingBox,
    width: int,
    height: int,
    strength: float,
) -> Optional[WarpParameters]:
    return _feature_warp(region, box, width, height, strength, NOSE_CENTROID_Y_FACTOR)


def plan_face(
    face: FaceObservation,
    width: int,
    height: int,
    oval_strength: float,
    eye_strength: float,
    nose_strength: float,
) -> List[PlannedWarp]:
    """Ordered warps for one face: oval, left eye, right eye, nose.

    Regions the detector did not supply are left out of the plan.
    """
    box = face.bounding_box
    plan: List[PlannedWarp] = [("oval", oval_warp(box, width, height, oval_strength))]

    for name, params in (
        ("left_eye", eye_warp(face.left_eye, box, width, height, eye_strength)),
        ("right_eye", eye_warp(face.right_eye, box, width, height, eye_strength)),
        ("nose", nose_warp(face.nose, box, width, height, nose_strength)),
    ):
        if params is None:
            logger.debug(f"No {name} landmarks, skipping {name} warp")
            continue
        plan.append((name, params))
    return plan


def warp_points(
    image: np.ndarray,
    region: LandmarkRegion,
    box: BoundingBox,
    strength: float,
    radius: float = POINT_WARP_RADIUS_PX,
) -> np.ndarray:
    """Apply one fixed-radius radial bump at every point of *region*."""
    h, w = image.shape[:2]
    result = image
    for point in region.points:
        center = to_pixel(point, box, w, h)
        result = apply(result, WarpParameters(center=center, radius=radius, strength=strength))
    return result
