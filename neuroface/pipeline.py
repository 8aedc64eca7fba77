from __future__ import annotations

import logging
from typing import Iterable, Optional

import numpy as np

from . import warp
from .errors import validate_image
from .geometry import FaceObservation
from .regions import plan_face

logger = logging.getLogger(__name__)

DEFAULT_IDENTITY_SCALE = 1.0


class FaceTransformPipeline:
    """Applies oval, eye and nose warps for every detected face in order."""

    def __init__(self, identity_scale: float = DEFAULT_IDENTITY_SCALE) -> None:
        self.identity_scale = float(identity_scale)

    def strength(self, scale: float) -> float:
        return float(scale) - self.identity_scale

    def transform(
        self,
        image: np.ndarray,
        faces: Optional[Iterable[FaceObservation]],
        oval_scale: float = 1.0,
        eye_scale: float = 1.0,
        nose_scale: float = 1.0,
    ) -> np.ndarray:
        image = validate_image(image)
        faces = list(faces or [])
        if not faces:
            return image

        h, w = image.shape[:2]
        oval_strength = self.strength(oval_scale)
        eye_strength = self.strength(eye_scale)
        nose_strength = self.strength(nose_scale)

        result = image
        for index, face in enumerate(faces):
            for name, params in plan_face(face, w, h, oval_strength, eye_strength, nose_strength):
                logger.debug(
                    f"face {index}: {name} warp center=({params.center.x:.1f}, {params.center.y:.1f}) "
                    f"radius={params.radius:.1f} strength={params.strength:.2f}"
                )
                result = warp.apply(result, params)
        return result


_DEFAULT_PIPELINE = FaceTransformPipeline()


def transform(
    image: np.ndarray,
    faces: Optional[Iterable[FaceObservation]],
    oval_scale: float = 1.0,
    eye_scale: float = 1.0,
    nose_scale: float = 1.0,
) -> np.ndarray:
    return _DEFAULT_PIPELINE.transform(image, faces, oval_scale, eye_scale, nose_scale)
