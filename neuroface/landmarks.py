from __future__ import annotations

import logging
import threading
from typing import List, Optional, Sequence

import cv2
import mediapipe as mp
import numpy as np

from .errors import InvalidImageError, validate_image
from .geometry import BoundingBox, FaceObservation, LandmarkRegion, NormalizedPoint

logger = logging.getLogger(__name__)

_FACE_LOCK = threading.Lock()

LEFT_EYE_INDICES = [33, 160, 158, 133, 153, 144, 163, 7]
RIGHT_EYE_INDICES = [263, 387, 385, 362, 380, 373, 390, 249]
NOSE_INDICES = [168, 6, 197, 195, 5, 4, 1, 19, 94, 2, 98, 327, 129, 358]


def _clamp01(value: float) -> float:
    return min(max(float(value), 0.0), 1.0)


def _region(
    landmarks: np.ndarray,
    indices: Sequence[int],
    box: BoundingBox,
    y_max: float,
) -> Optional[LandmarkRegion]:
    if box.width <= 0 or box.height <= 0:
        return None
    points = []
    for idx in indices:
        if not 0 <= idx < len(landmarks):
            continue
        x, y = landmarks[idx]
        points.append(
            NormalizedPoint(
                _clamp01((x - box.min_x) / box.width),
                # image y grows downward, detector y grows upward from the box bottom
                _clamp01((y_max - y) / box.height),
            )
        )
    if not points:
        return None
    return LandmarkRegion(tuple(points))


def observation_from_landmarks(landmarks: np.ndarray, confidence: float = 1.0) -> Optional[FaceObservation]:
    """Convert FaceMesh landmarks (normalized, y-down) into a y-up FaceObservation."""
    pts = np.asarray(landmarks, dtype=np.float64)
    if pts.ndim != 2 or pts.shape[0] == 0 or pts.shape[1] < 2:
        return None
    pts = np.clip(pts[:, :2], 0.0, 1.0)

    x_min, y_min = pts.min(axis=0)
    x_max, y_max = pts.max(axis=0)
    box = BoundingBox(
        min_x=float(x_min),
        min_y=float(1.0 - y_max),
        width=float(x_max - x_min),
        height=float(y_max - y_min),
    )
    if box.width <= 0 or box.height <= 0:
        logger.debug("Dropping face with an empty landmark extent")
        return None

    return FaceObservation(
        bounding_box=box,
        left_eye=_region(pts, LEFT_EYE_INDICES, box, float(y_max)),
        right_eye=_region(pts, RIGHT_EYE_INDICES, box, float(y_max)),
        nose=_region(pts, NOSE_INDICES, box, float(y_max)),
        confidence=confidence,
    )


class FaceMeshDetector:
    """MediaPipe FaceMesh wrapper producing FaceObservation records."""

    def __init__(self, max_num_faces: int = 4, min_detection_confidence: float = 0.5) -> None:
        self._mesh = mp.solutions.face_mesh.FaceMesh(
            static_image_mode=True,
            max_num_faces=max_num_faces,
            refine_landmarks=False,
            min_detection_confidence=min_detection_confidence,
        )

    def detect(self, image: np.ndarray) -> List[FaceObservation]:
        image = validate_image(image)
        if image.ndim != 3 or image.shape[2] != 3:
            raise InvalidImageError(f"Expected a 3-channel BGR image, got shape {image.shape}")

        rgb = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        with _FACE_LOCK:
            results = self._mesh.process(rgb)
        if not results.multi_face_landmarks:
            logger.info("No faces detected")
            return []

        faces: List[FaceObservation] = []
        for face_landmarks in results.multi_face_landmarks:
            pts = np.array([[lm.x, lm.y] for lm in face_landmarks.landmark], dtype=np.float64)
            face = observation_from_landmarks(pts)
            if face is not None:
                faces.append(face)
        logger.info(f"Detected {len(faces)} face(s)")
        return faces
