from __future__ import annotations

import hashlib
import logging
import threading
from collections import OrderedDict
from typing import List, Optional, Protocol

import numpy as np

from .errors import validate_image
from .geometry import FaceObservation
from .models import FaceControls
from .pipeline import FaceTransformPipeline

logger = logging.getLogger(__name__)


class FaceDetector(Protocol):
    def detect(self, image: np.ndarray) -> List[FaceObservation]:
        ...


def image_digest(image: np.ndarray) -> str:
    digest = hashlib.sha1()
    digest.update(repr((image.shape, image.dtype.str)).encode("utf-8"))
    digest.update(np.ascontiguousarray(image).tobytes())
    return digest.hexdigest()


class ObservationCache:
    """LRU of detector results keyed by image content."""

    def __init__(self, maxsize: int = 16) -> None:
        self.maxsize = maxsize
        self._entries: "OrderedDict[str, List[FaceObservation]]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Optional[List[FaceObservation]]:
        with self._lock:
            faces = self._entries.get(key)
            if faces is None:
                return None
            self._entries.move_to_end(key)
            return list(faces)

    def put(self, key: str, faces: List[FaceObservation]) -> None:
        if self.maxsize <= 0:
            return
        with self._lock:
            self._entries[key] = list(faces)
            self._entries.move_to_end(key)
            while len(self._entries) > self.maxsize:
                self._entries.popitem(last=False)

    def get_or_detect(self, image: np.ndarray, detector: FaceDetector) -> List[FaceObservation]:
        key = image_digest(image)
        faces = self.get(key)
        if faces is not None:
            logger.debug(f"Landmark cache hit for {key[:12]}")
            return faces
        faces = list(detector.detect(image))
        self.put(key, faces)
        return list(faces)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()


class FaceEditSession:
    """Holds one source image; landmarks are detected once, warps on every change."""

    def __init__(
        self,
        image: np.ndarray,
        detector: FaceDetector,
        pipeline: Optional[FaceTransformPipeline] = None,
        controls: Optional[FaceControls] = None,
    ) -> None:
        self.image = validate_image(image)
        self.detector = detector
        self.pipeline = pipeline or FaceTransformPipeline()
        self.controls = controls or FaceControls()
        self._faces: Optional[List[FaceObservation]] = None

    @property
    def faces(self) -> List[FaceObservation]:
        if self._faces is None:
            self._faces = list(self.detector.detect(self.image))
            logger.info(f"Session detected {len(self._faces)} face(s)")
        return self._faces

    def render(self) -> np.ndarray:
        return self.pipeline.transform(
            self.image,
            self.faces,
            self.controls.ovalScale,
            self.controls.eyeScale,
            self.controls.noseScale,
        )

    def update(self, **changes: float) -> np.ndarray:
        """Change one or more controls (ovalScale, eyeScale, noseScale) and re-render."""
        unknown = set(changes) - set(FaceControls.model_fields)
        if unknown:
            raise ValueError(f"Unknown controls: {', '.join(sorted(unknown))}")
        self.controls = FaceControls.model_validate({**self.controls.model_dump(), **changes})
        return self.render()

    def reset(self) -> np.ndarray:
        self.controls = FaceControls()
        return self.render()
