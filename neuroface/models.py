from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from .geometry import BoundingBox, FaceObservation, LandmarkRegion, NormalizedPoint

SCALE_MIN = 0.5
SCALE_MAX = 2.0


class PointModel(BaseModel):
    x: float = Field(ge=0, le=1)
    y: float = Field(ge=0, le=1)


class BoundingBoxModel(BaseModel):
    x: float = Field(ge=0, le=1)
    y: float = Field(ge=0, le=1)
    width: float = Field(ge=0, le=1)
    height: float = Field(ge=0, le=1)


def _region_from_models(points: Optional[List[PointModel]]) -> Optional[LandmarkRegion]:
    if not points:
        return None
    return LandmarkRegion(tuple(NormalizedPoint(p.x, p.y) for p in points))


def _region_to_models(region: Optional[LandmarkRegion]) -> Optional[List[PointModel]]:
    if region is None:
        return None
    return [PointModel(x=p.x, y=p.y) for p in region.points]


class FaceObservationModel(BaseModel):
    """Detector output for one face, y-up coordinates normalized to [0, 1]."""

    boundingBox: BoundingBoxModel
    leftEye: Optional[List[PointModel]] = None
    rightEye: Optional[List[PointModel]] = None
    nose: Optional[List[PointModel]] = None
    confidence: float = 1.0

    def to_observation(self) -> FaceObservation:
        box = self.boundingBox
        return FaceObservation(
            bounding_box=BoundingBox(box.x, box.y, box.width, box.height),
            left_eye=_region_from_models(self.leftEye),
            right_eye=_region_from_models(self.rightEye),
            nose=_region_from_models(self.nose),
            confidence=self.confidence,
        )

    @classmethod
    def from_observation(cls, face: FaceObservation) -> "FaceObservationModel":
        box = face.bounding_box
        return cls(
            boundingBox=BoundingBoxModel(x=box.min_x, y=box.min_y, width=box.width, height=box.height),
            leftEye=_region_to_models(face.left_eye),
            rightEye=_region_to_models(face.right_eye),
            nose=_region_to_models(face.nose),
            confidence=face.confidence,
        )


class FaceControls(BaseModel):
    ovalScale: float = Field(default=1.0, ge=SCALE_MIN, le=SCALE_MAX)
    eyeScale: float = Field(default=1.0, ge=SCALE_MIN, le=SCALE_MAX)
    noseScale: float = Field(default=1.0, ge=SCALE_MIN, le=SCALE_MAX)


class FaceAnalysisResponse(BaseModel):
    width: int
    height: int
    faces: List[FaceObservationModel] = Field(default_factory=list)


class TransformResponse(BaseModel):
    image: str
    controls: FaceControls
    faces: List[FaceObservationModel] = Field(default_factory=list)
