from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence, Tuple


@dataclass(frozen=True)
class NormalizedPoint:
    """Landmark point relative to a face box, y increasing upward."""

    x: float
    y: float


@dataclass(frozen=True)
class PixelPoint:
    """Point in image pixels, origin top-left, y increasing downward."""

    x: float
    y: float

    def as_tuple(self) -> Tuple[float, float]:
        return self.x, self.y


@dataclass(frozen=True)
class BoundingBox:
    """Face box normalized to the full image (detector convention, y-up)."""

    min_x: float
    min_y: float
    width: float
    height: float

    @property
    def max_x(self) -> float:
        return self.min_x + self.width

    @property
    def max_y(self) -> float:
        return self.min_y + self.height

    @property
    def mid_x(self) -> float:
        return self.min_x + self.width / 2.0

    @property
    def mid_y(self) -> float:
        return self.min_y + self.height / 2.0


@dataclass(frozen=True)
class LandmarkRegion:
    points: Tuple[NormalizedPoint, ...] = ()

    @classmethod
    def from_pairs(cls, pairs: Iterable[Sequence[float]]) -> "LandmarkRegion":
        return cls(tuple(NormalizedPoint(float(x), float(y)) for x, y in pairs))

    @property
    def point_count(self) -> int:
        return len(self.points)


@dataclass(frozen=True)
class FaceObservation:
    bounding_box: BoundingBox
    left_eye: Optional[LandmarkRegion] = None
    right_eye: Optional[LandmarkRegion] = None
    nose: Optional[LandmarkRegion] = None
    confidence: float = field(default=1.0, compare=False)


def to_pixel(point: NormalizedPoint, box: BoundingBox, image_width: float, image_height: float) -> PixelPoint:
    # y is flipped exactly once here; callers never invert again
    px = box.min_x * image_width + point.x * box.width * image_width
    py = image_height - (box.min_y * image_height + point.y * box.height * image_height)
    return PixelPoint(px, py)


def box_center(box: BoundingBox, image_width: float, image_height: float) -> PixelPoint:
    return PixelPoint(box.mid_x * image_width, image_height - box.mid_y * image_height)


def box_size(box: BoundingBox, image_width: float, image_height: float) -> Tuple[float, float]:
    return box.width * image_width, box.height * image_height


def scaled_centroid(region: LandmarkRegion, y_factor: float = 1.0) -> NormalizedPoint:
    """Mean of the region points, with the y mean multiplied by *y_factor*.

    Eye and nose centers are placed with y factors other than 1.0 (0.8 and
    1.7), which moves them off the true centroid.
    """
    count = region.point_count
    if count == 0:
        raise ValueError("Cannot take the centroid of an empty region")
    sum_x = sum(p.x for p in region.points)
    sum_y = sum(p.y for p in region.points)
    return NormalizedPoint(sum_x / count, sum_y * y_factor / count)
