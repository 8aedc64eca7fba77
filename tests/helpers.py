import numpy as np

from neuroface.geometry import BoundingBox, FaceObservation, LandmarkRegion


def noise_image(height, width, channels=3, seed=0):
    rng = np.random.default_rng(seed)
    shape = (height, width, channels) if channels else (height, width)
    return rng.integers(0, 256, size=shape, dtype=np.uint8)


def distance_grid(height, width, cx, cy):
    yy, xx = np.mgrid[0:height, 0:width].astype(np.float64)
    return np.sqrt((xx - cx) ** 2 + (yy - cy) ** 2)


def make_face(min_x, min_y, width, height, with_eyes=True, with_nose=True):
    box = BoundingBox(min_x, min_y, width, height)
    left_eye = LandmarkRegion.from_pairs([(0.25, 0.75), (0.35, 0.78), (0.45, 0.75)]) if with_eyes else None
    right_eye = LandmarkRegion.from_pairs([(0.55, 0.75), (0.65, 0.78), (0.75, 0.75)]) if with_eyes else None
    nose = LandmarkRegion.from_pairs([(0.5, 0.3), (0.45, 0.25), (0.55, 0.25)]) if with_nose else None
    return FaceObservation(bounding_box=box, left_eye=left_eye, right_eye=right_eye, nose=nose)


class StubDetector:
    def __init__(self, faces=()):
        self.faces = list(faces)
        self.calls = 0

    def detect(self, image):
        self.calls += 1
        return list(self.faces)
