import numpy as np
import pytest

from neuroface import FaceTransformPipeline, InvalidImageError, transform
from neuroface.geometry import BoundingBox, FaceObservation
from neuroface.regions import plan_face

from helpers import distance_grid, make_face, noise_image


def _outside_all(plan, height, width):
    mask = np.ones((height, width), dtype=bool)
    for _, params in plan:
        mask &= distance_grid(height, width, params.center.x, params.center.y) >= params.radius
    return mask


def test_no_faces_is_identity(image):
    assert transform(image, [], 2.0, 0.5, 1.7) is image
    assert transform(image, None, 2.0, 0.5, 1.7) is image


def test_identity_controls_leave_image_unchanged(image, face):
    out = transform(image, [face], 1.0, 1.0, 1.0)
    assert np.array_equal(out, image)


@pytest.mark.parametrize("scales", [(1.5, 1.5, 1.5), (0.5, 2.0, 0.7), (2.0, 0.5, 2.0)])
def test_pixels_outside_every_region_are_unchanged(image, face, scales):
    out = transform(image, [face], *scales)
    strengths = [s - 1.0 for s in scales]
    outside = _outside_all(plan_face(face, 400, 400, *strengths), 400, 400)
    assert np.array_equal(out[outside], image[outside])
    assert not np.array_equal(out, image)


def test_oval_only_example(image):
    face = FaceObservation(bounding_box=BoundingBox(0.2, 0.2, 0.4, 0.4))
    out = transform(image, [face], 1.5, 1.0, 1.0)

    dist = distance_grid(400, 400, 160.0, 240.0)
    assert np.array_equal(out[dist >= 144.0], image[dist >= 144.0])
    assert not np.array_equal(out[dist < 144.0], image[dist < 144.0])
    # no eye or nose regions, so those controls have no effect
    assert np.array_equal(transform(image, [face], 1.5, 0.5, 2.0), out)


def test_missing_nose_matches_neutral_nose(image):
    with_nose = make_face(0.2, 0.2, 0.4, 0.4)
    without_nose = make_face(0.2, 0.2, 0.4, 0.4, with_nose=False)
    skipped = transform(image, [without_nose], 1.4, 1.3, 1.8)
    neutral = transform(image, [with_nose], 1.4, 1.3, 1.0)
    assert np.array_equal(skipped, neutral)


def test_disjoint_faces_commute():
    img = noise_image(400, 800)
    left = make_face(0.05, 0.3, 0.2, 0.4)
    right = make_face(0.6, 0.3, 0.2, 0.4)
    scales = (1.5, 1.3, 1.2)

    both = transform(img, [left, right], *scales)
    assert np.array_equal(both, transform(img, [right, left], *scales))
    assert np.array_equal(both, transform(transform(img, [left], *scales), [right], *scales))
    assert np.array_equal(both, transform(transform(img, [right], *scales), [left], *scales))


def test_input_is_not_mutated(image, face):
    original = image.copy()
    transform(image, [face], 1.8, 1.6, 0.6)
    assert np.array_equal(image, original)


def test_identity_scale_setting(image, face):
    raw = FaceTransformPipeline(identity_scale=0.0)
    assert raw.strength(1.5) == 1.5
    # with identity at zero a control of 1.0 is a full-strength bulge
    assert not np.array_equal(raw.transform(image, [face], 1.0, 1.0, 1.0), image)


@pytest.mark.parametrize(
    "bad",
    [None, [[1, 2], [3, 4]], np.zeros((0, 10, 3), np.uint8), np.zeros(10, np.uint8), np.zeros((2, 2, 2, 2), np.uint8)],
)
def test_invalid_image_is_rejected(bad, face):
    with pytest.raises(InvalidImageError):
        transform(bad, [face], 1.5, 1.5, 1.5)


def test_invalid_image_rejected_even_without_faces():
    with pytest.raises(InvalidImageError):
        transform(np.zeros((10, 0), np.uint8), [], 1.0, 1.0, 1.0)
