import numpy as np
import pytest

from neuroface.geometry import BoundingBox, FaceObservation, LandmarkRegion
from neuroface.regions import eye_warp, nose_warp, oval_warp, plan_face, warp_points
from neuroface.warp import WarpKind

from helpers import distance_grid, make_face, noise_image


def test_oval_warp_uses_box_center_and_shorter_side():
    params = oval_warp(BoundingBox(0.2, 0.2, 0.4, 0.4), 400, 400, 0.5)
    assert params.center.as_tuple() == pytest.approx((160.0, 240.0))
    assert params.radius == pytest.approx(144.0)
    assert params.kind == WarpKind.LINEAR
    assert params.strength == 0.5


def test_oval_radius_for_non_square_box():
    params = oval_warp(BoundingBox(0.1, 0.1, 0.5, 0.2), 200, 100, 0.1)
    # 0.9 * min(100px, 20px)
    assert params.radius == pytest.approx(18.0)


def test_eye_center_scales_mean_y_by_point_eight():
    region = LandmarkRegion.from_pairs([(0.2, 0.5), (0.4, 0.5)])
    params = eye_warp(region, BoundingBox(0.1, 0.2, 0.5, 0.4), 200, 100, 0.3)
    assert params.center.x == pytest.approx(50.0)
    assert params.center.y == pytest.approx(64.0)
    assert params.radius == pytest.approx(15.0)
    assert params.kind == WarpKind.RADIAL
    assert params.strength == 0.3


def test_nose_center_scales_mean_y_by_one_point_seven():
    region = LandmarkRegion.from_pairs([(0.5, 0.2), (0.5, 0.4)])
    params = nose_warp(region, BoundingBox(0.1, 0.2, 0.5, 0.4), 200, 100, -0.2)
    assert params.center.x == pytest.approx(70.0)
    assert params.center.y == pytest.approx(59.6)
    assert params.radius == pytest.approx(15.0)
    assert params.kind == WarpKind.RADIAL


@pytest.mark.parametrize("region", [None, LandmarkRegion()])
def test_missing_regions_produce_no_warp(region):
    box = BoundingBox(0.1, 0.1, 0.5, 0.5)
    assert eye_warp(region, box, 100, 100, 0.5) is None
    assert nose_warp(region, box, 100, 100, 0.5) is None


def test_plan_order():
    plan = plan_face(make_face(0.2, 0.2, 0.4, 0.4), 400, 400, 0.5, 0.2, 0.1)
    assert [name for name, _ in plan] == ["oval", "left_eye", "right_eye", "nose"]
    assert [p.strength for _, p in plan] == [0.5, 0.2, 0.2, 0.1]


def test_plan_skips_absent_regions():
    face = FaceObservation(
        bounding_box=BoundingBox(0.2, 0.2, 0.4, 0.4),
        right_eye=LandmarkRegion.from_pairs([(0.6, 0.7)]),
    )
    plan = plan_face(face, 400, 400, 0.5, 0.2, 0.1)
    assert [name for name, _ in plan] == ["oval", "right_eye"]


def test_warp_points_bumps_each_landmark():
    img = noise_image(200, 200)
    box = BoundingBox(0.0, 0.0, 1.0, 1.0)
    region = LandmarkRegion.from_pairs([(0.25, 0.75), (0.75, 0.25)])
    out = warp_points(img, region, box, 0.6, radius=20.0)

    near_first = distance_grid(200, 200, 50.0, 50.0) < 20.0
    near_second = distance_grid(200, 200, 150.0, 150.0) < 20.0
    untouched = ~(near_first | near_second)
    assert np.array_equal(out[untouched], img[untouched])
    assert not np.array_equal(out[near_first], img[near_first])
    assert not np.array_equal(out[near_second], img[near_second])


def test_warp_points_with_empty_region_returns_input():
    img = noise_image(50, 50)
    assert warp_points(img, LandmarkRegion(), BoundingBox(0, 0, 1, 1), 0.5) is img
