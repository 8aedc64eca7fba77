import pytest

from helpers import make_face, noise_image


@pytest.fixture
def image():
    return noise_image(400, 400)


@pytest.fixture
def face():
    return make_face(0.2, 0.2, 0.4, 0.4)
