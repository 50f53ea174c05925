import pytest

from helpers import image_bytes


@pytest.fixture
def png_bytes():
    return image_bytes()
