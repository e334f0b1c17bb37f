from io import BytesIO

import pytest
from PIL import Image

from receipt_handler.config import get_settings


def make_image_bytes(size=(40, 20), fmt="PNG", color=(255, 255, 255), mode="RGB"):
    buffer = BytesIO()
    Image.new(mode, size, color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def image_bytes():
    return make_image_bytes()


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
