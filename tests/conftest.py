from pathlib import Path

import pytest
from PIL import Image


@pytest.fixture
def make_image():
    def make(path, size=(32, 32), mode="RGB", color="red", format=None):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new(mode, size, color).save(path, format=format)
        return path

    return make
