import sys
from pathlib import Path

import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))


@pytest.fixture
def page():
    """40x40 paper (200) with one 6x6 ink blot (30) in the middle."""
    img = np.full((40, 40), 200, dtype=np.uint8)
    img[17:23, 17:23] = 30
    return img


@pytest.fixture
def color_page(page):
    """The same page in colour, slightly tinted paper."""
    rgb = np.dstack([page, page, page]).astype(np.int16)
    rgb[page == 200] = (210, 200, 180)
    return rgb.astype(np.uint8)
