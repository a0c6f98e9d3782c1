import logging

import pytest

from meadow.render.sink import MemoryRenderSink
from meadow.world.density import ArrayDensityField
from meadow.world.level import StaticLevel
from meadow.world.scatter import ScatterSampler


@pytest.fixture
def level():
    return StaticLevel(width=200.0, depth=200.0)


@pytest.fixture
def empty_density():
    return ArrayDensityField.constant(0.0, width=16, height=16)


@pytest.fixture
def dense_density():
    return ArrayDensityField.constant(0.9, width=16, height=16)


@pytest.fixture
def sampler():
    return ScatterSampler(1234)


@pytest.fixture
def sink():
    return MemoryRenderSink()


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    pkg = logging.getLogger("meadow")
    handlers = root.handlers[:]
    levels = (root.level, pkg.level)
    try:
        yield
    finally:
        for h in root.handlers:
            if h not in handlers:
                h.close()
        root.handlers[:] = handlers
        root.setLevel(levels[0])
        pkg.setLevel(levels[1])
