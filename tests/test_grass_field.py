import logging

import numpy as np
import pytest

from meadow.config import GrassSettings
from meadow.world.density import ArrayDensityField
from meadow.world.grass_field import GrassField
from meadow.world.level import FixedReference, StaticLevel
from meadow.world.scatter import ScatterSampler
from meadow.world.walker import PathWalker


def _field(level, density, sink, **kw):
    settings = kw.pop("settings", GrassSettings(chunk_size=50, instance_count=8))
    return GrassField(settings, level=level, density=density, material="grass", sink=sink, sampler=ScatterSampler(5), **kw)


def test_first_pass_activates_chunks_near_origin(level, empty_density, sink):
    field = _field(level, empty_density, sink)
    assert field.setup() is True

    report = field.update()
    assert report.generated == 16
    assert set(report.activated) == {(0, 0), (1, 0), (1, 1), (0, 1)}
    assert report.failed == []
    assert len(sink.batches) == 4
    assert all(b.attached for b in sink.batches)


def test_second_pass_is_a_no_op(level, empty_density, sink):
    field = _field(level, empty_density, sink)
    field.setup()
    field.update()
    report = field.update(FixedReference((0.0, 0.0)))
    assert report.generated == 0
    assert report.activated == []
    assert len(sink.batches) == 4


def test_moving_reference_activates_more(level, empty_density, sink):
    field = _field(level, empty_density, sink)
    field.setup()
    field.update()
    report = field.update(FixedReference((75.0, 75.0)))
    # (2,2) neighbourhood minus what the first pass already populated
    assert set(report.activated) == {(2, 2), (3, 1), (3, 2), (3, 3), (2, 1), (2, 3), (1, 3), (1, 2)}
    assert len(field.grid.activated()) == 12


def test_failed_chunks_do_not_stop_the_pass(empty_density, sink, caplog):
    # 3 chunk columns but the level (and field) stops at x=120
    level = StaticLevel(width=120.0, depth=100.0)
    field = _field(level, empty_density, sink, settings=GrassSettings(chunk_size=50, instance_count=100))
    field.setup()

    with caplog.at_level(logging.WARNING):
        report = field.update(FixedReference((75.0, 25.0)))

    assert report.failed == [(2, 1), (2, 0)]
    assert report.activated == [(1, 1), (1, 0)]
    assert not field.grid.get((2, 1)).activated
    assert "not activated" in caplog.text

    # still pending, retried next pass
    again = field.update(FixedReference((75.0, 25.0)))
    assert again.failed == [(2, 1), (2, 0)]
    assert len(sink.batches) == 2


def test_level_growth_adds_chunks(empty_density, sink):
    level = StaticLevel(width=100.0, depth=100.0)
    field = _field(level, empty_density, sink)
    field.setup()
    field.update()
    level.width = 200.0
    assert field.update().generated == 4
    assert len(field.grid) == 8


@pytest.mark.parametrize(
    "kwargs, settings",
    [
        ({"level": None}, GrassSettings()),
        ({"density": None}, GrassSettings()),
        ({"material": None}, GrassSettings()),
        ({"sink": None}, GrassSettings()),
        ({}, GrassSettings(chunk_size=0)),
        ({}, GrassSettings(instance_count=-1)),
    ],
)
def test_configuration_errors_disable_the_subsystem(level, empty_density, sink, caplog, kwargs, settings):
    args = {"level": level, "density": empty_density, "material": "grass", "sink": sink}
    args.update(kwargs)
    field = GrassField(settings, **args)

    with caplog.at_level(logging.ERROR):
        assert field.setup() is False

    assert field.enabled is False
    assert field.update(FixedReference((10.0, 10.0))) is None
    assert sink.batches == []
    assert "grass disabled" in caplog.text


def test_export_arrays(level, sink):
    density = ArrayDensityField(np.array([[1.0, 0.0], [0.0, 0.0]]))
    field = _field(level, density, sink)
    field.setup()
    field.update()

    arrays = field.export_arrays()
    n = 4 * 8
    assert arrays["coords"].shape == (n, 2)
    assert arrays["transforms"].shape == (n, 4, 4)
    assert arrays["colors"].shape == (n, 4)
    assert arrays["mask"].shape == (n,)

    accepted = sum(1 for ch in field.grid.activated() for p in ch.placements if p is not None)
    assert int(arrays["mask"].sum()) == accepted
    # the (0,0)-(100,100) quarter of the level is fully dense
    assert not arrays["mask"].any()

    rows = np.flatnonzero(arrays["coords"][:, 0] == 1)
    assert rows.size == 16
    assert np.array_equal(arrays["transforms"][rows[0]], np.eye(4, dtype=np.float32))
    assert arrays["colors"][rows[0]].tolist() == [1.0, 1.0, 1.0, 1.0]


def test_export_arrays_world_positions(level, empty_density, sink):
    field = _field(level, empty_density, sink)
    field.setup()
    field.update(FixedReference((75.0, 75.0)))

    arrays = field.export_arrays()
    assert arrays["mask"].all()
    for (cx, cz), m in zip(arrays["coords"], arrays["transforms"]):
        assert cx * 50.0 <= m[0, 3] < (cx + 1) * 50.0
        assert cz * 50.0 <= m[2, 3] < (cz + 1) * 50.0
        assert m[1, 3] == pytest.approx(0.1)


def test_walker_drives_updates(level, empty_density, sink):
    field = _field(level, empty_density, sink)
    field.setup()
    walker = PathWalker(50.0, x=100.0, limit_z=200.0)
    for _ in range(6):
        field.update(walker)
        walker.update(1.0)
    assert walker.get_reference_position() == (100.0, 200.0)
    assert {(2, z) for z in range(4)} <= {c.coord for c in field.grid.activated()}


class PatchyField(ArrayDensityField):
    """Empty field whose right half (x >= 100 on a 200 wide level) can't be read."""

    def sample(self, px, py):
        if px >= 8:
            raise OSError("tile not loaded")
        return super().sample(px, py)


def test_density_read_failure_only_skips_that_chunk(level, sink, caplog):
    field = _field(level, PatchyField(np.zeros((16, 16))), sink)
    field.setup()

    with caplog.at_level(logging.WARNING):
        report = field.update(FixedReference((75.0, 25.0)))

    assert report.failed == [(2, 1), (3, 0), (3, 1), (3, 2), (2, 0), (2, 2)]
    assert report.activated == [(1, 2), (1, 1), (1, 0)]
    assert len(sink.batches) == 3
    assert "tile not loaded" in caplog.text
