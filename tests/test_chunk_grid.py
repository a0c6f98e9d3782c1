import math

import pytest

from meadow.errors import ConfigurationError
from meadow.world.chunk import Activated
from meadow.world.chunk_grid import ChunkGrid
from meadow.world.level import Bounds, FixedReference


def _bounds(w, d):
    return Bounds(origin=(0.0, 0.0, 0.0), size=(w, 1.0, d))


@pytest.mark.parametrize(
    "w, d, size",
    [(100.0, 100.0, 50), (101.0, 100.0, 50), (10.0, 10.0, 50), (0.0, 100.0, 50), (333.0, 77.0, 25), (7.5, 3.2, 1.5)],
)
def test_generate_covers_bounds(w, d, size):
    grid = ChunkGrid(world_offset=(0.0, 0.0), chunk_size=size)
    grid.generate(_bounds(w, d))

    nx, nz = math.ceil(w / size), math.ceil(d / size)
    assert len(grid) == nx * nz
    assert set(grid.chunks) == {(cx, cz) for cx in range(nx) for cz in range(nz)}
    assert all(not ch.activated and ch.placements == [] for ch in grid)


def test_generate_sets_origins_from_offset():
    grid = ChunkGrid(world_offset=(10.0, 20.0), chunk_size=50)
    grid.generate(_bounds(200.0, 200.0))
    assert grid.get((1, 2)).origin == (60.0, 120.0)
    assert grid.get((0, 0)).origin == (10.0, 20.0)


def test_generate_is_idempotent():
    grid = ChunkGrid(world_offset=(0.0, 0.0), chunk_size=50)
    first = grid.generate(_bounds(150.0, 100.0))
    before = dict(grid.chunks)
    grid.get((0, 0)).state = Activated("handle")

    assert len(first) == 6
    assert grid.generate(_bounds(150.0, 100.0)) == []
    assert grid.chunks.keys() == before.keys()
    assert all(grid.chunks[k] is before[k] for k in before)
    assert grid.get((0, 0)).activated


def test_generate_with_larger_bounds_only_adds():
    grid = ChunkGrid(world_offset=(0.0, 0.0), chunk_size=50)
    grid.generate(_bounds(100.0, 100.0))
    old = dict(grid.chunks)

    added = grid.generate(_bounds(150.0, 200.0))
    assert len(grid) == 3 * 4
    assert set(added) == set(grid.chunks) - set(old)
    assert all(grid.chunks[k] is old[k] for k in old)

    # smaller bounds never remove anything
    assert grid.generate(_bounds(50.0, 50.0)) == []
    assert len(grid) == 12


def test_chunk_size_must_be_positive():
    with pytest.raises(ConfigurationError):
        ChunkGrid(world_offset=(0.0, 0.0), chunk_size=0)
    with pytest.raises(ConfigurationError):
        ChunkGrid(world_offset=(0.0, 0.0), chunk_size=-5)


def test_proximity_set_at_origin_drops_negative_neighbours():
    grid = ChunkGrid(world_offset=(0.0, 0.0), chunk_size=50)
    expected = {(0, 0), (1, 0), (1, 1), (0, 1)}
    assert grid.proximity_set(FixedReference((0.0, 0.0))) == expected
    # no provider, or a provider without a position, means (0, 0)
    assert grid.proximity_set() == expected
    assert grid.proximity_set(FixedReference(None)) == expected


def test_proximity_coords_order():
    grid = ChunkGrid(world_offset=(0.0, 0.0), chunk_size=50)
    assert grid.proximity_coords((75.0, 75.0)) == [
        (2, 2), (3, 1), (3, 2), (3, 3), (2, 1), (2, 3), (1, 3), (1, 2), (1, 1),
    ]


def test_proximity_set_on_edge():
    grid = ChunkGrid(world_offset=(0.0, 0.0), chunk_size=50)
    near = grid.proximity_set(FixedReference((0.0, 125.0)))
    assert near == {(0, 3), (1, 2), (1, 3), (1, 4), (0, 2), (0, 4)}


def test_proximity_set_keeps_negative_target():
    grid = ChunkGrid(world_offset=(0.0, 0.0), chunk_size=50)
    near = grid.proximity_set(FixedReference((-60.0, 0.0)))
    assert near == {(-1, 0), (0, 0), (0, 1)}


def test_proximity_set_ignores_generated_area():
    grid = ChunkGrid(world_offset=(0.0, 0.0), chunk_size=50)
    near = grid.proximity_set(FixedReference((1000.0, 1000.0)))
    assert (20, 20) in near
    assert len(near) == 9
    assert len(grid) == 0


def test_accessors():
    grid = ChunkGrid(world_offset=(0.0, 0.0), chunk_size=50)
    grid.generate(_bounds(100.0, 50.0))
    grid.get((1, 0)).state = Activated(3)

    assert (1, 0) in grid
    assert (5, 5) not in grid
    assert grid.get((5, 5)) is None
    assert [c.coord for c in grid.activated()] == [(1, 0)]
    assert [c.coord for c in grid.pending()] == [(0, 0)]
    assert grid.get((1, 0)).handle == 3
