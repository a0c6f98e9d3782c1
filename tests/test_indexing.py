import pytest

from meadow.world.indexing import chunk_origin, coordinate_of


@pytest.mark.parametrize(
    "pos, offset, expected",
    [
        ((0.0, 0.0), (0.0, 0.0), (0, 0)),
        ((10.0, 10.0), (0.0, 0.0), (1, 1)),
        ((50.0, 50.0), (0.0, 0.0), (1, 1)),
        ((50.1, 0.0), (0.0, 0.0), (2, 0)),
        ((45.0, 0.0), (5.0, 5.0), (1, 1)),
        ((-60.0, 0.0), (0.0, 0.0), (-1, 0)),
    ],
)
def test_coordinate_of_uses_ceiling_division(pos, offset, expected):
    assert coordinate_of(pos, offset, 50) == expected


def test_coordinate_of_axes_are_independent():
    assert coordinate_of((120.0, 1.0), (0.0, 0.0), 50) == (3, 1)


def test_chunk_origin_adds_world_offset():
    assert chunk_origin((2, 3), (10.0, 20.0), 50) == (110.0, 170.0)
    assert chunk_origin((0, 0), (0.0, 0.0), 50) == (0.0, 0.0)
