from __future__ import annotations

import math
from typing import Tuple

from meadow.world.chunk import ChunkCoord


def coordinate_of(world_pos: Tuple[float, float], world_offset: Tuple[float, float], chunk_size: float) -> ChunkCoord:
    """Chunk containing a world (x, z) position.

    Uses ceiling division, unlike the 0-based floor layout used by
    ChunkGrid.generate(). A point strictly inside chunk (0, 0) therefore maps
    to (1, 1); proximity sets depend on this exact behaviour.
    """
    cx = math.ceil((float(world_pos[0]) + float(world_offset[0])) / chunk_size)
    cz = math.ceil((float(world_pos[1]) + float(world_offset[1])) / chunk_size)
    return int(cx), int(cz)


def chunk_origin(coord: ChunkCoord, world_offset: Tuple[float, float], chunk_size: float) -> Tuple[float, float]:
    cx, cz = coord
    return (cx * chunk_size + float(world_offset[0]), cz * chunk_size + float(world_offset[1]))
