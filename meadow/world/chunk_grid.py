from __future__ import annotations

import logging
import math
import threading
from typing import Dict, Iterator, List, Optional, Set, Tuple

from meadow.config import NEIGHBOR_OFFSETS
from meadow.errors import ConfigurationError
from meadow.world.chunk import Chunk, ChunkCoord
from meadow.world.indexing import chunk_origin, coordinate_of
from meadow.world.level import Bounds, ReferencePositionProvider

log = logging.getLogger(__name__)


class ChunkGrid:
    """Coordinate -> chunk mapping over a bounded level.

    Chunks are only ever added, by generate(). Callers sharing a grid across
    threads must hold `lock` around generate() and activation.
    """

    def __init__(self, *, world_offset: Tuple[float, float], chunk_size: float) -> None:
        if isinstance(chunk_size, bool) or not chunk_size > 0:
            raise ConfigurationError(f"chunk_size must be > 0, got {chunk_size!r}")
        self.world_offset = (float(world_offset[0]), float(world_offset[1]))
        self.chunk_size = chunk_size
        self.chunks: Dict[ChunkCoord, Chunk] = {}
        self.lock = threading.RLock()

    def __len__(self) -> int:
        return len(self.chunks)

    def __contains__(self, coord: object) -> bool:
        return coord in self.chunks

    def __iter__(self) -> Iterator[Chunk]:
        return iter(list(self.chunks.values()))

    def get(self, coord: ChunkCoord) -> Optional[Chunk]:
        return self.chunks.get(coord)

    def activated(self) -> List[Chunk]:
        return [ch for ch in self.chunks.values() if ch.activated]

    def pending(self) -> List[Chunk]:
        return [ch for ch in self.chunks.values() if not ch.activated]

    def generate(self, level_bounds: Bounds) -> List[ChunkCoord]:
        """Cover the level's horizontal extent with chunks; return the newly added coords.

        Idempotent; larger bounds only add chunks. Coordinates start at 0, so
        terrain lying on the negative side of world_offset is not covered.
        """
        chunks_x = math.ceil(float(level_bounds.size[0]) / self.chunk_size)
        chunks_z = math.ceil(float(level_bounds.size[2]) / self.chunk_size)
        added: List[ChunkCoord] = []
        with self.lock:
            for cx in range(chunks_x):
                for cz in range(chunks_z):
                    key = (cx, cz)
                    if key in self.chunks:
                        continue
                    self.chunks[key] = Chunk(cx=cx, cz=cz, origin=chunk_origin(key, self.world_offset, self.chunk_size))
                    added.append(key)
        if added:
            log.debug("generated %d chunks (%dx%d grid, total=%d)", len(added), chunks_x, chunks_z, len(self.chunks))
        return added

    def coordinate_of(self, world_pos: Tuple[float, float]) -> ChunkCoord:
        return coordinate_of(world_pos, self.world_offset, self.chunk_size)

    def proximity_coords(self, reference: Optional[Tuple[float, float]]) -> List[ChunkCoord]:
        """Target chunk first, then the non-negative neighbours in NEIGHBOR_OFFSETS order."""
        if reference is None:
            reference = (0.0, 0.0)
        tx, tz = self.coordinate_of(reference)
        out: List[ChunkCoord] = [(tx, tz)]
        for dx, dz in NEIGHBOR_OFFSETS:
            cx, cz = tx + dx, tz + dz
            # dropped, not clamped
            if cx >= 0 and cz >= 0:
                out.append((cx, cz))
        return out

    def proximity_set(self, provider: Optional[ReferencePositionProvider] = None) -> Set[ChunkCoord]:
        reference = provider.get_reference_position() if provider is not None else None
        return set(self.proximity_coords(reference))
