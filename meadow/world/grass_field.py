from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

import numpy as np

from meadow.config import GrassSettings
from meadow.errors import ConfigurationError
from meadow.render.sink import RenderSink
from meadow.world.activator import ChunkActivator
from meadow.world.chunk import ChunkCoord, placement_transform
from meadow.world.chunk_grid import ChunkGrid
from meadow.world.density import DensityField
from meadow.world.level import LevelBoundsProvider, ReferencePositionProvider
from meadow.world.scatter import ScatterSampler

log = logging.getLogger(__name__)


@dataclass
class PassReport:
    generated: int
    near: List[ChunkCoord]
    activated: List[ChunkCoord]
    failed: List[ChunkCoord]


class GrassField:
    """Grass subsystem: chunk grid + lazy activation around a reference point.

    setup() validates collaborators and settings; on ConfigurationError the
    subsystem logs, disables itself and every update() becomes a no-op.
    """

    def __init__(
        self,
        settings: GrassSettings,
        *,
        level: Optional[LevelBoundsProvider],
        density: Optional[DensityField],
        material: Any,
        sink: Optional[RenderSink],
        sampler: Optional[ScatterSampler] = None,
    ) -> None:
        self.settings = settings
        self.level = level
        self.density = density
        self.material = material
        self.sink = sink
        self.sampler = sampler or ScatterSampler()

        self.enabled = False
        self.grid: Optional[ChunkGrid] = None

    def setup(self) -> bool:
        try:
            self._setup()
        except ConfigurationError as e:
            log.error("grass disabled: %s", e)
            self.enabled = False
            self.grid = None
            return False
        self.enabled = True
        return True

    def _setup(self) -> None:
        self.settings.validate()
        if self.level is None:
            raise ConfigurationError("no level bounds provider")
        if self.density is None:
            raise ConfigurationError("no density field")
        if self.material is None:
            raise ConfigurationError("no grass material")
        if self.sink is None:
            raise ConfigurationError("no render sink")
        self.grid = ChunkGrid(world_offset=self.level.get_world_offset(), chunk_size=self.settings.chunk_size)

    def update(self, reference: Optional[ReferencePositionProvider] = None) -> Optional[PassReport]:
        """One synchronous pass: generate, find nearby chunks, activate new ones."""
        if not self.enabled or self.grid is None:
            return None

        bounds = self.level.get_world_bounds()
        activator = ChunkActivator(
            self.sampler,
            chunk_size=self.settings.chunk_size,
            density=self.density,
            level_bounds=bounds,
        )

        with self.grid.lock:
            added = self.grid.generate(bounds)
            reference_pos = reference.get_reference_position() if reference is not None else None
            near = self.grid.proximity_coords(reference_pos)

            activated: List[ChunkCoord] = []
            failed: List[ChunkCoord] = []
            for key in near:
                chunk = self.grid.get(key)
                # proximity may reach past the generated area
                if chunk is None or chunk.activated:
                    continue
                if activator.activate(chunk, self.settings.instance_count, self.material, self.sink):
                    activated.append(key)
                else:
                    failed.append(key)

        log.debug(
            "pass: ref=%s new_chunks=%d near=%d activated=%d failed=%d",
            reference_pos, len(added), len(near), len(activated), len(failed),
        )
        return PassReport(generated=len(added), near=near, activated=activated, failed=failed)

    def export_arrays(self) -> dict[str, np.ndarray]:
        """World-space placements of every activated chunk as flat arrays.

        Keys: coords (N,2) int32, transforms (N,4,4), colors (N,4), mask (N,)
        where mask is False for rejected slots.
        """
        coords: list[ChunkCoord] = []
        transforms: list[np.ndarray] = []
        colors: list[tuple] = []
        mask: list[bool] = []
        if self.grid is not None:
            for chunk in sorted(self.grid.activated(), key=lambda c: c.coord):
                for p in chunk.placements:
                    coords.append(chunk.coord)
                    if p is None:
                        transforms.append(np.eye(4, dtype=np.float32))
                        colors.append((1.0, 1.0, 1.0, 1.0))
                        mask.append(False)
                    else:
                        transforms.append(placement_transform(p, chunk.origin))
                        colors.append(p.color)
                        mask.append(True)
        return {
            "coords": np.array(coords, dtype=np.int32).reshape(-1, 2),
            "transforms": np.array(transforms, dtype=np.float32).reshape(-1, 4, 4),
            "colors": np.array(colors, dtype=np.float32).reshape(-1, 4),
            "mask": np.array(mask, dtype=bool),
        }
