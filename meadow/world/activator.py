from __future__ import annotations

import logging
from typing import Any, Optional

from meadow.config import BATCH_LEVEL
from meadow.errors import ScatterError
from meadow.render.sink import RenderSink
from meadow.world.chunk import Activated, Chunk, placement_transform
from meadow.world.density import DensityField
from meadow.world.level import Bounds
from meadow.world.scatter import ScatterSampler

log = logging.getLogger(__name__)


class ChunkActivator:
    def __init__(
        self,
        sampler: ScatterSampler,
        *,
        chunk_size: float,
        density: Optional[DensityField],
        level_bounds: Bounds,
    ) -> None:
        self.sampler = sampler
        self.chunk_size = chunk_size
        self.density = density
        self.level_bounds = level_bounds

    def activate(self, chunk: Chunk, instance_count: int, material: Any, sink: RenderSink) -> bool:
        """Populate `chunk` once and hand its batch to `sink`.

        Returns True when the chunk was activated by this call. Already active
        chunks are left alone. A sampler failure is logged and leaves the
        chunk unpopulated so a later pass can retry it.
        """
        if chunk.activated:
            return False

        try:
            slots = self.sampler.sample(self.chunk_size, chunk.origin, instance_count, self.density, self.level_bounds)
        except ScatterError as e:
            log.warning("chunk %s not activated: %s", chunk.coord, e)
            return False

        # rejected draws keep the batch default for slot i
        writes = [
            (i, placement_transform(p), p.color)
            for i, p in enumerate(slots[:instance_count])
            if p is not None
        ]

        ox, oz = chunk.origin
        handle = sink.create_instance_batch(chunk.name, (ox, BATCH_LEVEL, oz), material, instance_count)
        try:
            for i, transform, color in writes:
                sink.set_instance(handle, i, transform, color)
            sink.attach_to_scene(handle)
        except Exception:
            # don't leave a half-filled batch behind; the chunk stays unpopulated
            release = getattr(sink, "release_batch", None)
            if release is not None:
                release(handle)
            raise

        chunk.placements = list(slots)
        chunk.state = Activated(handle)

        accepted = sum(1 for p in slots if p is not None)
        log.debug("activated chunk %s: %d/%d placements", chunk.coord, accepted, instance_count)
        return True
