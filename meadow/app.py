from __future__ import annotations

import logging
from pathlib import Path

import moderngl
import numpy as np

from meadow.config import DEFAULT_PREVIEW_SIZE, GrassSettings
from meadow.render.gl_sink import GLRenderSink
from meadow.render.preview import render_preview
from meadow.render.sink import MemoryRenderSink
from meadow.world.density import ArrayDensityField, DensityField, NoiseDensityField
from meadow.world.grass_field import GrassField
from meadow.world.level import StaticLevel
from meadow.world.scatter import ScatterSampler
from meadow.world.walker import PathWalker

log = logging.getLogger(__name__)

GRASS_TINT = (1.0, 1.0, 1.0)


def load_density(*, image: str | None, seed: int, res: int) -> DensityField:
    if image:
        field = ArrayDensityField.from_image(image)
        log.info("density from %s (%dx%d)", image, *field.resolution())
        return field
    log.info("density from value noise (seed=%d res=%d)", seed, res)
    return NoiseDensityField(seed, res)


def run_walk(
    *,
    seed: int,
    level: StaticLevel,
    density: DensityField,
    settings: GrassSettings,
    speed: float,
    steps: int,
    out: str | None = None,
    preview: str | None = None,
    preview_size: tuple[int, int] = DEFAULT_PREVIEW_SIZE,
) -> GrassField | None:
    """Walk a reference point across the level, one update pass per step.

    Returns the grass field, or None when it was disabled during setup.
    """
    ctx = None
    sink = MemoryRenderSink()
    if preview:
        try:
            ctx = moderngl.create_standalone_context()
        except Exception as e:
            raise RuntimeError("Failed to create ModernGL context (need OpenGL 3.3)") from e
        sink = GLRenderSink(ctx)

    try:
        field = GrassField(
            settings,
            level=level,
            density=density,
            material=GRASS_TINT,
            sink=sink,
            sampler=ScatterSampler(seed),
        )
        if not field.setup():
            return None

        ox, oz = level.get_world_offset()
        walker = PathWalker(speed, x=level.width * 0.5 - ox, z=-oz, limit_z=level.depth - oz)
        for step in range(int(steps)):
            report = field.update(walker)
            if report is not None and (report.activated or report.failed):
                log.info(
                    "step %d ref=(%.1f, %.1f): activated=%s failed=%s",
                    step, walker.x, walker.z, report.activated, report.failed,
                )
            walker.update(1.0)

        grid = field.grid
        log.info("chunks: total=%d activated=%d pending=%d", len(grid), len(grid.activated()), len(grid.pending()))

        if out:
            arrays = field.export_arrays()
            Path(out).parent.mkdir(parents=True, exist_ok=True)
            np.savez(out, **arrays)
            log.info("wrote %d placements (%d slots) to %s", int(arrays["mask"].sum()), arrays["mask"].size, out)

        if preview:
            cx, cz = walker.x, walker.z
            path = render_preview(
                sink,
                preview,
                eye=(cx, 6.0, cz - 12.0),
                target=(cx, 0.0, cz + 20.0),
                size=preview_size,
            )
            log.info("preview saved to %s", path)
        return field
    finally:
        if ctx is not None:
            sink.release()
            ctx.release()
