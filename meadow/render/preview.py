from __future__ import annotations

from pathlib import Path

import moderngl
import numpy as np
import pygame

from meadow.render.gl_sink import GLRenderSink
from meadow.util.math import look_at, perspective


def render_preview(
    sink: GLRenderSink,
    path: str | Path,
    *,
    eye: tuple[float, float, float],
    target: tuple[float, float, float],
    size: tuple[int, int] = (960, 540),
    fov_deg: float = 60.0,
) -> Path:
    """Render every attached batch of `sink` offscreen and save a PNG."""
    ctx = sink.ctx
    w, h = int(size[0]), int(size[1])
    fbo = ctx.simple_framebuffer((w, h))
    try:
        fbo.use()
        ctx.enable(moderngl.DEPTH_TEST)
        ctx.disable(moderngl.CULL_FACE)
        fbo.clear(0.70, 0.80, 0.92, 1.0, depth=1.0)

        view = look_at(
            np.array(eye, dtype=np.float32),
            np.array(target, dtype=np.float32),
            np.array([0.0, 1.0, 0.0], dtype=np.float32),
        )
        proj = perspective(fov_deg, w / h, 0.05, 2000.0)
        sink.draw(view, proj)

        data = fbo.read(components=3, alignment=1)
    finally:
        fbo.release()

    # GL origin is bottom-left
    surf = pygame.transform.flip(pygame.image.frombuffer(data, (w, h), "RGB"), False, True)
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    pygame.image.save(surf, str(out))
    return out
