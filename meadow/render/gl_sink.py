from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Sequence

import moderngl
import numpy as np

from meadow.render.grass import INSTANCE_FLOATS, build_blade_mesh, grass_shader_sources, pack_instance
from meadow.render.sink import Vec3, default_slots

log = logging.getLogger(__name__)


@dataclass
class GLBatch:
    name: str
    position: Vec3
    material: Any
    capacity: int
    instance_vbo: moderngl.Buffer
    vao: moderngl.VertexArray | None = None


class GLRenderSink:
    """RenderSink drawing every batch as instanced grass blades on a moderngl context.

    `material` is an rgb tint multiplied into every instance colour.
    """

    def __init__(self, ctx: moderngl.Context) -> None:
        self.ctx = ctx
        glsl = 330 if ctx.version_code >= 330 else 150
        vert, frag = grass_shader_sources(glsl)
        self.prog = ctx.program(vertex_shader=vert, fragment_shader=frag)

        vbo, ibo = build_blade_mesh()
        self._mesh_vbo = ctx.buffer(vbo.tobytes())
        self._mesh_ibo = ctx.buffer(ibo.tobytes())

        self.batches: List[GLBatch] = []
        self.scene: List[GLBatch] = []

    def create_instance_batch(self, name: str, position: Vec3, material: Any, capacity: int) -> int:
        transforms, colors = default_slots(capacity)
        data = np.zeros((int(capacity), INSTANCE_FLOATS), dtype=np.float32)
        for i in range(int(capacity)):
            data[i] = pack_instance(transforms[i], colors[i])
        # zero-sized buffers are rejected by moderngl
        vbo = self.ctx.buffer(data.tobytes() if capacity > 0 else b"\x00" * 4 * INSTANCE_FLOATS)
        self.batches.append(
            GLBatch(
                name=str(name),
                position=(float(position[0]), float(position[1]), float(position[2])),
                material=material,
                capacity=int(capacity),
                instance_vbo=vbo,
            )
        )
        return len(self.batches) - 1

    def set_instance(self, handle: int, index: int, transform: np.ndarray, color: Sequence[float]) -> None:
        batch = self.batches[handle]
        if not 0 <= index < batch.capacity:
            raise IndexError(f"instance {index} outside batch {batch.name} (capacity {batch.capacity})")
        tint = np.asarray(batch.material, dtype=np.float32).reshape(-1)[:3]
        c = np.asarray(color, dtype=np.float32).copy()
        c[:3] *= tint
        batch.instance_vbo.write(pack_instance(transform, c).tobytes(), offset=index * INSTANCE_FLOATS * 4)

    def attach_to_scene(self, handle: int) -> None:
        batch = self.batches[handle]
        if batch.vao is not None:
            return
        batch.vao = self.ctx.vertex_array(
            self.prog,
            [
                (self._mesh_vbo, "3f 3f", "in_pos", "in_norm"),
                (batch.instance_vbo, "16f 4f/i", "in_i_model", "in_i_color"),
            ],
            self._mesh_ibo,
        )
        self.scene.append(batch)

    def release_batch(self, handle: int) -> None:
        """Drop one batch from the scene and free its GL objects; the handle stays reserved."""
        batch = self.batches[handle]
        if batch in self.scene:
            self.scene.remove(batch)
        if batch.vao is not None:
            batch.vao.release()
            batch.vao = None
        batch.instance_vbo.release()

    def draw(self, view: np.ndarray, proj: np.ndarray, light_dir=(0.35, 0.9, 0.2)) -> None:
        self.prog["u_view"].write(view.astype(np.float32).tobytes())
        self.prog["u_proj"].write(proj.astype(np.float32).tobytes())
        self.prog["u_light_dir"].value = tuple(float(v) for v in light_dir)
        for batch in self.scene:
            if batch.capacity == 0:
                continue
            self.prog["u_batch_pos"].value = batch.position
            batch.vao.render(instances=batch.capacity)

    def release(self) -> None:
        for batch in self.batches:
            try:
                if batch.vao is not None:
                    batch.vao.release()
                batch.instance_vbo.release()
            except Exception:
                log.debug("failed to release batch %s", batch.name, exc_info=True)
        for obj in [self._mesh_vbo, self._mesh_ibo, self.prog]:
            try:
                obj.release()
            except Exception:
                log.debug("failed to release %r", obj, exc_info=True)
        self.batches.clear()
        self.scene.clear()
