from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Protocol, Sequence, Tuple

import numpy as np

Vec3 = Tuple[float, float, float]

DEFAULT_COLOR = (1.0, 1.0, 1.0, 1.0)


class RenderSink(Protocol):
    def create_instance_batch(self, name: str, position: Vec3, material: Any, capacity: int) -> Any: ...

    def set_instance(self, handle: Any, index: int, transform: np.ndarray, color: Sequence[float]) -> None: ...

    def attach_to_scene(self, handle: Any) -> None: ...

    # optional: release_batch(handle), used to drop a batch whose setup failed


def default_slots(capacity: int) -> tuple[np.ndarray, np.ndarray]:
    """Identity transforms and white colours for a fresh batch."""
    transforms = np.repeat(np.eye(4, dtype=np.float32)[None, :, :], int(capacity), axis=0)
    colors = np.tile(np.array(DEFAULT_COLOR, dtype=np.float32), (int(capacity), 1))
    return transforms, colors


@dataclass
class InstanceBatch:
    name: str
    position: Vec3
    material: Any
    transforms: np.ndarray  # (capacity, 4, 4) float32
    colors: np.ndarray  # (capacity, 4) float32
    written: np.ndarray  # (capacity,) bool, True where set_instance() was called
    attached: bool = False
    released: bool = False

    @property
    def capacity(self) -> int:
        return int(self.transforms.shape[0])


@dataclass
class MemoryRenderSink:
    """RenderSink keeping every batch as numpy arrays. Handles are batch indices."""
    batches: List[InstanceBatch] = field(default_factory=list)
    by_name: Dict[str, int] = field(default_factory=dict)

    def create_instance_batch(self, name: str, position: Vec3, material: Any, capacity: int) -> int:
        transforms, colors = default_slots(capacity)
        batch = InstanceBatch(
            name=str(name),
            position=(float(position[0]), float(position[1]), float(position[2])),
            material=material,
            transforms=transforms,
            colors=colors,
            written=np.zeros(int(capacity), dtype=bool),
        )
        self.batches.append(batch)
        handle = len(self.batches) - 1
        self.by_name[batch.name] = handle
        return handle

    def set_instance(self, handle: int, index: int, transform: np.ndarray, color: Sequence[float]) -> None:
        batch = self.batches[handle]
        batch.transforms[index] = np.asarray(transform, dtype=np.float32).reshape(4, 4)
        batch.colors[index] = np.asarray(color, dtype=np.float32)
        batch.written[index] = True

    def attach_to_scene(self, handle: int) -> None:
        self.batches[handle].attached = True

    def release_batch(self, handle: int) -> None:
        batch = self.batches[handle]
        batch.released = True
        batch.attached = False
        if self.by_name.get(batch.name) == handle:
            del self.by_name[batch.name]

    def attached(self) -> List[InstanceBatch]:
        return [b for b in self.batches if b.attached]

    def live(self) -> List[InstanceBatch]:
        return [b for b in self.batches if not b.released]
