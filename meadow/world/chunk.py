from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional, Tuple, Union

import numpy as np

from meadow.config import HEIGHT_OFFSET
from meadow.util.math import translate_scale

ChunkCoord = Tuple[int, int]
Color = Tuple[float, float, float, float]


@dataclass(frozen=True)
class Unpopulated:
    pass


@dataclass(frozen=True)
class Activated:
    handle: Any  # whatever the render sink returned for the batch


ChunkState = Union[Unpopulated, Activated]


@dataclass(frozen=True)
class Placement:
    offset: Tuple[float, float]  # local (x, z) in [0, chunk_size)
    scale: float
    color: Color
    height: float = HEIGHT_OFFSET


@dataclass
class Chunk:
    cx: int
    cz: int
    origin: Tuple[float, float]  # world (x, z) of the chunk corner
    state: ChunkState = field(default_factory=Unpopulated)
    # slot-aligned: index i holds the draw for instance slot i, None if rejected
    placements: list[Optional[Placement]] = field(default_factory=list)

    @property
    def coord(self) -> ChunkCoord:
        return (self.cx, self.cz)

    @property
    def activated(self) -> bool:
        return isinstance(self.state, Activated)

    @property
    def handle(self) -> Any:
        return self.state.handle if isinstance(self.state, Activated) else None

    @property
    def name(self) -> str:
        return f"grass_{self.cx}_{self.cz}"


def placement_transform(p: Placement, origin: Tuple[float, float] = (0.0, 0.0)) -> np.ndarray:
    """translate(origin + offset, height) @ scale(p.scale), float32 (4, 4).

    With the default origin this is the transform relative to the chunk's
    batch, which itself sits at the chunk origin.
    """
    return translate_scale(
        float(origin[0]) + float(p.offset[0]),
        float(p.height),
        float(origin[1]) + float(p.offset[1]),
        float(p.scale),
    )
