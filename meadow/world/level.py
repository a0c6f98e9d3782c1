from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, Tuple

Vec3 = Tuple[float, float, float]


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned world-space box. Only size.x and size.z are horizontal."""
    origin: Vec3
    size: Vec3

    @property
    def width(self) -> float:
        return float(self.size[0])

    @property
    def depth(self) -> float:
        return float(self.size[2])


class LevelBoundsProvider(Protocol):
    def get_world_bounds(self) -> Bounds: ...

    def get_world_offset(self) -> Tuple[float, float]: ...


class ReferencePositionProvider(Protocol):
    def get_reference_position(self) -> Optional[Tuple[float, float]]: ...


@dataclass
class StaticLevel:
    """Level with fixed bounds; the offset is the horizontal position of the level object."""
    width: float
    depth: float
    height: float = 1.0
    offset: Tuple[float, float] = (0.0, 0.0)

    def get_world_bounds(self) -> Bounds:
        ox, oz = self.offset
        return Bounds(origin=(float(ox), 0.0, float(oz)), size=(float(self.width), float(self.height), float(self.depth)))

    def get_world_offset(self) -> Tuple[float, float]:
        return (float(self.offset[0]), float(self.offset[1]))


@dataclass
class FixedReference:
    position: Optional[Tuple[float, float]] = None

    def get_reference_position(self) -> Optional[Tuple[float, float]]:
        return self.position
