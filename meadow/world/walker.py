from __future__ import annotations

from typing import Tuple


class PathWalker:
    """Reference point moving along +Z with constant speed.

    Stops at `limit_z` when given, so a walk never leaves the level.
    """

    def __init__(self, speed: float, *, x: float = 0.0, z: float = 0.0, limit_z: float | None = None) -> None:
        self.speed = float(speed)
        self.x = float(x)
        self.z = float(z)
        self.limit_z = None if limit_z is None else float(limit_z)

    def update(self, dt: float) -> None:
        self.z += self.speed * dt
        if self.limit_z is not None:
            self.z = min(self.z, self.limit_z) if self.speed >= 0 else max(self.z, self.limit_z)

    def get_reference_position(self) -> Tuple[float, float]:
        return (self.x, self.z)
