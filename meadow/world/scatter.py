from __future__ import annotations

import math
from typing import Optional, Sequence, Tuple

import numpy as np

from meadow.config import HEIGHT_OFFSET, REJECTION_THRESHOLD, SCALE_RANGE
from meadow.errors import DegenerateLevelBounds, MissingDensityField, OutOfRangeSample, ScatterError
from meadow.util.math import lerp
from meadow.world.chunk import Placement
from meadow.world.density import DensityField
from meadow.world.level import Bounds


class ScatterSampler:
    """Rejection sampler placing instances inside one chunk.

    Every requested slot gets exactly one draw. A draw landing on a pixel whose
    red channel exceeds REJECTION_THRESHOLD is discarded without retry and its
    slot stays None, so slot i always belongs to request i.

    Pixel lookups are not clamped: a world position that maps outside the
    density field raises OutOfRangeSample.
    """

    def __init__(self, seed: int | None = None, *, rng: np.random.Generator | None = None) -> None:
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    @staticmethod
    def _read(fn, *args):
        # any density backend failure is a per-chunk sampling failure
        try:
            return fn(*args)
        except ScatterError:
            raise
        except Exception as e:
            raise ScatterError(f"density field read failed: {e!r}") from e

    def sample(
        self,
        chunk_size: float,
        origin: Tuple[float, float],
        count: int,
        density: Optional[DensityField],
        level_bounds: Bounds,
    ) -> list[Optional[Placement]]:
        if density is None:
            raise MissingDensityField("no density field to sample placements against")
        size_x = float(level_bounds.size[0])
        size_z = float(level_bounds.size[2])
        if not (math.isfinite(size_x) and math.isfinite(size_z)) or size_x == 0.0 or size_z == 0.0:
            raise DegenerateLevelBounds(f"level bounds have no usable horizontal extent: {level_bounds.size}")

        field_w, field_h = self._read(density.resolution)
        ox, oz = float(origin[0]), float(origin[1])
        out: list[Optional[Placement]] = []

        for _ in range(int(count)):
            x = float(self.rng.uniform(0.0, chunk_size))
            y = float(self.rng.uniform(0.0, chunk_size))

            fx = (ox + x) / size_x * field_w
            fy = (oz + y) / size_z * field_h
            if not (math.isfinite(fx) and math.isfinite(fy)):
                raise ScatterError(f"non-finite sample position ({ox + x}, {oz + y})")
            px = int(math.floor(fx))
            py = int(math.floor(fy))
            if px < 0 or py < 0 or px >= field_w or py >= field_h:
                raise OutOfRangeSample(px, py, (field_w, field_h))

            if self._read(density.sample, px, py)[0] > REJECTION_THRESHOLD:
                out.append(None)
                continue

            scale = float(self.rng.uniform(SCALE_RANGE[0], SCALE_RANGE[1]))
            t = float(self.rng.random())
            out.append(
                Placement(
                    offset=(x, y),
                    scale=scale,
                    color=(lerp(0.0, 1.0, t), 1.0, 0.0, 1.0),
                    height=HEIGHT_OFFSET,
                )
            )
        return out


def compact(slots: Sequence[Optional[Placement]]) -> list[Placement]:
    """Accepted placements only, in slot order."""
    return [p for p in slots if p is not None]
