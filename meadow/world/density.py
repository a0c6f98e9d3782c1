from __future__ import annotations

from pathlib import Path
from typing import Protocol, Tuple

import numpy as np
import pygame

from meadow.errors import OutOfRangeSample
from meadow.world.noise import FBMValueNoise, NoiseConfig

RGBA = Tuple[float, float, float, float]


class DensityField(Protocol):
    def resolution(self) -> Tuple[int, int]: ...

    def sample(self, px: int, py: int) -> RGBA: ...


def _to_rgba(data: np.ndarray) -> np.ndarray:
    """Normalise a (H,W), (H,W,3) or (H,W,4) array into float64 (H,W,4) in [0,1]."""
    arr = np.asarray(data)
    if np.issubdtype(arr.dtype, np.integer):
        arr = arr.astype(np.float64) / 255.0
    else:
        arr = arr.astype(np.float64)

    if arr.ndim == 2:
        h, w = arr.shape
        out = np.zeros((h, w, 4), dtype=np.float64)
        out[..., 0] = arr
        out[..., 3] = 1.0
    elif arr.ndim == 3 and arr.shape[2] in (3, 4):
        h, w = arr.shape[:2]
        out = np.ones((h, w, 4), dtype=np.float64)
        out[..., : arr.shape[2]] = arr
    else:
        raise ValueError(f"density array must be (H,W), (H,W,3) or (H,W,4), got {arr.shape}")
    return np.clip(out, 0.0, 1.0)


class ArrayDensityField:
    """Density field backed by an in-memory pixel array.

    Row `py` runs along world Z, column `px` along world X. Pixels are
    read directly, so the backing store is always per-pixel readable.
    """

    def __init__(self, data: np.ndarray) -> None:
        self.pixels = _to_rgba(data)
        if self.pixels.shape[0] == 0 or self.pixels.shape[1] == 0:
            raise ValueError("density array must not be empty")

    @classmethod
    def constant(cls, value: float, width: int = 4, height: int = 4) -> "ArrayDensityField":
        return cls(np.full((int(height), int(width)), float(value), dtype=np.float64))

    @classmethod
    def from_image(cls, path: str | Path) -> "ArrayDensityField":
        """Decode an image file (png/bmp/tga...) with pygame."""
        surf = pygame.image.load(str(path))
        rgb = pygame.surfarray.array3d(surf)  # (W, H, 3)
        if surf.get_flags() & pygame.SRCALPHA:
            alpha = pygame.surfarray.array_alpha(surf)
            rgba = np.concatenate([rgb, alpha[..., None]], axis=2)
        else:
            rgba = rgb
        return cls(np.transpose(rgba, (1, 0, 2)).astype(np.uint8))

    def resolution(self) -> Tuple[int, int]:
        h, w = self.pixels.shape[:2]
        return int(w), int(h)

    def sample(self, px: int, py: int) -> RGBA:
        w, h = self.resolution()
        # negative indices would silently wrap in numpy
        if px < 0 or py < 0 or px >= w or py >= h:
            raise OutOfRangeSample(px, py, (w, h))
        r, g, b, a = self.pixels[py, px]
        return float(r), float(g), float(b), float(a)


class NoiseDensityField(ArrayDensityField):
    """Procedural density: value-noise fBm baked into a (res x res) array."""

    def __init__(self, seed: int, res: int = 256, *, cfg: NoiseConfig | None = None) -> None:
        self.seed = int(seed)
        noise = FBMValueNoise(self.seed, cfg or NoiseConfig())
        coords = np.arange(int(res), dtype=np.float32)
        grid_x, grid_z = np.meshgrid(coords, coords, indexing="xy")
        super().__init__(noise.grid(grid_x, grid_z))
