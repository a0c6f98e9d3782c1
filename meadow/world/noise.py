from __future__ import annotations

from dataclasses import dataclass
import numpy as np


@dataclass(frozen=True)
class NoiseConfig:
    octaves: int = 4
    lacunarity: float = 2.0
    gain: float = 0.5
    base_freq: float = 0.02


class FastValueNoise2D:
    """Fast 2D value noise with fully vectorized numpy implementation.

    Uses an integer hash on lattice points and smooth interpolation.
    Deterministic for a given seed.
    """

    def __init__(self, seed: int) -> None:
        self.seed = int(seed)

    @staticmethod
    def _fade(t: np.ndarray) -> np.ndarray:
        # smootherstep
        return t * t * t * (t * (t * 6 - 15) + 10)

    def _hash(self, xi: np.ndarray, zi: np.ndarray) -> np.ndarray:
        x = (xi.astype(np.uint32) * np.uint32(374761393)) ^ (zi.astype(np.uint32) * np.uint32(668265263)) ^ np.uint32(self.seed & 0xFFFFFFFF)
        x ^= (x >> np.uint32(13))
        x *= np.uint32(1274126177)
        x ^= (x >> np.uint32(16))
        return (x.astype(np.float32) / np.float32(2**32))

    def noise(self, x: np.ndarray, z: np.ndarray) -> np.ndarray:
        xi0 = np.floor(x).astype(np.int32)
        zi0 = np.floor(z).astype(np.int32)
        xi1 = xi0 + 1
        zi1 = zi0 + 1

        u = self._fade(x - xi0.astype(np.float32))
        v = self._fade(z - zi0.astype(np.float32))

        a = self._hash(xi0, zi0)
        b = self._hash(xi1, zi0)
        c = self._hash(xi0, zi1)
        d = self._hash(xi1, zi1)

        ab = a + (b - a) * u
        cd = c + (d - c) * u
        return ab + (cd - ab) * v  # [0,1)


class FBMValueNoise:
    """Fractal sum of value noise, normalised back into [0, 1]."""

    def __init__(self, seed: int, cfg: NoiseConfig | None = None) -> None:
        self.seed = int(seed)
        self.cfg = cfg or NoiseConfig()
        self.base = FastValueNoise2D(seed)

    def grid(self, x: np.ndarray, z: np.ndarray) -> np.ndarray:
        freq = self.cfg.base_freq
        amp = 1.0
        total = np.zeros_like(x, dtype=np.float32)
        norm = 0.0
        for _ in range(self.cfg.octaves):
            total += self.base.noise(x * freq, z * freq) * np.float32(amp)
            norm += amp
            freq *= self.cfg.lacunarity
            amp *= self.cfg.gain
        return np.clip(total / np.float32(max(norm, 1e-9)), 0.0, 1.0).astype(np.float32)
