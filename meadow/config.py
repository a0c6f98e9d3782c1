from __future__ import annotations

from dataclasses import dataclass

from meadow.errors import ConfigurationError

# App
APP_VERSION = "0.3.1"

# Chunks
DEFAULT_CHUNK_SIZE = 50
DEFAULT_INSTANCE_COUNT = 100

# Scatter (fixed)
REJECTION_THRESHOLD = 0.8  # red channel above this excludes a placement
SCALE_RANGE = (0.8, 1.5)
HEIGHT_OFFSET = 0.1
BATCH_LEVEL = 0.0  # vertical level of every instance batch

# 8 neighbours around the target chunk; order matters for proximity_coords()
NEIGHBOR_OFFSETS = (
    (1, -1),
    (1, 0),
    (1, 1),
    (0, -1),
    (0, 1),
    (-1, 1),
    (-1, 0),
    (-1, -1),
)

# CLI defaults
DEFAULT_SEED = 12345
DEFAULT_LEVEL_WIDTH = 400.0
DEFAULT_LEVEL_DEPTH = 400.0
DEFAULT_DENSITY_RES = 256
DEFAULT_WALK_SPEED = 25.0  # world units / step
DEFAULT_STEPS = 16
DEFAULT_PREVIEW_SIZE = (960, 540)


@dataclass(frozen=True)
class GrassSettings:
    chunk_size: int = DEFAULT_CHUNK_SIZE
    instance_count: int = DEFAULT_INSTANCE_COUNT

    def validate(self) -> "GrassSettings":
        # bool is an int subclass; reject it explicitly
        if isinstance(self.chunk_size, bool) or not isinstance(self.chunk_size, int):
            raise ConfigurationError(f"chunk_size must be an int, got {self.chunk_size!r}")
        if self.chunk_size <= 0:
            raise ConfigurationError(f"chunk_size must be > 0, got {self.chunk_size}")
        if isinstance(self.instance_count, bool) or not isinstance(self.instance_count, int):
            raise ConfigurationError(f"instance_count must be an int, got {self.instance_count!r}")
        if self.instance_count < 0:
            raise ConfigurationError(f"instance_count must be >= 0, got {self.instance_count}")
        return self
