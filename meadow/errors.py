from __future__ import annotations


class MeadowError(Exception):
    pass


class ConfigurationError(MeadowError):
    """Setup-time problem: missing collaborator or invalid setting.

    Disables the grass subsystem; the host keeps running.
    """


class ScatterError(MeadowError):
    """Raised by the scatter sampler; aborts activation of one chunk only."""


class MissingDensityField(ScatterError):
    pass


class DegenerateLevelBounds(ScatterError):
    pass


class OutOfRangeSample(ScatterError):
    def __init__(self, px: int, py: int, resolution: tuple[int, int]) -> None:
        super().__init__(f"pixel ({px}, {py}) outside density field {resolution[0]}x{resolution[1]}")
        self.px = px
        self.py = py
        self.resolution = resolution
