"""
Engine configuration.

Constants shared by the processing facade and the command-line driver.
"""
from dataclasses import dataclass, replace


@dataclass(frozen=True)
class FairingConfig:
    damping: float = 0.5              # explicit smoothing step per iteration
    valence_color_bound: int = 100    # valence colors drop the outer 1% of values
    curvature_color_bound: int = 1    # curvature colors use the full range
    default_iterations: int = 10
    default_timestep: float = 1e-5    # relative to dist_max ** 2 in the driver
    default_coefficient: float = 2.0

    def __post_init__(self):
        if self.damping <= 0:
            raise ValueError(f"damping must be positive, got {self.damping}")
        if self.default_iterations < 0:
            raise ValueError("default_iterations must be non-negative")
        if self.default_timestep < 0:
            raise ValueError("default_timestep must be non-negative")

    def with_overrides(self, **kwargs) -> "FairingConfig":
        """Copy with the given non-None fields replaced."""
        return replace(self, **{k: v for k, v in kwargs.items() if v is not None})


DEFAULT_CONFIG = FairingConfig()
