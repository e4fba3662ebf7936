"""
Configuration dataclass for sprite mesh optimization.

This module defines the OptimizerConfig dataclass that holds every parameter
of the pipeline. Two profiles exist and a caller picks one per config:

- "clip" (SimplificationStrategy.CLIP): corner-extension cleaning, then
  polygonization and optional outer-hull simplification
- "triangle" (SimplificationStrategy.REMOVAL): vertex-removal cleaning,
  then a quality-constrained Delaunay triangulation

The strategy tag is chosen once; the pipeline branches on it instead of
swapping implementation classes around.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List

from .constants import (
    AREA_DECREASE_TOLERANCE,
    AREA_DELTA_RATIO,
    AREA_INCREASE_TOLERANCE,
    CLEAN_STEPS,
    MAX_AREA_TOLERANCE_REMOVAL,
    MAX_CLEAN_STEPS_CLIP,
    MAX_CLEAN_STEPS_REMOVAL,
    MAXIMUM_ANGLE,
    MINIMUM_ANGLE,
    STEINER_POINTS,
    TIGHTNESS,
)


class SimplificationStrategy(Enum):
    CLIP = "clip"
    REMOVAL = "removal"


@dataclass
class OptimizerConfig:
    """
    Configuration for sprite mesh optimization.

    Attributes:
        strategy: Which cleaning policy (and polygon path) to use
        clean_steps: Number of cleaning rounds (0 disables cleaning)
        area_increase_tolerance: Max (doubled) area one cleaning operation may add
        area_decrease_tolerance: Max (doubled) area one removal may take away
                                 (removal strategy only)
        minimum_angle: Minimum triangle angle in degrees (0 = unconstrained)
        maximum_angle: Maximum triangle angle in degrees (0 = unconstrained)
        steiner_points: Cap on points the triangulator may insert (0 = no cap)
        holes: Keep interior holes (removal strategy); otherwise they are filled
        conforming_delaunay: Require a conforming Delaunay triangulation
        tightness: Fraction of ring vertices kept by hull simplification
                   (clip strategy; 0 disables the pass)
        area_delta_ratio: Max area hull simplification may add, relative to
                          the polygon area (clip strategy; 0 = no limit)
        extract_only_polygonal: Keep only faces that form valid polygonal
                                output, leaving holes open (clip strategy)
        check_rings_valid: Fail on invalid rings found while polygonizing
                           (clip strategy)
    """

    strategy: SimplificationStrategy = SimplificationStrategy.REMOVAL
    clean_steps: int = CLEAN_STEPS
    area_increase_tolerance: float = AREA_INCREASE_TOLERANCE
    area_decrease_tolerance: float = AREA_DECREASE_TOLERANCE

    # Triangulation quality
    minimum_angle: float = MINIMUM_ANGLE
    maximum_angle: float = MAXIMUM_ANGLE
    steiner_points: int = STEINER_POINTS
    holes: bool = False
    conforming_delaunay: bool = False

    # Clip strategy: polygonization and hull simplification
    tightness: float = TIGHTNESS
    area_delta_ratio: float = AREA_DELTA_RATIO
    extract_only_polygonal: bool = True
    check_rings_valid: bool = True

    def __post_init__(self):
        """Validate configuration parameters."""
        if isinstance(self.strategy, str):
            self.strategy = SimplificationStrategy(self.strategy)
        if not isinstance(self.strategy, SimplificationStrategy):
            raise ValueError(f"strategy must be a SimplificationStrategy, got {self.strategy!r}")

        clip = self.strategy is SimplificationStrategy.CLIP
        max_steps = MAX_CLEAN_STEPS_CLIP if clip else MAX_CLEAN_STEPS_REMOVAL
        if not 0 <= self.clean_steps <= max_steps:
            raise ValueError(f"clean_steps must be between 0 and {max_steps}, got {self.clean_steps}")

        if self.area_increase_tolerance < 0:
            raise ValueError(
                f"area_increase_tolerance must be non-negative, got {self.area_increase_tolerance}"
            )
        if self.area_decrease_tolerance < 0:
            raise ValueError(
                f"area_decrease_tolerance must be non-negative, got {self.area_decrease_tolerance}"
            )
        if not clip:
            for name in ("area_increase_tolerance", "area_decrease_tolerance"):
                value = getattr(self, name)
                if value > MAX_AREA_TOLERANCE_REMOVAL:
                    raise ValueError(
                        f"{name} must be between 0 and {MAX_AREA_TOLERANCE_REMOVAL}, got {value}"
                    )

        for name in ("minimum_angle", "maximum_angle"):
            value = getattr(self, name)
            if not 0 <= value <= 180:
                raise ValueError(f"{name} must be between 0 and 180 degrees, got {value}")

        if self.steiner_points < 0:
            raise ValueError(f"steiner_points must be non-negative, got {self.steiner_points}")
        if not 0 <= self.tightness <= 1:
            raise ValueError(f"tightness must be between 0 and 1, got {self.tightness}")
        if self.area_delta_ratio < 0:
            raise ValueError(f"area_delta_ratio must be non-negative, got {self.area_delta_ratio}")

    @classmethod
    def clip_profile(cls, **overrides: Any) -> 'OptimizerConfig':
        """Config for the clip strategy with the default clip settings."""
        return cls(strategy=SimplificationStrategy.CLIP, **overrides)

    @classmethod
    def triangle_profile(cls, **overrides: Any) -> 'OptimizerConfig':
        """Config for the removal strategy with the default triangle settings."""
        return cls(strategy=SimplificationStrategy.REMOVAL, **overrides)

    def get_warnings(self) -> List[str]:
        return get_warnings(self)


def get_warnings(config: OptimizerConfig) -> List[str]:
    """
    List human-readable warnings about risky parameter combinations.

    Nothing is run: this only inspects the numbers, so a settings UI can
    show the warnings next to the fields.
    """
    warnings: List[str] = []

    if config.minimum_angle > config.maximum_angle and config.maximum_angle > 0:
        warnings.append("Minimum angle is greater than maximum angle.")
    elif config.minimum_angle > 120:
        warnings.append("Minimum angle above 120 is not supported.")
    elif config.minimum_angle > 40:
        warnings.append("Minimum angle above 40 degrees may cause excessive triangles.")

    if 0 < config.maximum_angle < 90:
        warnings.append("Maximum angle below 100 may cause excessive triangles.")

    if config.holes:
        warnings.append("If encountering invalid meshes, try disabling holes.")

    if config.clean_steps > 0 and config.area_decrease_tolerance > 0:
        warnings.append("Removing surface area may cause some parts of the sprite to be cut off.")

    if config.strategy is SimplificationStrategy.CLIP:
        if config.area_decrease_tolerance > 0:
            warnings.append("Area decrease tolerance is ignored by the clip strategy.")
        if config.holes:
            warnings.append("Holes are controlled by extract_only_polygonal in the clip strategy.")
        if config.clean_steps > 0 and config.area_increase_tolerance == 0:
            warnings.append("Clean steps have no effect with a zero area increase tolerance.")
    elif config.tightness > 0:
        warnings.append("Tightness only applies to the clip strategy.")

    return warnings
