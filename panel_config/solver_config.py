"""
Open-Panel: Single Source of Truth (SSOT)
=========================================

This configuration file defines the tolerances and reference quantities
used by the panel-method engine. Engine functions accept explicit
overrides, but fall back to these values when none are given.

Reference lengths are in chord units unless noted.
"""

from dataclasses import dataclass, field
from typing import List, Tuple


@dataclass
class WakeParams:
    """Trailing wake geometry used to close the circulation."""

    length: float = 100.0                 # Wake length (chords)
    num_panels: int = 1                   # 1 = single panel, >1 = cosine-spaced chain


@dataclass
class NumericsParams:
    """Validation thresholds and solver guards."""

    # === GEOMETRY VALIDATION ===
    min_panel_length: float = 1e-12       # 2D panels shorter than this are degenerate
    min_panel_area: float = 1e-16         # 3D panels smaller than this are degenerate

    # === FRAME CONSTRUCTION ===
    alignment_tolerance: float = 1e-7     # |n x z| below this -> identity rotation

    # === LINEAR SOLVE ===
    min_reciprocal_condition: float = 1e-13   # LAPACK rcond floor

    # === CONSISTENCY CHECK ===
    kutta_tolerance: float = 0.05         # Relative Cl(pressure) vs Cl(wake) mismatch


@dataclass
class ReferenceParams:
    """Reference quantities for coefficient normalisation."""

    chord: float = 1.0                    # 2D reference chord
    moment_x: float = 0.0                 # 2D moment reference (x location)
    area: float = 1.0                     # 3D reference area
    span: float = 1.0                     # 3D reference span (lateral moments)
    moment_point: Tuple[float, float, float] = (0.0, 0.0, 0.0)


@dataclass
class PanelMethodConfig:
    """
    Master configuration singleton.

    ALL engine modules import this. Changes here propagate through:
    - Geometry validation before assembly
    - Wake construction defaults
    - Linear-solve conditioning guard
    - Coefficient normalisation
    """

    wake: WakeParams = field(default_factory=WakeParams)
    numerics: NumericsParams = field(default_factory=NumericsParams)
    reference: ReferenceParams = field(default_factory=ReferenceParams)

    # Project metadata
    project_name: str = "Open-Panel"
    version: str = "0.1.0"

    def validate(self) -> List[str]:
        """Validate configuration values before they reach the solver."""
        errors = []

        if self.wake.length <= 0:
            errors.append(f"Wake length must be positive, got {self.wake.length}")

        if self.wake.num_panels < 1:
            errors.append(
                f"Wake panel count must be at least 1, got {self.wake.num_panels}"
            )

        numerics = self.numerics
        for name in (
            "min_panel_length", "min_panel_area", "alignment_tolerance",
            "min_reciprocal_condition", "kutta_tolerance",
        ):
            value = getattr(numerics, name)
            if value <= 0:
                errors.append(f"Numerical threshold {name} must be positive, got {value}")

        if self.reference.chord <= 0 or self.reference.area <= 0 or self.reference.span <= 0:
            errors.append("Reference chord, area and span must be positive")

        return errors

    def summary(self) -> str:
        """Generate human-readable configuration summary."""
        return f"""
Open-Panel Configuration Summary
================================
Version: {self.version}

WAKE
----
Length: {self.wake.length:.1f} chords
Panels: {self.wake.num_panels}

NUMERICS
--------
Min Panel Length: {self.numerics.min_panel_length:.1e}
Min Panel Area: {self.numerics.min_panel_area:.1e}
Alignment Tolerance: {self.numerics.alignment_tolerance:.1e}
Min Reciprocal Condition: {self.numerics.min_reciprocal_condition:.1e}
Kutta Tolerance: {self.numerics.kutta_tolerance:.1%}

REFERENCE
---------
Chord: {self.reference.chord}
Area: {self.reference.area}
Moment Point: {self.reference.moment_point}
"""


# Singleton instance - import this throughout the project
config = PanelMethodConfig()

# Validate on import
_errors = config.validate()
if _errors:
    import warnings
    for err in _errors:
        warnings.warn(err, UserWarning)
