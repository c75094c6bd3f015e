# Open-Panel Validation Module
from .reference_bodies import circle, cosine_spacing, naca4_symmetric, naca4_thickness, sphere_grid
from .regression import RegressionRunner, RegressionScenario, ScenarioResult

__all__ = [
    "circle", "cosine_spacing", "naca4_symmetric", "naca4_thickness", "sphere_grid",
    "RegressionRunner", "RegressionScenario", "ScenarioResult",
]
