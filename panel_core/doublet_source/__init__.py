"""Dirichlet doublet-source panel method: assembly, solve and recovery."""

from .assembly import (
    boundary_condition, boundary_vector, doublet_influence, influence_matrix,
    source_influence, source_strength,
)
from .recovery import (
    KuttaCheck, SurfaceCoefficients3D, induced_potential, induced_velocity,
    kutta_consistency, lift_coefficient, pressure_lift_coefficient, surface_coefficients,
    surface_coefficients_3d, surface_velocities, surface_velocities_3d, wake_lift_coefficient_3d,
)
from .solver import (
    DoubletSourceSystem, DoubletSourceSystem3D, resolve, solve_linear,
    solve_system, solve_system_3d,
)

__all__ = [
    "boundary_condition", "boundary_vector", "doublet_influence", "influence_matrix",
    "source_influence", "source_strength",
    "KuttaCheck", "SurfaceCoefficients3D", "induced_potential", "induced_velocity",
    "kutta_consistency", "lift_coefficient", "pressure_lift_coefficient", "surface_coefficients",
    "surface_coefficients_3d", "surface_velocities", "surface_velocities_3d", "wake_lift_coefficient_3d",
    "DoubletSourceSystem", "DoubletSourceSystem3D", "resolve", "solve_linear",
    "solve_system", "solve_system_3d",
]
