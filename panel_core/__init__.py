# Open-Panel Core Module
from .errors import KuttaConsistencyWarning, NumericalSolveError, PanelValidationError
from .laplace import Doublet2D, Freestream, Source2D, Uniform2D, Vortex2D, grid_data
from .singularities import SingularityKind
from .geometry import Panel2D, Panel3D, WakePanel2D, WakePanel3D, make_panels, make_panels_3d
from .doublet_source import (
    DoubletSourceSystem, DoubletSourceSystem3D, induced_potential, induced_velocity,
    kutta_consistency, lift_coefficient, pressure_lift_coefficient, resolve, solve_system,
    solve_system_3d, surface_coefficients, surface_coefficients_3d, surface_velocities,
    surface_velocities_3d,
)

__all__ = [
    "KuttaConsistencyWarning", "NumericalSolveError", "PanelValidationError",
    "Doublet2D", "Freestream", "Source2D", "Uniform2D", "Vortex2D", "grid_data",
    "SingularityKind",
    "Panel2D", "Panel3D", "WakePanel2D", "WakePanel3D", "make_panels", "make_panels_3d",
    "DoubletSourceSystem", "DoubletSourceSystem3D", "induced_potential", "induced_velocity",
    "kutta_consistency", "lift_coefficient", "pressure_lift_coefficient", "resolve",
    "solve_system", "solve_system_3d", "surface_coefficients", "surface_coefficients_3d",
    "surface_velocities", "surface_velocities_3d",
]
