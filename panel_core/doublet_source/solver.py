"""
Open-Panel: Doublet-Source Solver
=================================

Validates the panel set, assembles the Dirichlet system and solves it with
a single dense LU factorisation. The solved state is returned as an
immutable aggregate; re-solving with perturbed inputs builds a new one.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np
from scipy.linalg import LinAlgWarning, get_lapack_funcs, lu_factor, lu_solve

from panel_config import config
from ..errors import NumericalSolveError, PanelValidationError
from ..geometry.panels_2d import Panel2D, WakePanel2D, validate_panels
from ..geometry.panels_3d import WakePanel3D, validate_panel_grid
from ..geometry.wake import wake_panel, wake_panels, wake_panels_3d
from ..laplace import Freestream, Uniform2D
from .assembly import assemble_3d, boundary_vector, influence_matrix

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def _read_only(array) -> np.ndarray:
    array = np.array(array)
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class DoubletSourceSystem:
    """Solved 2D doublet-source system."""

    influence_matrix: np.ndarray
    boundary_condition: np.ndarray
    singularities: np.ndarray
    surface_panels: Tuple[Panel2D, ...]
    wake_panels: Tuple[WakePanel2D, ...]
    freestream: Uniform2D

    @property
    def num_panels(self) -> int:
        return len(self.surface_panels)

    @property
    def wake_strength(self) -> float:
        """Doublet strength carried by the wake, mu_last - mu_first."""
        return float(self.singularities[-1] - self.singularities[0])

    @property
    def wake_length(self) -> float:
        return float(sum(panel.length for panel in self.wake_panels))

    def summary(self) -> str:
        """Generate human-readable solve summary."""
        return f"""
Doublet-Source System (2D)
==========================
Surface Panels: {self.num_panels}
Wake Panels: {len(self.wake_panels)} ({self.wake_length:.1f} long)
Freestream: {self.freestream.magnitude:.3f} at {self.freestream.angle_deg:.2f} deg
Wake Strength: {self.wake_strength:.6f}
Doublet Range: [{self.singularities.min():.6f}, {self.singularities.max():.6f}]
"""


@dataclass(frozen=True, eq=False)
class DoubletSourceSystem3D:
    """Solved 3D doublet-source system over a structured (m, n) panel grid."""

    influence_matrix: np.ndarray
    boundary_condition: np.ndarray
    singularities: np.ndarray
    surface_panels: np.ndarray
    wake_panels: Tuple[WakePanel3D, ...]
    freestream: Freestream

    @property
    def shape(self) -> Tuple[int, int]:
        return self.surface_panels.shape

    @property
    def doublet_strengths(self) -> np.ndarray:
        """Singularity strengths reshaped onto the (m, n) panel grid."""
        return self.singularities.reshape(self.shape)

    @property
    def wake_strengths(self) -> np.ndarray:
        """Per-strip wake strengths, mu(upper TE) - mu(lower TE)."""
        mu = self.doublet_strengths
        return mu[-1, :] - mu[0, :]

    @property
    def wake_length(self) -> float:
        wake = self.wake_panels[0]
        return float(np.linalg.norm(wake.p2 - wake.p1))

    def summary(self) -> str:
        m, n = self.shape
        fs = self.freestream
        return f"""
Doublet-Source System (3D)
==========================
Panel Grid: {m} chordwise x {n} spanwise ({m * n} panels)
Wake Strips: {len(self.wake_panels)} ({self.wake_length:.1f} long)
Freestream: {fs.magnitude:.3f}, alpha {np.degrees(fs.alpha):.2f} deg, beta {np.degrees(fs.beta):.2f} deg
Doublet Range: [{self.singularities.min():.6f}, {self.singularities.max():.6f}]
"""


def solve_linear(matrix, rhs, min_rcond: float | None = None) -> np.ndarray:
    """
    Direct LU solve with partial pivoting and a conditioning guard.

    Raises:
        NumericalSolveError: Non-finite entries, an exactly zero pivot, a
            reciprocal condition estimate below ``min_rcond``, or a
            non-finite solution
    """
    min_rcond = config.numerics.min_reciprocal_condition if min_rcond is None else min_rcond

    if not (np.all(np.isfinite(matrix)) and np.all(np.isfinite(rhs))):
        raise NumericalSolveError("Influence matrix or boundary condition contains non-finite values")

    # An exactly singular factorisation is reported below as an error
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", LinAlgWarning)
        lu, piv = lu_factor(matrix, check_finite=False)

    zero_pivots = np.flatnonzero(np.diag(lu) == 0.0)
    if zero_pivots.size:
        raise NumericalSolveError(f"Influence matrix is singular (zero pivot at row {zero_pivots[0]})")

    gecon, = get_lapack_funcs(("gecon",), (lu,))
    rcond, info = gecon(lu, np.linalg.norm(matrix, 1), norm="1")
    logger.debug("Influence matrix reciprocal condition estimate: %.3e", rcond)
    if info != 0 or rcond < min_rcond:
        raise NumericalSolveError(
            f"Influence matrix is ill-conditioned (rcond {rcond:.3e} < {min_rcond:.1e}); "
            "check for duplicate points or overlapping panels"
        )

    solution = lu_solve((lu, piv), rhs, check_finite=False)
    if not np.all(np.isfinite(solution)):
        raise NumericalSolveError("Linear solve produced non-finite doublet strengths")
    return solution


def solve_system(
    panels: Sequence[Panel2D],
    freestream: Uniform2D,
    wake_length: Optional[float] = None,
    num_wake: Optional[int] = None,
) -> DoubletSourceSystem:
    """
    Solve for the doublet strengths of a 2D body.

    Args:
        panels: Surface panels, lower trailing edge -> upper trailing edge
        freestream: Uniform onset flow
        wake_length: Wake extent (default ``config.wake.length``)
        num_wake: Number of wake panels (default ``config.wake.num_panels``);
            more than one builds a cosine-spaced chain

    Returns:
        DoubletSourceSystem

    Raises:
        PanelValidationError: Invalid panels, freestream or wake parameters
        NumericalSolveError: The influence matrix cannot be solved reliably
    """
    if not isinstance(freestream, Uniform2D):
        raise PanelValidationError(f"2D solves need a Uniform2D freestream, got {freestream!r}")
    panels = tuple(panels)
    validate_panels(panels)

    wake_length = config.wake.length if wake_length is None else wake_length
    num_wake = config.wake.num_panels if num_wake is None else num_wake
    if num_wake == 1:
        wakes = (wake_panel(panels, wake_length, freestream.angle),)
    else:
        wakes = tuple(wake_panels(panels, wake_length, freestream.angle, num_wake))

    matrix = influence_matrix(panels, wakes)
    rhs = boundary_vector(panels, freestream.vector)
    mu = solve_linear(matrix, rhs)

    system = DoubletSourceSystem(
        influence_matrix=_read_only(matrix),
        boundary_condition=_read_only(rhs),
        singularities=_read_only(mu),
        surface_panels=panels,
        wake_panels=wakes,
        freestream=freestream,
    )
    logger.info(
        "Solved 2D doublet-source system: %d panels, wake strength %.6f",
        len(panels), system.wake_strength,
    )
    return system


def solve_system_3d(
    panels,
    freestream: Freestream,
    wake_length: Optional[float] = None,
) -> DoubletSourceSystem3D:
    """
    Solve for the doublet strengths of a structured 3D panel grid.

    Args:
        panels: (m, n) grid of Panel3D (see ``make_panels_3d``)
        freestream: 3D freestream descriptor
        wake_length: Wake extent along the freestream (default ``config.wake.length``)

    Raises:
        PanelValidationError: Invalid grid, freestream or wake length
        NumericalSolveError: The influence matrix cannot be solved reliably
    """
    if not isinstance(freestream, Freestream):
        raise PanelValidationError(f"3D solves need a Freestream, got {freestream!r}")
    grid = validate_panel_grid(panels).copy()
    grid.setflags(write=False)

    wake_length = config.wake.length if wake_length is None else wake_length
    wakes = tuple(wake_panels_3d(grid, wake_length, freestream.direction))

    matrix, rhs = assemble_3d(grid, wakes, freestream.velocity)
    mu = solve_linear(matrix, rhs)

    system = DoubletSourceSystem3D(
        influence_matrix=_read_only(matrix),
        boundary_condition=_read_only(rhs),
        singularities=_read_only(mu),
        surface_panels=grid,
        wake_panels=wakes,
        freestream=freestream,
    )
    logger.info("Solved 3D doublet-source system: %d x %d panels", *grid.shape)
    return system


def resolve(system, panels=None, freestream=None, wake_length: Optional[float] = None):
    """
    Solve again with some inputs replaced, keeping the rest from ``system``.

    The given system is left untouched; a new aggregate is returned.
    """
    panels = system.surface_panels if panels is None else panels
    freestream = system.freestream if freestream is None else freestream
    wake_length = system.wake_length if wake_length is None else wake_length

    if isinstance(system, DoubletSourceSystem3D):
        return solve_system_3d(panels, freestream, wake_length)
    return solve_system(panels, freestream, wake_length, len(system.wake_panels))
