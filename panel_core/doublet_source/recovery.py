"""
Open-Panel: Velocity and Coefficient Recovery
=============================================

Post-processing of a solved doublet-source system. Doublet strengths are
minus the outer perturbation potential, so tangential perturbation
velocities are minus their surface gradient.

2D quantities live at the N - 1 panel interfaces (between collocation
points k and k + 1), paired with ``panels[1:]``.
"""

from __future__ import annotations

import logging
import math
import warnings
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np

from panel_config import config
from ..errors import KuttaConsistencyWarning
from ..geometry.panels_2d import collocation_points, panel_points, panel_scalar, panel_velocity
from ..nondimensional import (
    dynamic_pressure, force_coefficient, moment_coefficient, pressure_coefficient,
)
from ..singularities import SingularityKind
from .assembly import source_strengths
from .solver import DoubletSourceSystem, DoubletSourceSystem3D

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

# Lift coefficients below this are compared in absolute terms
_KUTTA_SCALE_FLOOR = 1e-3


# ----------------------------------------------------------------------
# 2D
# ----------------------------------------------------------------------
def surface_velocities(system: DoubletSourceSystem) -> np.ndarray:
    """
    Tangential edge velocities at the panel interfaces.

    u_k = (mu_k - mu_{k+1}) / dr_k + U . t_{k+1}, with dr_k the distance
    between adjacent collocation points.
    """
    panels = system.surface_panels
    mu = system.singularities

    dr = np.linalg.norm(np.diff(collocation_points(panels), axis=0), axis=1)
    tangents = np.array([panel.tangent for panel in panels[1:]])
    return (mu[:-1] - mu[1:]) / dr + tangents @ system.freestream.vector


def surface_coefficients(
    system: DoubletSourceSystem,
    chord: Optional[float] = None,
    x_ref: Optional[float] = None,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Per-interface lift, moment and pressure coefficients.

    Args:
        system: Solved 2D system
        chord: Reference chord (default ``config.reference.chord``)
        x_ref: Moment reference x (default ``config.reference.moment_x``)

    Returns:
        (cls, cms, cps), each of length N - 1. Summing cls and cms gives
        the section lift and moment coefficients.
    """
    chord = config.reference.chord if chord is None else chord
    x_ref = config.reference.moment_x if x_ref is None else x_ref

    panels = system.surface_panels
    fs = system.freestream

    cps = pressure_coefficient(fs.magnitude, surface_velocities(system))
    dr = np.linalg.norm(np.diff(collocation_points(panels), axis=0), axis=1)
    angles = np.array([panel.angle for panel in panels[1:]])

    cls = -cps * dr * np.cos(angles) / chord
    x_nodes = panel_points(panels)[1:-1, 0]
    cms = -cls * (x_nodes - x_ref) * math.cos(fs.angle) / chord
    return cls, cms, cps


def lift_coefficient(system: DoubletSourceSystem, chord: Optional[float] = None) -> float:
    """Kutta-Joukowski lift from the trailing doublet jump, 2 (mu_first - mu_last) / (U c)."""
    chord = config.reference.chord if chord is None else chord
    mu = system.singularities
    return float(2.0 * (mu[0] - mu[-1]) / (system.freestream.magnitude * chord))


def pressure_lift_coefficient(system: DoubletSourceSystem, chord: Optional[float] = None) -> float:
    """
    Section lift from the integrated surface pressure, in wind axes.

    Each interface carries a force -Cp n dr with n = (-sin theta, cos theta),
    giving normal and axial coefficients Cn and Ca. Lift is
    Cn cos(alpha) - Ca sin(alpha).
    """
    chord = config.reference.chord if chord is None else chord
    panels = system.surface_panels

    cls, _, cps = surface_coefficients(system, chord=chord)
    dr = np.linalg.norm(np.diff(collocation_points(panels), axis=0), axis=1)
    angles = np.array([panel.angle for panel in panels[1:]])

    cn = np.sum(cls)
    ca = np.sum(cps * dr * np.sin(angles)) / chord
    alpha = system.freestream.angle
    return float(cn * math.cos(alpha) - ca * math.sin(alpha))


@dataclass
class KuttaCheck:
    """Pressure-integrated lift against the wake-jump estimate."""

    cl_pressure: float
    cl_wake: float
    mismatch: float
    tolerance: float

    @property
    def consistent(self) -> bool:
        return self.mismatch <= self.tolerance


def kutta_consistency(
    system: DoubletSourceSystem, tolerance: Optional[float] = None
) -> KuttaCheck:
    """
    Compare surface-pressure lift with the Kutta-Joukowski estimate.

    Both are lift in wind axes. Disagreement beyond ``tolerance`` (relative, default
    ``config.numerics.kutta_tolerance``) points at a mesh or wake defect
    and is reported as a KuttaConsistencyWarning, not an error.
    """
    tolerance = config.numerics.kutta_tolerance if tolerance is None else tolerance

    cl_pressure = pressure_lift_coefficient(system)
    cl_wake = lift_coefficient(system)
    mismatch = abs(cl_pressure - cl_wake) / max(abs(cl_wake), _KUTTA_SCALE_FLOOR)

    check = KuttaCheck(cl_pressure, cl_wake, mismatch, tolerance)
    if not check.consistent:
        message = (
            f"Pressure lift {cl_pressure:.4f} and wake lift {cl_wake:.4f} differ by "
            f"{mismatch:.2%} (tolerance {tolerance:.2%})"
        )
        logger.warning(message)
        warnings.warn(message, KuttaConsistencyWarning)
    return check


def induced_velocity(system: DoubletSourceSystem, x, y) -> Tuple[np.ndarray, np.ndarray]:
    """
    Total velocity at off-body point(s) (x, y) in global axes.

    Sums every surface doublet and source panel, the wake doublet(s) and
    the freestream. Points on or very near a panel are not regularised.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    panels = system.surface_panels
    sigma = source_strengths(panels, system.freestream.vector)

    u, v = system.freestream.velocity(x, y)
    for mu_j, sigma_j, panel in zip(system.singularities, sigma, panels):
        du, dv = panel_velocity(SingularityKind.DOUBLET, mu_j, panel, x, y)
        su, sv = panel_velocity(SingularityKind.SOURCE, sigma_j, panel, x, y)
        u = u + du + su
        v = v + dv + sv

    for wake in system.wake_panels:
        du, dv = panel_velocity(SingularityKind.DOUBLET, system.wake_strength, wake, x, y)
        u = u + du
        v = v + dv
    return u, v


def induced_potential(system: DoubletSourceSystem, x, y) -> np.ndarray:
    """
    Total velocity potential at off-body point(s) (x, y).

    Same superposition as ``induced_velocity``. The wake doublet makes the
    potential jump by the wake strength across the wake line.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    panels = system.surface_panels
    sigma = source_strengths(panels, system.freestream.vector)

    phi = system.freestream.potential(x, y)
    for mu_j, sigma_j, panel in zip(system.singularities, sigma, panels):
        phi = phi + panel_scalar(SingularityKind.DOUBLET, mu_j, panel, x, y)
        phi = phi + panel_scalar(SingularityKind.SOURCE, sigma_j, panel, x, y)

    for wake in system.wake_panels:
        phi = phi + panel_scalar(SingularityKind.DOUBLET, system.wake_strength, wake, x, y)
    return phi


# ----------------------------------------------------------------------
# 3D
# ----------------------------------------------------------------------
def _neighbour_difference(values: np.ndarray, axis: int) -> np.ndarray:
    """Central difference along ``axis``, one-sided at both ends."""
    if values.shape[axis] < 2:
        return np.zeros_like(values)
    forward = np.roll(values, -1, axis=axis)
    backward = np.roll(values, 1, axis=axis)

    first = [slice(None)] * values.ndim
    last = [slice(None)] * values.ndim
    first[axis], last[axis] = 0, -1
    forward[tuple(last)] = values[tuple(last)]
    backward[tuple(first)] = values[tuple(first)]
    return forward - backward


def surface_velocities_3d(system: DoubletSourceSystem3D) -> np.ndarray:
    """
    Surface velocities in each panel's local frame, shape (m, n, 3).

    The in-plane doublet gradient is fitted to the chordwise and spanwise
    neighbour differences, each expressed in the panel's local frame; the
    local freestream is then added. The third component is the freestream
    projection onto the panel's unit normal, which the boundary condition
    leaves unchanged.
    """
    grid = system.surface_panels
    m, n = grid.shape
    mu = system.doublet_strengths
    centres = np.array([[panel.collocation_point() for panel in row] for row in grid])
    velocity = system.freestream.velocity

    d_mu = (_neighbour_difference(mu, 0), _neighbour_difference(mu, 1))
    d_r = (_neighbour_difference(centres, 0), _neighbour_difference(centres, 1))

    result = np.empty((m, n, 3))
    for (i, j), panel in np.ndenumerate(grid):
        frame = panel.frame
        rows = [frame.vector_to_local(d[i, j])[:2] for d in d_r]
        grad_mu, *_ = np.linalg.lstsq(np.array(rows), np.array([d[i, j] for d in d_mu]), rcond=None)

        local_fs = frame.vector_to_local(velocity)
        result[i, j, :2] = local_fs[:2] - grad_mu
        result[i, j, 2] = np.dot(velocity, panel.unit_normal)
    return result


@dataclass
class SurfaceCoefficients3D:
    """Pressure distribution and integrated 3D coefficients."""

    cps: np.ndarray
    force: np.ndarray          # CF in geometry axes
    moment: np.ndarray         # CM about the reference point
    CL: float
    CD: float
    CY: float


def wind_axes(freestream) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Drag, side and lift unit vectors for the freestream's alpha and beta."""
    drag = freestream.direction
    lift = np.array([-math.sin(freestream.alpha), 0.0, math.cos(freestream.alpha)])
    side = np.cross(lift, drag)
    return drag, side, lift


def surface_coefficients_3d(
    system: DoubletSourceSystem3D,
    area: Optional[float] = None,
    chord: Optional[float] = None,
    span: Optional[float] = None,
    moment_point=None,
) -> SurfaceCoefficients3D:
    """
    Pressure coefficients and the integrated force and moment coefficients.

    Loads sum -q Cp n A over the panels at unit density. Rolling and
    yawing moments are normalised by the span, pitching moment by the chord.
    """
    ref = config.reference
    area = ref.area if area is None else area
    chord = ref.chord if chord is None else chord
    span = ref.span if span is None else span
    moment_point = np.asarray(ref.moment_point if moment_point is None else moment_point, dtype=float)

    grid = system.surface_panels
    # The normal component is U . n and carries no pressure
    tangential = surface_velocities_3d(system)[..., :2]
    speeds = np.linalg.norm(tangential, axis=-1)
    cps = pressure_coefficient(system.freestream.magnitude, speeds)
    q = dynamic_pressure(1.0, system.freestream.magnitude)

    normals = np.array([panel.unit_normal for panel in grid.ravel()])
    areas = np.array([panel.area for panel in grid.ravel()])
    arms = np.array([panel.collocation_point() for panel in grid.ravel()]) - moment_point

    loads = -q * cps.ravel()[:, None] * normals * areas[:, None]
    force = force_coefficient(loads.sum(axis=0), q, area)
    moment = moment_coefficient(
        np.cross(arms, loads).sum(axis=0), q, area, np.array([span, chord, span])
    )

    drag, side, lift = wind_axes(system.freestream)
    return SurfaceCoefficients3D(
        cps=cps,
        force=force,
        moment=moment,
        CL=float(force @ lift),
        CD=float(force @ drag),
        CY=float(force @ side),
    )


def wake_lift_coefficient_3d(system: DoubletSourceSystem3D, area: Optional[float] = None) -> float:
    """
    Kutta-Joukowski lift summed over the spanwise strips.

    Each strip contributes -2 mu_w b_j / (U S), with b_j its trailing-edge
    width normal to the freestream.
    """
    area = config.reference.area if area is None else area
    fs = system.freestream
    d_hat = fs.direction

    widths = []
    for wake in system.wake_panels:
        edge = wake.p4 - wake.p1
        widths.append(np.linalg.norm(edge - np.dot(edge, d_hat) * d_hat))
    return float(-2.0 * np.dot(system.wake_strengths, widths) / (fs.magnitude * area))
