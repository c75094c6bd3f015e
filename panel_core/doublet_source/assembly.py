"""
Open-Panel: Influence-Matrix Assembly
=====================================

Dirichlet doublet-source formulation. For every collocation point i the
perturbation potential inside the body is zero::

    sum_j A[i, j] mu_j = -sum_j B[i, j] sigma_j = b[i]

    A[i, j]  doublet influence of panel j at collocation point i (0.5 on the diagonal)
    B[i, j]  source influence of panel j at collocation point i
    sigma_j  prescribed source strength, -U . n_j (outward normal)

The wake carries mu_w = mu_last - mu_first, so its influence is added to
the last column and subtracted from the first one (per spanwise strip in
3D) instead of appearing as an extra unknown.
"""

from __future__ import annotations

import logging
from typing import Sequence

import numpy as np

from ..geometry.panels_2d import Panel2D, collocation_points
from ..geometry.panels_3d import Panel3D
from ..singularities import (
    doublet_potential, quadrilateral_doublet_potential,
    quadrilateral_source_potential, source_potential,
)

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())

SELF_INFLUENCE = 0.5


# ----------------------------------------------------------------------
# Pairwise coefficients
# ----------------------------------------------------------------------
def doublet_influence(panel_j, panel_i) -> float:
    """Potential at panel_i's collocation point from a unit doublet on panel_j."""
    if panel_i == panel_j:
        return SELF_INFLUENCE

    if isinstance(panel_j, Panel3D):
        point = panel_j.transform(panel_i.collocation_point())
        return float(quadrilateral_doublet_potential(1.0, panel_j.local_corners, point))

    xp, zp = panel_j.transform(*panel_i.collocation_point())
    return float(doublet_potential(1.0, xp, zp, 0.0, panel_j.length))


def source_influence(panel_j, panel_i) -> float:
    """Potential at panel_i's collocation point from a unit source on panel_j."""
    if isinstance(panel_j, Panel3D):
        point = panel_j.transform(panel_i.collocation_point())
        return float(quadrilateral_source_potential(1.0, panel_j.local_corners, point))

    xp, zp = panel_j.transform(*panel_i.collocation_point())
    return float(source_potential(1.0, xp, zp, 0.0, panel_j.length))


def source_strength(panel, u) -> float:
    """Prescribed source strength cancelling the freestream normal component."""
    normal = panel.unit_normal if isinstance(panel, Panel3D) else panel.normal
    return -float(np.dot(u, normal))


def boundary_condition(panel_j, panel_i, u) -> float:
    """Contribution of panel_j's source term to the right-hand side of row i."""
    return -source_influence(panel_j, panel_i) * source_strength(panel_j, u)


# ----------------------------------------------------------------------
# 2D matrices
# ----------------------------------------------------------------------
def doublet_matrix(panels: Sequence[Panel2D], points) -> np.ndarray:
    """Unit doublet potentials, shape (len(points), len(panels)); no diagonal fix-up."""
    points = np.asarray(points, dtype=float)
    matrix = np.empty((len(points), len(panels)))
    for j, panel in enumerate(panels):
        xp, zp = panel.transform(points[:, 0], points[:, 1])
        matrix[:, j] = doublet_potential(1.0, xp, zp, 0.0, panel.length)
    return matrix


def source_matrix(panels: Sequence[Panel2D], points) -> np.ndarray:
    """Unit source potentials, shape (len(points), len(panels))."""
    points = np.asarray(points, dtype=float)
    matrix = np.empty((len(points), len(panels)))
    for j, panel in enumerate(panels):
        xp, zp = panel.transform(points[:, 0], points[:, 1])
        matrix[:, j] = source_potential(1.0, xp, zp, 0.0, panel.length)
    return matrix


def wake_influence(wakes, points) -> np.ndarray:
    """Combined unit-strength doublet potential of a wake chain at each point."""
    return doublet_matrix(wakes, points).sum(axis=1)


def influence_matrix(panels: Sequence[Panel2D], wakes) -> np.ndarray:
    """Square doublet influence matrix with the Kutta coupling folded in."""
    points = collocation_points(panels)
    matrix = doublet_matrix(panels, points)
    np.fill_diagonal(matrix, SELF_INFLUENCE)

    w = wake_influence(wakes, points)
    matrix[:, -1] += w
    matrix[:, 0] -= w

    logger.debug("Assembled %d x %d influence matrix (%d wake panels)", *matrix.shape, len(wakes))
    return matrix


def source_strengths(panels: Sequence[Panel2D], u) -> np.ndarray:
    return -np.array([panel.normal for panel in panels]) @ np.asarray(u, dtype=float)


def boundary_vector(panels: Sequence[Panel2D], u) -> np.ndarray:
    """Right-hand side b = -B sigma."""
    points = collocation_points(panels)
    return -source_matrix(panels, points) @ source_strengths(panels, u)


# ----------------------------------------------------------------------
# 3D matrices
# ----------------------------------------------------------------------
def _flat_index(i: int, j: int, n_span: int) -> int:
    return i * n_span + j


def quadrilateral_matrices(panels, points):
    """Unit doublet and source potentials of flattened 3D panels at ``points``."""
    points = np.asarray(points, dtype=float)
    doublets = np.empty((len(points), len(panels)))
    sources = np.empty((len(points), len(panels)))
    for j, panel in enumerate(panels):
        local = panel.transform(points)
        corners = panel.local_corners
        doublets[:, j] = quadrilateral_doublet_potential(1.0, corners, local)
        sources[:, j] = quadrilateral_source_potential(1.0, corners, local)
    return doublets, sources


def assemble_3d(grid: np.ndarray, wakes, velocity):
    """
    Influence matrix and right-hand side for an (m, n) panel grid.

    Returns:
        Tuple of (matrix, boundary condition vector), both over the
        row-major flattened grid.
    """
    m, n = grid.shape
    flat = grid.ravel()
    points = np.array([panel.collocation_point() for panel in flat])

    matrix, sources = quadrilateral_matrices(flat, points)
    np.fill_diagonal(matrix, SELF_INFLUENCE)

    wake_doublets, _ = quadrilateral_matrices(wakes, points)
    for j in range(n):
        matrix[:, _flat_index(m - 1, j, n)] += wake_doublets[:, j]
        matrix[:, _flat_index(0, j, n)] -= wake_doublets[:, j]

    sigma = np.array([source_strength(panel, velocity) for panel in flat])
    rhs = -sources @ sigma

    logger.debug("Assembled %d x %d 3D influence matrix (%d wake strips)", *matrix.shape, n)
    return matrix, rhs
