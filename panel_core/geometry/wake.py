"""Wake panels trailing a body to close its circulation (Kutta condition)."""

from __future__ import annotations

import logging
import math
from typing import List

import numpy as np

from ..errors import PanelValidationError
from .panels_2d import WakePanel2D
from .panels_3d import WakePanel3D

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


def _check_length(length: float) -> float:
    length = float(length)
    if not math.isfinite(length) or length <= 0:
        raise PanelValidationError(f"Wake length must be positive and finite, got {length}")
    return length


def trailing_edge_point(panels) -> np.ndarray:
    """Trailing-edge x with the mean of the first and last endpoint heights."""
    first, last = panels[0], panels[-1]
    return np.array([last.p2[0], (first.p1[1] + last.p2[1]) / 2])


def wake_panel(panels, length: float, angle: float) -> WakePanel2D:
    """
    Single wake panel leaving the trailing edge along the freestream.

    Args:
        panels: Surface panel sequence
        length: Wake length
        angle: Freestream angle in radians
    """
    length = _check_length(length)
    start = trailing_edge_point(panels)
    end = start + length * np.array([math.cos(angle), math.sin(angle)])
    logger.debug("Wake panel from %s to %s", start, end)
    return WakePanel2D(start, end)


def cosine_stations(length: float, num: int) -> np.ndarray:
    """``num + 1`` cosine-spaced stations on [0, length], clustered at both ends."""
    return length / 2 * (1 - np.cos(np.linspace(0.0, math.pi, num + 1)))


def wake_panels(panels, length: float, angle: float, num: int) -> List[WakePanel2D]:
    """
    Chain of ``num`` cosine-spaced wake panels covering the same extent as
    :func:`wake_panel`.
    """
    length = _check_length(length)
    if int(num) < 1:
        raise PanelValidationError(f"Wake panel count must be at least 1, got {num}")

    start = trailing_edge_point(panels)
    direction = np.array([math.cos(angle), math.sin(angle)])
    nodes = start + cosine_stations(length, int(num))[:, None] * direction
    logger.debug("Wake chain of %d panels ending at %s", num, nodes[-1])
    return [WakePanel2D(a, b) for a, b in zip(nodes[:-1], nodes[1:])]


def wake_panels_3d(surface_panels, length: float, direction) -> List[WakePanel3D]:
    """
    One wake panel per spanwise strip of an (m, n) surface grid.

    Each wake leaves the strip's trailing edge (mean of the lower and upper
    trailing-edge edges) along ``direction``.
    """
    length = _check_length(length)
    d_hat = np.asarray(direction, dtype=float)
    d_hat = d_hat / np.linalg.norm(d_hat)

    grid = np.asarray(surface_panels, dtype=object)
    wakes = []
    for j in range(grid.shape[1]):
        lower, upper = grid[0, j], grid[-1, j]
        te_inner = (lower.p1 + upper.p2) / 2
        te_outer = (lower.p4 + upper.p3) / 2
        wakes.append(WakePanel3D(
            te_inner,
            te_inner + length * d_hat,
            te_outer + length * d_hat,
            te_outer,
        ))
    return wakes
