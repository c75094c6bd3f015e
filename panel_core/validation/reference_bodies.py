"""
Open-Panel: Reference Bodies
============================

Closed-form geometries with known potential-flow solutions, used by the
regression scenarios and the test suite. 2D sections are returned in
Selig order (upper trailing edge -> leading edge -> lower trailing edge),
ready for ``make_panels``.
"""

from __future__ import annotations

import numpy as np

from ..errors import PanelValidationError

# Last thickness coefficient of the closed-trailing-edge NACA 4-digit form
NACA_CLOSED_TE_COEFF = -0.1036


def cosine_spacing(num: int) -> np.ndarray:
    """``num + 1`` chordwise stations on [0, 1], clustered at both ends."""
    return 0.5 * (1 - np.cos(np.linspace(0.0, np.pi, num + 1)))


def naca4_thickness(x, thickness: float) -> np.ndarray:
    """Half-thickness of a NACA 4-digit section (closed trailing edge)."""
    x = np.asarray(x, dtype=float)
    return 5 * thickness * (
        0.2969 * np.sqrt(x) - 0.1260 * x - 0.3516 * x**2
        + 0.2843 * x**3 + NACA_CLOSED_TE_COEFF * x**4
    )


def naca4_symmetric(thickness: float = 0.12, num_panels: int = 40, chord: float = 1.0) -> np.ndarray:
    """
    Symmetric NACA 00xx coordinates with cosine spacing.

    Args:
        thickness: Maximum thickness as a fraction of chord (0.12 for NACA 0012)
        num_panels: Total panel count, split evenly between the surfaces
        chord: Chord length

    Returns:
        (num_panels + 1, 2) coordinates in Selig order
    """
    if num_panels < 4 or num_panels % 2:
        raise PanelValidationError(f"Panel count must be an even number >= 4, got {num_panels}")

    x = cosine_spacing(num_panels // 2)
    y = naca4_thickness(x, thickness)

    upper = np.column_stack([x[::-1], y[::-1]])
    lower = np.column_stack([x[1:], -y[1:]])
    return chord * np.vstack([upper, lower])


def circle(num_panels: int = 80, radius: float = 1.0) -> np.ndarray:
    """Circle of ``radius`` centred on the origin, starting and ending at (radius, 0)."""
    theta = np.linspace(0.0, 2 * np.pi, num_panels + 1)
    return radius * np.column_stack([np.cos(theta), np.sin(theta)])


def sphere_grid(num_chord: int = 20, num_span: int = 20, radius: float = 1.0) -> np.ndarray:
    """
    Structured sphere surface grid, shape (num_chord + 1, num_span + 1, 3).

    The first index wraps around the x-z meridian from the rear point
    (x = radius) under the sphere to the front and back over the top; the
    second index runs from pole y = -radius to pole y = +radius.
    """
    t = np.linspace(0.0, -2 * np.pi, num_chord + 1)[:, None]
    psi = np.linspace(-np.pi / 2, np.pi / 2, num_span + 1)[None, :]

    return radius * np.stack([
        np.cos(psi) * np.cos(t),
        np.sin(psi) * np.ones_like(t),
        np.cos(psi) * np.sin(t),
    ], axis=-1)
