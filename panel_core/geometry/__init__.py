"""Panel geometry: frames, 2D and 3D panels, and wake construction."""

from .frames import PanelFrame3D, affine_2d, inverse_affine_2d, panel_frame, rotate_2d
from .panels_2d import (
    Panel2D, WakePanel2D, collocation_points, distance, make_panels,
    panel_points, panel_scalar, panel_velocity, split_surface_values,
    trailing_edge_panel, validate_panels,
)
from .panels_3d import Panel3D, WakePanel3D, validate_panel_grid, wetted_area
from .panels_3d import make_panels as make_panels_3d
from .wake import cosine_stations, wake_panel, wake_panels, wake_panels_3d

__all__ = [
    "PanelFrame3D", "affine_2d", "inverse_affine_2d", "panel_frame", "rotate_2d",
    "Panel2D", "WakePanel2D", "collocation_points", "distance", "make_panels",
    "panel_points", "panel_scalar", "panel_velocity", "split_surface_values",
    "trailing_edge_panel", "validate_panels",
    "Panel3D", "WakePanel3D", "make_panels_3d", "validate_panel_grid", "wetted_area",
    "cosine_stations", "wake_panel", "wake_panels", "wake_panels_3d",
]
