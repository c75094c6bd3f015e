# Open-Panel Configuration Module
from .solver_config import (
    PanelMethodConfig, config, WakeParams, NumericsParams, ReferenceParams
)

__all__ = [
    "PanelMethodConfig", "config", "WakeParams", "NumericsParams",
    "ReferenceParams"
]
