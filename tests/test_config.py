"""Configuration singleton checks."""

import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from panel_config import PanelMethodConfig, config


def test_default_config_is_valid():
    assert config.validate() == []


def test_invalid_values_reported():
    cfg = PanelMethodConfig()
    cfg.wake.length = -1.0
    cfg.wake.num_panels = 0
    cfg.numerics.kutta_tolerance = 0.0
    cfg.reference.chord = 0.0

    errors = cfg.validate()
    assert len(errors) == 4, errors
    assert any("kutta_tolerance" in err for err in errors)


def test_instances_do_not_share_state():
    cfg = PanelMethodConfig()
    cfg.wake.length = 5.0
    assert config.wake.length == 100.0


def test_summary_mentions_key_settings():
    text = config.summary()
    assert "Open-Panel" in text
    assert "Kutta Tolerance" in text
