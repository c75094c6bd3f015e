"""Potential-flow regression scenarios anchored to analytical baselines."""

from __future__ import annotations

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Tuple


from ..doublet_source import (
    kutta_consistency, lift_coefficient, pressure_lift_coefficient, solve_system,
    solve_system_3d, surface_coefficients, surface_coefficients_3d,
)
from ..geometry import make_panels, make_panels_3d
from ..laplace import Freestream, Uniform2D
from .reference_bodies import circle, naca4_symmetric, sphere_grid


@dataclass
class ScenarioResult:
    name: str
    metrics: Dict[str, float]


@dataclass
class RegressionScenario:
    name: str
    description: str
    evaluate: Callable[[], ScenarioResult]


class RegressionRunner:
    """Run deterministic panel-method regressions for CI validation."""

    def __init__(self, tolerance: float = 0.15):
        self.tolerance = tolerance
        self.scenarios: List[RegressionScenario] = [
            RegressionScenario(
                name="naca0012_alpha5",
                description="NACA 0012, 40 cosine panels, 5 deg: lift vs 2 pi sin(alpha)",
                evaluate=self._naca0012_alpha5,
            ),
            RegressionScenario(
                name="cylinder_uniform_flow",
                description="Circular cylinder in uniform flow: suction peak Cp = -3",
                evaluate=self._cylinder_uniform_flow,
            ),
            RegressionScenario(
                name="sphere_uniform_flow",
                description="Sphere in uniform flow: suction peak Cp = -1.25, stagnation Cp = 1",
                evaluate=self._sphere_uniform_flow,
            ),
        ]

    def _naca0012_alpha5(self) -> ScenarioResult:
        panels = make_panels(naca4_symmetric(0.12, 40))
        system = solve_system(panels, Uniform2D(1.0, 5.0), wake_length=100.0)
        return ScenarioResult(
            name="naca0012_alpha5",
            metrics={
                "cl_wake": lift_coefficient(system),
                "cl_pressure": pressure_lift_coefficient(system),
            },
        )

    def _cylinder_uniform_flow(self) -> ScenarioResult:
        panels = make_panels(circle(80))
        system = solve_system(panels, Uniform2D(1.0, 0.0))
        _, _, cps = surface_coefficients(system)
        return ScenarioResult(
            name="cylinder_uniform_flow",
            metrics={"cp_min": float(cps.min())},
        )

    def _sphere_uniform_flow(self) -> ScenarioResult:
        panels = make_panels_3d(sphere_grid(20, 20))
        system = solve_system_3d(panels, Freestream(1.0), wake_length=10.0)
        coeffs = surface_coefficients_3d(system, area=math.pi)
        return ScenarioResult(
            name="sphere_uniform_flow",
            metrics={
                "cp_min": float(coeffs.cps.min()),
                "cp_max": float(coeffs.cps.max()),
            },
        )

    def run(self) -> List[ScenarioResult]:
        """Execute all regression scenarios."""

        results: List[ScenarioResult] = []
        for scenario in self.scenarios:
            results.append(scenario.evaluate())
        return results

    def kutta_report(self) -> Dict[str, float]:
        """Kutta-Joukowski cross-check on a well-resolved lifting section."""
        panels = make_panels(naca4_symmetric(0.12, 120))
        check = kutta_consistency(solve_system(panels, Uniform2D(1.0, 5.0), wake_length=100.0))
        return {
            "cl_pressure": check.cl_pressure,
            "cl_wake": check.cl_wake,
            "mismatch": check.mismatch,
        }

    def to_serializable(
        self, results: Iterable[ScenarioResult]
    ) -> Dict[str, Dict[str, float]]:
        return {res.name: res.metrics for res in results}

    def load_baseline(self, baseline_path: Path) -> Dict[str, Dict[str, float]]:
        with open(baseline_path, "r", encoding="utf-8") as f:
            return json.load(f)

    def compare_to_baseline(
        self,
        baseline_path: Path,
        report_dir: Path,
    ) -> Tuple[bool, Dict[str, Dict[str, float]], List[str]]:
        """Compare regression results to stored baseline with tolerance."""

        report_dir.mkdir(parents=True, exist_ok=True)
        baseline = self.load_baseline(baseline_path)
        current = self.to_serializable(self.run())

        failures: List[str] = []
        for name, metrics in current.items():
            if name not in baseline:
                failures.append(f"Missing baseline for {name}")
                continue

            for metric_name, value in metrics.items():
                if metric_name not in baseline[name]:
                    failures.append(f"Missing baseline metric {metric_name} for {name}")
                    continue

                reference = baseline[name][metric_name]
                if reference == 0:
                    deviation = abs(value - reference)
                else:
                    deviation = abs(value - reference) / abs(reference)

                if deviation > self.tolerance:
                    failures.append(
                        f"{name}:{metric_name} deviated by {deviation:.2%} (value {value:.4f} vs {reference:.4f})"
                    )

        report = {
            "baseline": baseline,
            "current": current,
            "tolerance": self.tolerance,
            "failures": failures,
            "status": "fail" if failures else "pass",
        }

        json_report = report_dir / "panel_validation_report.json"
        with open(json_report, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2)

        return (len(failures) == 0, current, failures)
