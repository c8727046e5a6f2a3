r"""Ordered scenario steps and the driver that runs them."""

from __future__ import annotations

__all__ = [
    "ScenarioContext",
    "ScenarioDriver",
    "ScenarioReport",
    "ScenarioStep",
    "StepResult",
    "StepStatus",
    "student_crud_steps",
]

from crudprobe.scenario.context import ScenarioContext
from crudprobe.scenario.driver import (
    ScenarioDriver,
    ScenarioReport,
    ScenarioStep,
    StepResult,
    StepStatus,
)
from crudprobe.scenario.students import student_crud_steps
