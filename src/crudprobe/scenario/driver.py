r"""Sequential driver for an ordered list of scenario steps.

The driver first runs the readiness gate, then every step in order. A
failed step is recorded and, unless ``stop_on_failure`` is set, the next
step still runs. Nothing runs when the readiness gate fails.
"""

from __future__ import annotations

__all__ = ["ScenarioDriver", "ScenarioReport", "ScenarioStep", "StepResult", "StepStatus"]

import logging
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from crudprobe.exceptions import CrudProbeError, RetryInterruptedError
from crudprobe.scenario.context import ScenarioContext
from crudprobe.utils.structured_logging import (
    clear_correlation_id,
    log_structured,
    set_correlation_id,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from crudprobe.client import StudentServiceClient
    from crudprobe.retry import RetryRunner

logger: logging.Logger = logging.getLogger(__name__)


class StepStatus(str, Enum):
    PASSED = "passed"
    DEGRADED = "degraded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class ScenarioStep:
    """One named step of a scenario.

    Attributes:
        name: Short identifier, e.g. ``"create_student"``.
        action: Callable receiving the client, the runner and the
            context. Returns a status and a progress message, or raises
            to fail the step.
    """

    name: str
    action: Callable[[StudentServiceClient, RetryRunner, ScenarioContext], tuple[StepStatus, str]]


@dataclass
class StepResult:
    name: str
    status: StepStatus
    message: str
    duration: float
    error: Exception | None = None


@dataclass
class ScenarioReport:
    """Results of one scenario run.

    Attributes:
        run_id: Identifier of the run, also used as log correlation ID.
        base_url: Base URL of the service under test.
        ready: False if the readiness gate failed.
        readiness_error: The error raised by the readiness gate, if any.
        results: One result per step, in execution order.
    """

    run_id: str
    base_url: str
    ready: bool = False
    readiness_error: Exception | None = None
    results: list[StepResult] = field(default_factory=list)

    @property
    def failed(self) -> list[StepResult]:
        return [result for result in self.results if result.status is StepStatus.FAILED]

    @property
    def ok(self) -> bool:
        return self.ready and not self.failed

    def count(self, status: StepStatus) -> int:
        return sum(1 for result in self.results if result.status is status)

    def summary(self) -> str:
        if not self.ready:
            return f"Service at {self.base_url} never became ready: {self.readiness_error}"
        parts = [
            f"{self.count(status)} {status.value}"
            for status in StepStatus
            if self.count(status)
        ]
        return f"{len(self.results)} steps: " + ", ".join(parts)


class ScenarioDriver:
    """Runs scenario steps one after another against one service.

    Args:
        steps: The steps in execution order.
        reporter: Optional callable receiving one progress line per
            step. Defaults to logging at INFO level.
    """

    def __init__(
        self,
        steps: Iterable[ScenarioStep],
        *,
        reporter: Callable[[str], None] | None = None,
    ) -> None:
        self.steps = tuple(steps)
        names = [step.name for step in self.steps]
        if len(set(names)) != len(names):
            msg = f"step names must be unique, got {names}"
            raise ValueError(msg)
        self._reporter = reporter or logger.info

    def run(
        self,
        client: StudentServiceClient,
        runner: RetryRunner,
        context: ScenarioContext | None = None,
        *,
        stop_on_failure: bool = False,
        run_id: str | None = None,
    ) -> ScenarioReport:
        """Run the readiness gate, then every step in order.

        Args:
            client: Client pointing at the service under test.
            runner: Retry runner shared by the gate and every step.
            context: Shared scenario state. A fresh one is created if
                ``None``.
            stop_on_failure: If True, steps after the first failed one
                are reported as skipped.
            run_id: Identifier of the run. Generated if ``None``.

        Returns:
            The report of the run.

        Raises:
            RetryInterruptedError: If the runner is cancelled.
        """
        context = context or ScenarioContext()
        report = ScenarioReport(run_id=run_id or uuid.uuid4().hex, base_url=client.base_url)
        set_correlation_id(report.run_id)
        try:
            try:
                runner.await_ready(client)
            except RetryInterruptedError:
                raise
            except CrudProbeError as exc:
                report.readiness_error = exc
                logger.error(f"Readiness check failed: {exc}")
                self._reporter(f"❌ Service at {client.base_url} is not ready: {exc}")
                return report
            report.ready = True

            halted = False
            for step in self.steps:
                if halted:
                    report.results.append(
                        StepResult(step.name, StepStatus.SKIPPED, "skipped after failure", 0.0)
                    )
                    continue
                result = self._run_step(step, client, runner, context)
                report.results.append(result)
                halted = stop_on_failure and result.status is StepStatus.FAILED
            return report
        finally:
            clear_correlation_id()

    def _run_step(
        self,
        step: ScenarioStep,
        client: StudentServiceClient,
        runner: RetryRunner,
        context: ScenarioContext,
    ) -> StepResult:
        start_time = time.time()
        try:
            status, message = step.action(client, runner, context)
        except RetryInterruptedError:
            raise
        except Exception as exc:
            duration = time.time() - start_time
            logger.debug(f"Step {step.name} raised {type(exc).__name__}", exc_info=exc)
            self._reporter(f"❌ {step.name} failed: {exc}")
            log_structured(
                logger, logging.INFO, "Step finished", step=step.name, status="failed"
            )
            return StepResult(step.name, StepStatus.FAILED, str(exc), duration, error=exc)

        duration = time.time() - start_time
        icon = "✅" if status is StepStatus.PASSED else "⚠️"
        self._reporter(f"{icon} {step.name} {status.value}: {message}")
        log_structured(
            logger, logging.INFO, "Step finished", step=step.name, status=status.value
        )
        return StepResult(step.name, status, message, duration)
