"""Progress stage implementations."""

from __future__ import annotations

import time
from enum import Enum

import structlog

from microdeploy.domain.ports.services import Stage, Step
from microdeploy.infrastructure.observability.metrics import TEARDOWN_STEPS_TOTAL


logger = structlog.get_logger(__name__)


class StepState(str, Enum):
    """Lifecycle transitions of a progress step."""

    STARTED = "started"
    FINISHED = "finished"
    SKIPPED = "skipped"
    FAILED = "failed"


class LoggedStep(Step):
    """Step that logs each transition and keeps its own history."""

    def __init__(self, name: str, stage_name: str) -> None:
        self.name = name
        self.stage_name = stage_name
        self.states: list[StepState] = []
        self.skip_reason = ""
        self.error = ""
        self._started_at: float | None = None

    def start(self) -> None:
        self._started_at = time.monotonic()
        self.states.append(StepState.STARTED)
        logger.info("step_started", stage=self.stage_name, step=self.name)

    def finish(self) -> None:
        self.states.append(StepState.FINISHED)
        TEARDOWN_STEPS_TOTAL.labels(outcome=StepState.FINISHED.value).inc()
        logger.info(
            "step_finished",
            stage=self.stage_name,
            step=self.name,
            duration_seconds=self.duration_seconds,
        )

    def fail(self, error: BaseException) -> None:
        self.error = str(error)
        self.states.append(StepState.FAILED)
        TEARDOWN_STEPS_TOTAL.labels(outcome=StepState.FAILED.value).inc()
        logger.error("step_failed", stage=self.stage_name, step=self.name, error=self.error)

    def skip(self, reason: str) -> None:
        self.skip_reason = reason
        self.states.append(StepState.SKIPPED)
        TEARDOWN_STEPS_TOTAL.labels(outcome=StepState.SKIPPED.value).inc()
        logger.info("step_skipped", stage=self.stage_name, step=self.name, reason=reason)

    @property
    def duration_seconds(self) -> float:
        if self._started_at is None:
            return 0.0
        return round(time.monotonic() - self._started_at, 3)


class LoggingStage(Stage):
    """Stage that only reports progress through structured logs."""

    def __init__(self, name: str = "deleting deployment") -> None:
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def new_step(self, name: str) -> Step:
        return LoggedStep(name, self._name)


class RecordingStage(LoggingStage):
    """Stage that logs progress and keeps every step for later inspection."""

    def __init__(self, name: str = "deleting deployment") -> None:
        super().__init__(name)
        self._steps: list[LoggedStep] = []

    def new_step(self, name: str) -> Step:
        step = LoggedStep(name, self._name)
        self._steps.append(step)
        return step

    @property
    def steps(self) -> list[LoggedStep]:
        return list(self._steps)

    @property
    def step_names(self) -> list[str]:
        return [step.name for step in self._steps]
