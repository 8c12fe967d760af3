"""Unit tests for running actions as progress steps."""

from __future__ import annotations

import pytest

from microdeploy.domain.services.steps import perform_step, SkipStepError
from microdeploy.infrastructure.progress.stage import RecordingStage, StepState


class TestPerformStep:
    @pytest.mark.asyncio
    async def test_finishes(self, stage: RecordingStage) -> None:
        ran = []

        async def action() -> None:
            ran.append(True)

        assert await perform_step(stage, "Doing it", action) is True
        assert ran == [True]
        assert stage.steps[0].states == [StepState.STARTED, StepState.FINISHED]

    @pytest.mark.asyncio
    async def test_skips(self, stage: RecordingStage) -> None:
        async def action() -> None:
            raise SkipStepError("nothing to do")

        assert await perform_step(stage, "Doing it", action) is False
        step = stage.steps[0]
        assert step.states == [StepState.STARTED, StepState.SKIPPED]
        assert step.skip_reason == "nothing to do"

    @pytest.mark.asyncio
    async def test_fails_and_reraises(self, stage: RecordingStage) -> None:
        async def action() -> None:
            raise RuntimeError("broken")

        with pytest.raises(RuntimeError, match="broken"):
            await perform_step(stage, "Doing it", action)
        step = stage.steps[0]
        assert step.states == [StepState.STARTED, StepState.FAILED]
        assert step.error == "broken"
