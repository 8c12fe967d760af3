"""Helpers for running actions as progress steps."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

from microdeploy.domain.ports.services import Stage


class SkipStepError(Exception):
    """Raised by a step action to mark its step as skipped instead of failed."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


async def perform_step(
    stage: Stage, name: str, action: Callable[[], Awaitable[None]]
) -> bool:
    """Run ``action`` inside a new step named ``name``.

    Returns False when the action skipped the step. Any other exception
    fails the step and is re-raised.
    """
    step = stage.new_step(name)
    step.start()
    try:
        await action()
    except SkipStepError as e:
        step.skip(e.reason)
        return False
    except Exception as e:
        step.fail(e)
        raise
    step.finish()
    return True
