"""State store implementations for the deployment state document."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import structlog
from pydantic import ValidationError

from microdeploy.domain.models.resources import DeploymentState
from microdeploy.domain.ports.repositories import StateStore


logger = structlog.get_logger(__name__)


class StateStoreError(Exception):
    """Raised when the state document cannot be read or written."""


class InMemoryStateStore(StateStore):
    """In-memory state store for development and testing."""

    def __init__(self, state: DeploymentState | None = None) -> None:
        self._state = state.model_copy(deep=True) if state else DeploymentState()

    async def load(self) -> DeploymentState:
        return self._state.model_copy(deep=True)

    async def save(self, state: DeploymentState) -> None:
        self._state = state.model_copy(deep=True)


class JsonFileStateStore(StateStore):
    """Stores the state document as a single JSON file.

    A missing or blank file reads as an empty state. No cross-process
    locking is done here.
    """

    def __init__(self, path: Path | str) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    async def load(self) -> DeploymentState:
        return await asyncio.to_thread(self._read)

    async def save(self, state: DeploymentState) -> None:
        await asyncio.to_thread(self._write, state)

    def _read(self) -> DeploymentState:
        if not self._path.exists():
            return DeploymentState()

        try:
            content = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StateStoreError(
                f"Failed to read deployment state at {self._path}: {exc}"
            ) from exc
        if not content.strip():
            return DeploymentState()

        try:
            return DeploymentState.model_validate_json(content)
        except ValidationError as exc:
            raise StateStoreError(
                f"Invalid deployment state format in {self._path}: {exc}"
            ) from exc

    def _write(self, state: DeploymentState) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            payload = json.dumps(state.model_dump(mode="json"), indent=2, sort_keys=True)
            self._path.write_text(payload, encoding="utf-8")
        except OSError as exc:
            raise StateStoreError(
                f"Failed to write deployment state to {self._path}: {exc}"
            ) from exc
        logger.debug("deployment_state_saved", path=str(self._path))
