"""Deployment state persistence."""

from microdeploy.infrastructure.persistence.repositories import (
    DeploymentStateManager,
    RecordNotFoundError,
    StateDiskRepository,
    StateStemcellRepository,
    StateVMRepository,
)
from microdeploy.infrastructure.persistence.state_store import (
    InMemoryStateStore,
    JsonFileStateStore,
    StateStoreError,
)


__all__ = [
    "DeploymentStateManager",
    "InMemoryStateStore",
    "JsonFileStateStore",
    "RecordNotFoundError",
    "StateDiskRepository",
    "StateStemcellRepository",
    "StateStoreError",
    "StateVMRepository",
]
