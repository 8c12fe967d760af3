"""Repository port interfaces (hexagonal architecture)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from microdeploy.domain.models.resources import (
    DeploymentState,
    DiskRecord,
    StemcellRecord,
    VMRecord,
)


class StateStore(ABC):
    """Port for loading and saving the deployment state document."""

    @abstractmethod
    async def load(self) -> DeploymentState:
        """Load the state document, or an empty one if none was saved."""

    @abstractmethod
    async def save(self, state: DeploymentState) -> None:
        """Persist the state document."""


class VMRepository(ABC):
    """Port for VM record persistence."""

    @abstractmethod
    async def save(self, cid: str) -> VMRecord:
        """Record a provisioned VM."""

    @abstractmethod
    async def find_current(self) -> VMRecord | None:
        """Return the current VM record, if any."""

    @abstractmethod
    async def update_current(self, record_id: str) -> None:
        """Point the current VM at an existing record."""

    @abstractmethod
    async def clear_current(self) -> None:
        """Unset the current VM pointer. No-op when already unset."""

    @abstractmethod
    async def all(self) -> list[VMRecord]:
        """List all VM records in insertion order."""

    @abstractmethod
    async def delete(self, record: VMRecord) -> None:
        """Remove a VM record and clear the current pointer if it pointed there.

        No-op when absent.
        """


class DiskRepository(ABC):
    """Port for disk record persistence."""

    @abstractmethod
    async def save(
        self, cid: str, size: int, cloud_properties: dict[str, Any] | None = None
    ) -> DiskRecord:
        """Record a provisioned disk."""

    @abstractmethod
    async def find_current(self) -> DiskRecord | None:
        """Return the current disk record, if any."""

    @abstractmethod
    async def update_current(self, record_id: str) -> None:
        """Point the current disk at an existing record."""

    @abstractmethod
    async def clear_current(self) -> None:
        """Unset the current disk pointer. No-op when already unset."""

    @abstractmethod
    async def all(self) -> list[DiskRecord]:
        """List all disk records in insertion order."""

    @abstractmethod
    async def delete(self, record: DiskRecord) -> None:
        """Remove a disk record (and the current pointer to it). No-op when absent."""


class StemcellRepository(ABC):
    """Port for stemcell record persistence."""

    @abstractmethod
    async def save(self, name: str, version: str, cid: str) -> StemcellRecord:
        """Record an uploaded stemcell."""

    @abstractmethod
    async def find_current(self) -> StemcellRecord | None:
        """Return the current stemcell record, if any."""

    @abstractmethod
    async def update_current(self, record_id: str) -> None:
        """Point the current stemcell at an existing record."""

    @abstractmethod
    async def clear_current(self) -> None:
        """Unset the current stemcell pointer. No-op when already unset."""

    @abstractmethod
    async def all(self) -> list[StemcellRecord]:
        """List all stemcell records in insertion order."""

    @abstractmethod
    async def delete(self, record: StemcellRecord) -> None:
        """Remove a stemcell record (and the current pointer to it). No-op when absent."""
