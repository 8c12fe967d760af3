"""Service port interfaces (hexagonal architecture)."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class Cloud(ABC):
    """Port for the infrastructure (CPI) client.

    Delete operations raise ``CloudError``; a kind-specific not-found
    classification is carried on ``CloudError.kind``.
    """

    @abstractmethod
    async def has_vm(self, vm_cid: str) -> bool:
        """Check whether a VM still exists."""

    @abstractmethod
    async def delete_vm(self, vm_cid: str) -> None:
        """Delete a VM."""

    @abstractmethod
    async def delete_disk(self, disk_cid: str) -> None:
        """Delete a persistent disk."""

    @abstractmethod
    async def delete_stemcell(self, stemcell_cid: str) -> None:
        """Delete a stemcell image."""


class AgentClient(ABC):
    """Port for the in-VM agent. Failures raise ``AgentClientError``."""

    @abstractmethod
    async def ping(self) -> str:
        """Probe the agent; returns its reported state."""

    @abstractmethod
    async def stop(self) -> None:
        """Stop all jobs on the instance."""

    @abstractmethod
    async def list_disk(self) -> list[str]:
        """List CIDs of the disks currently mounted on the VM."""

    @abstractmethod
    async def unmount_disk(self, disk_cid: str) -> None:
        """Unmount a disk."""


class Step(ABC):
    """A single named unit of progress."""

    @abstractmethod
    def start(self) -> None:
        """Mark the step as started."""

    @abstractmethod
    def finish(self) -> None:
        """Mark the step as finished successfully."""

    @abstractmethod
    def fail(self, error: BaseException) -> None:
        """Mark the step as failed."""

    @abstractmethod
    def skip(self, reason: str) -> None:
        """Mark the step as skipped."""


class Stage(ABC):
    """Port for progress reporting."""

    @abstractmethod
    def new_step(self, name: str) -> Step:
        """Create a new named step."""


class EventPublisher(ABC):
    """Port for publishing domain events."""

    @abstractmethod
    async def publish(self, event_type: str, payload: dict[str, Any]) -> None:
        """Publish an event."""


class DistributedLock(ABC):
    """Port for distributed locking."""

    @abstractmethod
    async def acquire(self, resource_id: str, ttl_seconds: int = 30) -> bool:
        """Acquire a distributed lock."""

    @abstractmethod
    async def release(self, resource_id: str) -> bool:
        """Release a distributed lock."""

    @abstractmethod
    async def is_locked(self, resource_id: str) -> bool:
        """Check if a resource is locked."""
