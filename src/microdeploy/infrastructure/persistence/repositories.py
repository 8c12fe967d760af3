"""Resource repositories backed by a single deployment state document."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any, Generic, TypeVar

import structlog

from microdeploy.domain.models.resources import (
    DeploymentState,
    DiskRecord,
    StemcellRecord,
    VMRecord,
)
from microdeploy.domain.ports.repositories import (
    DiskRepository,
    StateStore,
    StemcellRepository,
    VMRepository,
)


logger = structlog.get_logger(__name__)

RecordT = TypeVar("RecordT", VMRecord, DiskRecord, StemcellRecord)
ResultT = TypeVar("ResultT")


class RecordNotFoundError(Exception):
    """Raised when a record id does not exist in the state document."""


class DeploymentStateManager:
    """Single owner of the persisted deployment state.

    All repository views mutate state through :meth:`mutate`, which runs
    load, change and save as one step under a lock.
    """

    def __init__(self, store: StateStore) -> None:
        self._store = store
        self._lock = asyncio.Lock()
        self.vms = StateVMRepository(self)
        self.disks = StateDiskRepository(self)
        self.stemcells = StateStemcellRepository(self)

    async def snapshot(self) -> DeploymentState:
        """Return a copy of the current state document."""
        return await self._store.load()

    async def mutate(self, change: Callable[[DeploymentState], ResultT]) -> ResultT:
        """Apply ``change`` to the state document and persist it."""
        async with self._lock:
            state = await self._store.load()
            result = change(state)
            await self._store.save(state)
            return result

    async def set_identity(self, director_id: str, installation_id: str) -> None:
        def _change(state: DeploymentState) -> None:
            state.director_id = director_id
            state.installation_id = installation_id

        await self.mutate(_change)


class _RecordView(Generic[RecordT]):
    """Record list plus current pointer for one resource kind."""

    records_field: str = ""
    current_field: str = ""

    def __init__(self, manager: DeploymentStateManager) -> None:
        self._manager = manager

    def _records(self, state: DeploymentState) -> list[RecordT]:
        return getattr(state, self.records_field)

    def _find(self, state: DeploymentState, record_id: str) -> RecordT | None:
        for record in self._records(state):
            if record.id == record_id:
                return record
        return None

    async def _add(self, record: RecordT) -> RecordT:
        def _change(state: DeploymentState) -> None:
            self._records(state).append(record)

        await self._manager.mutate(_change)
        logger.debug("record_saved", kind=self.records_field, record_id=record.id, cid=record.cid)
        return record

    async def find_current(self) -> RecordT | None:
        state = await self._manager.snapshot()
        current_id = getattr(state, self.current_field)
        if not current_id:
            return None
        return self._find(state, current_id)

    async def update_current(self, record_id: str) -> None:
        def _change(state: DeploymentState) -> None:
            if self._find(state, record_id) is None:
                raise RecordNotFoundError(
                    f"No {self.records_field} record with id '{record_id}'"
                )
            setattr(state, self.current_field, record_id)

        await self._manager.mutate(_change)

    async def clear_current(self) -> None:
        def _change(state: DeploymentState) -> None:
            setattr(state, self.current_field, "")

        await self._manager.mutate(_change)

    async def all(self) -> list[RecordT]:
        state = await self._manager.snapshot()
        return list(self._records(state))

    async def delete(self, record: RecordT) -> None:
        def _change(state: DeploymentState) -> None:
            records = self._records(state)
            records[:] = [r for r in records if r.id != record.id]
            # A current pointer never outlives its record
            if getattr(state, self.current_field) == record.id:
                setattr(state, self.current_field, "")

        await self._manager.mutate(_change)
        logger.debug("record_deleted", kind=self.records_field, record_id=record.id)


class StateVMRepository(_RecordView[VMRecord], VMRepository):
    records_field = "vms"
    current_field = "current_vm_id"

    async def save(self, cid: str) -> VMRecord:
        return await self._add(VMRecord(cid=cid))


class StateDiskRepository(_RecordView[DiskRecord], DiskRepository):
    records_field = "disks"
    current_field = "current_disk_id"

    async def save(
        self, cid: str, size: int, cloud_properties: dict[str, Any] | None = None
    ) -> DiskRecord:
        return await self._add(
            DiskRecord(cid=cid, size=size, cloud_properties=cloud_properties or {})
        )


class StateStemcellRepository(_RecordView[StemcellRecord], StemcellRepository):
    records_field = "stemcells"
    current_field = "current_stemcell_id"

    async def save(self, name: str, version: str, cid: str) -> StemcellRecord:
        return await self._add(StemcellRecord(name=name, version=version, cid=cid))
