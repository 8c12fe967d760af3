"""Unit tests for state document stores."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from microdeploy.domain.models.resources import DeploymentState, VMRecord
from microdeploy.infrastructure.persistence import (
    DeploymentStateManager,
    InMemoryStateStore,
    JsonFileStateStore,
    StateStoreError,
)


class TestInMemoryStateStore:
    @pytest.mark.asyncio
    async def test_starts_empty(self) -> None:
        state = await InMemoryStateStore().load()
        assert state == DeploymentState()

    @pytest.mark.asyncio
    async def test_initial_state(self) -> None:
        vm = VMRecord(cid="v1")
        store = InMemoryStateStore(DeploymentState(vms=[vm], current_vm_id=vm.id))
        state = await store.load()
        assert state.current_vm_id == vm.id

    @pytest.mark.asyncio
    async def test_save_copies(self) -> None:
        store = InMemoryStateStore()
        state = DeploymentState(director_id="a")
        await store.save(state)
        state.director_id = "b"
        assert (await store.load()).director_id == "a"


class TestJsonFileStateStore:
    @pytest.mark.asyncio
    async def test_missing_file_is_empty(self, tmp_path: Path) -> None:
        store = JsonFileStateStore(tmp_path / "state.json")
        assert await store.load() == DeploymentState()

    @pytest.mark.asyncio
    async def test_blank_file_is_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text("  \n")
        assert await JsonFileStateStore(path).load() == DeploymentState()

    @pytest.mark.asyncio
    async def test_round_trip(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "state.json"
        store = JsonFileStateStore(path)
        vm = VMRecord(cid="i-123")
        await store.save(DeploymentState(installation_id="inst", vms=[vm], current_vm_id=vm.id))

        loaded = await store.load()
        assert loaded.installation_id == "inst"
        assert loaded.vms == [vm]

        on_disk = json.loads(path.read_text())
        assert on_disk["current_vm_id"] == vm.id
        assert on_disk["vms"][0]["cid"] == "i-123"

    @pytest.mark.asyncio
    async def test_invalid_content(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text('{"vms": "not-a-list"}')
        with pytest.raises(StateStoreError, match="Invalid deployment state"):
            await JsonFileStateStore(path).load()

    @pytest.mark.asyncio
    async def test_dangling_current_pointer(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        path.write_text('{"current_vm_id": "ghost", "vms": []}')
        with pytest.raises(StateStoreError, match="Invalid deployment state"):
            await JsonFileStateStore(path).load()

    @pytest.mark.asyncio
    async def test_unwritable_path(self, tmp_path: Path) -> None:
        blocker = tmp_path / "file"
        blocker.write_text("")
        store = JsonFileStateStore(blocker / "state.json")
        with pytest.raises(StateStoreError, match="Failed to write"):
            await store.save(DeploymentState())

    @pytest.mark.asyncio
    async def test_manager_persists_through_file(self, tmp_path: Path) -> None:
        path = tmp_path / "state.json"
        manager = DeploymentStateManager(JsonFileStateStore(path))
        disk = await manager.disks.save("disk-1", 512)
        await manager.disks.update_current(disk.id)

        reopened = DeploymentStateManager(JsonFileStateStore(path))
        assert await reopened.disks.find_current() == disk
