"""Unit tests for the deployment aggregate and teardown model."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from microdeploy.domain.events import DeploymentTeardownCompleted, ResourceDeleted
from microdeploy.domain.models.deployment import (
    DEFAULT_JOB_NAME,
    Deployment,
    Instance,
    PHASE_ORDER,
    TeardownAction,
    TeardownPhase,
)
from microdeploy.domain.models.resources import (
    DeploymentState,
    DiskRecord,
    ResourceKind,
    StemcellRecord,
    VMRecord,
)


class TestTeardownPhase:
    def test_order(self) -> None:
        assert PHASE_ORDER == [TeardownPhase.VM, TeardownPhase.DISK, TeardownPhase.STEMCELL]

    def test_resource_kind(self) -> None:
        assert TeardownPhase.DISK.resource_kind == ResourceKind.DISK


class TestTeardownAction:
    def test_step_names(self) -> None:
        assert TeardownAction.WAIT_FOR_AGENT.step_name(cid="vm-1") == (
            "Waiting for the agent on VM 'vm-1'"
        )
        assert TeardownAction.STOP_JOBS.step_name(job="unknown", index=0) == (
            "Stopping jobs on instance 'unknown/0'"
        )
        assert TeardownAction.UNMOUNT_DISK.step_name(cid="d") == "Unmounting disk 'd'"
        assert TeardownAction.DELETE_VM.step_name(cid="v") == "Deleting VM 'v'"
        assert TeardownAction.DELETE_DISK.step_name(cid="d") == "Deleting disk 'd'"
        assert TeardownAction.DELETE_STEMCELL.step_name(cid="s") == "Deleting stemcell 's'"

    def test_phases(self) -> None:
        assert TeardownAction.UNMOUNT_DISK.phase == TeardownPhase.VM
        assert TeardownAction.DELETE_DISK.phase == TeardownPhase.DISK
        assert TeardownAction.DELETE_STEMCELL.phase == TeardownPhase.STEMCELL


class TestInstance:
    def test_defaults(self) -> None:
        instance = Instance(vm=VMRecord(cid="v1"))
        assert instance.job_name == DEFAULT_JOB_NAME
        assert instance.name == "unknown/0"

    def test_immutable(self) -> None:
        instance = Instance(vm=VMRecord(cid="v1"))
        with pytest.raises(ValidationError):
            instance.index = 1


class TestDeployment:
    def test_empty(self) -> None:
        deployment = Deployment.empty()
        assert deployment.is_empty
        assert not any(deployment.has_resources_for(p) for p in PHASE_ORDER)

    def test_has_resources_for(self) -> None:
        deployment = Deployment(
            disks=[DiskRecord(cid="d1", size=10)],
            stemcells=[StemcellRecord(name="s", version="1", cid="s1")],
        )
        assert not deployment.is_empty
        assert not deployment.has_resources_for(TeardownPhase.VM)
        assert deployment.has_resources_for(TeardownPhase.DISK)
        assert deployment.has_resources_for(TeardownPhase.STEMCELL)

    def test_collects_events(self) -> None:
        deployment = Deployment(instances=[Instance(vm=VMRecord(cid="v1"))])
        deployment.add_event(ResourceDeleted(resource_kind=ResourceKind.VM, cid="v1"))
        deployment.add_event(DeploymentTeardownCompleted(deployment_id=deployment.id))

        events = deployment.collect_events()
        assert [e.event_type for e in events] == [
            "resource.deleted",
            "deployment.teardown_completed",
        ]
        assert deployment.pending_events == []


class TestDeploymentState:
    def test_defaults_are_empty(self) -> None:
        state = DeploymentState()
        assert state.is_empty
        assert state.vms == []
        assert state.current_vm_id == ""

    def test_records_get_ids(self) -> None:
        first = VMRecord(cid="v1")
        second = VMRecord(cid="v1")
        assert first.id != second.id

    def test_not_empty_with_current_pointer(self) -> None:
        disk = DiskRecord(cid="d1", size=1024)
        state = DeploymentState(disks=[disk], current_disk_id=disk.id)
        assert not state.is_empty

    def test_orphans_only_is_empty(self) -> None:
        state = DeploymentState(vms=[VMRecord(cid="old")])
        assert state.is_empty

    def test_json_shape(self) -> None:
        disk = DiskRecord(cid="d1", size=1024, cloud_properties={"type": "ssd"})
        state = DeploymentState(
            director_id="dir",
            installation_id="inst",
            disks=[disk],
            current_disk_id=disk.id,
        )
        restored = DeploymentState.model_validate_json(state.model_dump_json())
        assert restored == state
        assert restored.disks[0].cloud_properties == {"type": "ssd"}

    @pytest.mark.parametrize(
        "pointer", ["current_vm_id", "current_disk_id", "current_stemcell_id"]
    )
    def test_rejects_dangling_current_pointer(self, pointer: str) -> None:
        with pytest.raises(ValidationError, match="does not match any record"):
            DeploymentState(**{pointer: "ghost"})

    def test_rejects_pointer_to_other_kind(self) -> None:
        vm = VMRecord(cid="v1")
        with pytest.raises(ValidationError):
            DeploymentState(vms=[vm], current_disk_id=vm.id)
