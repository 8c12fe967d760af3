"""Deployment aggregate and the teardown phase/step model."""

from __future__ import annotations

from enum import Enum

from pydantic import Field

from microdeploy.domain.models.base import AggregateRoot, ValueObject
from microdeploy.domain.models.resources import (
    DiskRecord,
    ResourceKind,
    StemcellRecord,
    VMRecord,
)


DEFAULT_JOB_NAME = "unknown"


class TeardownPhase(str, Enum):
    """Teardown phases, one per resource kind."""

    VM = "vm"
    DISK = "disk"
    STEMCELL = "stemcell"

    @property
    def resource_kind(self) -> ResourceKind:
        return ResourceKind(self.value)


# Phases always execute in this order
PHASE_ORDER: list[TeardownPhase] = [
    TeardownPhase.VM,
    TeardownPhase.DISK,
    TeardownPhase.STEMCELL,
]


class TeardownAction(str, Enum):
    """Individual teardown steps reported to the progress stage."""

    WAIT_FOR_AGENT = "wait_for_agent"
    STOP_JOBS = "stop_jobs"
    UNMOUNT_DISK = "unmount_disk"
    DELETE_VM = "delete_vm"
    DELETE_DISK = "delete_disk"
    DELETE_STEMCELL = "delete_stemcell"

    @property
    def phase(self) -> TeardownPhase:
        return ACTION_PHASES[self]

    def step_name(self, **params: object) -> str:
        """Render the user-visible step name for this action."""
        return STEP_NAME_TEMPLATES[self].format(**params)


STEP_NAME_TEMPLATES: dict[TeardownAction, str] = {
    TeardownAction.WAIT_FOR_AGENT: "Waiting for the agent on VM '{cid}'",
    TeardownAction.STOP_JOBS: "Stopping jobs on instance '{job}/{index}'",
    TeardownAction.UNMOUNT_DISK: "Unmounting disk '{cid}'",
    TeardownAction.DELETE_VM: "Deleting VM '{cid}'",
    TeardownAction.DELETE_DISK: "Deleting disk '{cid}'",
    TeardownAction.DELETE_STEMCELL: "Deleting stemcell '{cid}'",
}

ACTION_PHASES: dict[TeardownAction, TeardownPhase] = {
    TeardownAction.WAIT_FOR_AGENT: TeardownPhase.VM,
    TeardownAction.STOP_JOBS: TeardownPhase.VM,
    TeardownAction.UNMOUNT_DISK: TeardownPhase.VM,
    TeardownAction.DELETE_VM: TeardownPhase.VM,
    TeardownAction.DELETE_DISK: TeardownPhase.DISK,
    TeardownAction.DELETE_STEMCELL: TeardownPhase.STEMCELL,
}


class Instance(ValueObject):
    """A job instance running on the deployment's VM."""

    job_name: str = DEFAULT_JOB_NAME
    index: int = 0
    vm: VMRecord

    @property
    def name(self) -> str:
        return f"{self.job_name}/{self.index}"


class Deployment(AggregateRoot):
    """Deployment aggregate - snapshot of what is currently provisioned.

    Built per invocation from the current repository records; never
    persisted itself.
    """

    instances: list[Instance] = Field(default_factory=list)
    disks: list[DiskRecord] = Field(default_factory=list)
    stemcells: list[StemcellRecord] = Field(default_factory=list)

    @classmethod
    def empty(cls) -> Deployment:
        return cls()

    @property
    def is_empty(self) -> bool:
        return not (self.instances or self.disks or self.stemcells)

    def has_resources_for(self, phase: TeardownPhase) -> bool:
        """Whether the given phase has anything to tear down."""
        if phase == TeardownPhase.VM:
            return bool(self.instances)
        if phase == TeardownPhase.DISK:
            return bool(self.disks)
        return bool(self.stemcells)
