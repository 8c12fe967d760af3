"""Persisted resource records for a single-instance deployment."""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator

from microdeploy.domain.models.base import generate_id, ValueObject


class ResourceKind(str, Enum):
    """Kinds of infrastructure resources owned by a deployment."""

    VM = "vm"
    DISK = "disk"
    STEMCELL = "stemcell"


class VMRecord(ValueObject):
    """A provisioned virtual machine."""

    id: str = Field(default_factory=generate_id)
    cid: str


class DiskRecord(ValueObject):
    """A provisioned persistent disk."""

    id: str = Field(default_factory=generate_id)
    cid: str
    size: int = 0
    cloud_properties: dict[str, Any] = Field(default_factory=dict)


class StemcellRecord(ValueObject):
    """An uploaded stemcell image."""

    id: str = Field(default_factory=generate_id)
    name: str = ""
    version: str = ""
    cid: str


class DeploymentState(BaseModel):
    """The persisted configuration document for one installation.

    Holds every known record per resource kind together with the id of the
    record that is "current" for that kind. Current pointers always refer to
    a record in the matching list, or are empty.
    """

    director_id: str = ""
    installation_id: str = ""
    current_vm_id: str = ""
    current_disk_id: str = ""
    current_stemcell_id: str = ""
    vms: list[VMRecord] = Field(default_factory=list)
    disks: list[DiskRecord] = Field(default_factory=list)
    stemcells: list[StemcellRecord] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (self.current_vm_id or self.current_disk_id or self.current_stemcell_id)

    @model_validator(mode="after")
    def validate_current_pointers(self) -> DeploymentState:
        """Reject current pointers that name a record not in the document."""
        for pointer, records in (
            ("current_vm_id", self.vms),
            ("current_disk_id", self.disks),
            ("current_stemcell_id", self.stemcells),
        ):
            current_id = getattr(self, pointer)
            if current_id and all(record.id != current_id for record in records):
                raise ValueError(f"{pointer} '{current_id}' does not match any record")
        return self
