"""API schemas for deployment endpoints."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from microdeploy.domain.models.deployment import TeardownPhase
from microdeploy.infrastructure.progress.stage import StepState


class VMResponse(BaseModel):
    id: str
    cid: str


class DiskResponse(BaseModel):
    id: str
    cid: str
    size: int
    cloud_properties: dict[str, Any] = Field(default_factory=dict)


class StemcellResponse(BaseModel):
    id: str
    name: str
    version: str
    cid: str


class CurrentDeploymentResponse(BaseModel):
    director_id: str = ""
    installation_id: str = ""
    vm: VMResponse | None = None
    disk: DiskResponse | None = None
    stemcell: StemcellResponse | None = None


class StepResponse(BaseModel):
    name: str
    states: list[StepState]
    skip_reason: str = ""
    error: str = ""


class TeardownResponse(BaseModel):
    deployment_id: str
    phases: list[TeardownPhase] = Field(default_factory=list)
    steps: list[StepResponse] = Field(default_factory=list)
    deleted: bool
