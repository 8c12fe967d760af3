"""Teardown domain events."""

from __future__ import annotations

from pydantic import Field

from microdeploy.domain.models.base import DomainEvent
from microdeploy.domain.models.resources import ResourceKind


class ResourceDeleted(DomainEvent):
    """Emitted when a resource's record is removed after teardown."""

    resource_kind: ResourceKind
    cid: str
    already_absent: bool = False
    event_type: str = "resource.deleted"


class DeploymentTeardownCompleted(DomainEvent):
    """Emitted once every applicable teardown phase has completed."""

    deployment_id: str
    phases: list[str] = Field(default_factory=list)
    event_type: str = "deployment.teardown_completed"
