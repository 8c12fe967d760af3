"""Domain models package."""

from microdeploy.domain.models.base import (
    AggregateRoot,
    DomainEvent,
    generate_id,
    utc_now,
    ValueObject,
)
from microdeploy.domain.models.cloud import (
    AgentClientError,
    CloudError,
    CloudErrorKind,
    CPI_ERROR_TYPES,
)
from microdeploy.domain.models.deployment import (
    Deployment,
    Instance,
    PHASE_ORDER,
    STEP_NAME_TEMPLATES,
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


__all__ = [
    "AgentClientError",
    "AggregateRoot",
    "CPI_ERROR_TYPES",
    "CloudError",
    "CloudErrorKind",
    "Deployment",
    "DeploymentState",
    "DiskRecord",
    "DomainEvent",
    "Instance",
    "PHASE_ORDER",
    "ResourceKind",
    "STEP_NAME_TEMPLATES",
    "StemcellRecord",
    "TeardownAction",
    "TeardownPhase",
    "VMRecord",
    "ValueObject",
    "generate_id",
    "utc_now",
]
