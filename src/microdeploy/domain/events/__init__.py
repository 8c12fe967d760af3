"""Domain events package."""

from microdeploy.domain.events.teardown_events import (
    DeploymentTeardownCompleted,
    ResourceDeleted,
)


__all__ = [
    "DeploymentTeardownCompleted",
    "ResourceDeleted",
]
