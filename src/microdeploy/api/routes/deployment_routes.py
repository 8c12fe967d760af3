"""Deployment API routes."""

from __future__ import annotations

import time
from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from microdeploy.api.dependencies.services import get_service_container, ServiceContainer
from microdeploy.api.schemas.deployment_schemas import (
    CurrentDeploymentResponse,
    DiskResponse,
    StemcellResponse,
    StepResponse,
    TeardownResponse,
    VMResponse,
)
from microdeploy.domain.services.teardown_service import TeardownError
from microdeploy.infrastructure.observability.metrics import (
    TEARDOWN_DURATION,
    TEARDOWN_RUNS_TOTAL,
)
from microdeploy.infrastructure.progress.stage import RecordingStage


logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/deployment", tags=["deployment"])


def _steps_response(stage: RecordingStage) -> list[StepResponse]:
    return [
        StepResponse(
            name=step.name,
            states=step.states,
            skip_reason=step.skip_reason,
            error=step.error,
        )
        for step in stage.steps
    ]


@router.get("", response_model=CurrentDeploymentResponse)
async def get_current_deployment(
    container: Annotated[ServiceContainer, Depends(get_service_container)],
) -> CurrentDeploymentResponse:
    """Show the current VM, disk and stemcell records."""
    manager = container.state_manager
    state = await manager.snapshot()
    vm = await manager.vms.find_current()
    disk = await manager.disks.find_current()
    stemcell = await manager.stemcells.find_current()
    if vm is None and disk is None and stemcell is None:
        raise HTTPException(status_code=404, detail="No deployment found")

    return CurrentDeploymentResponse(
        director_id=state.director_id,
        installation_id=state.installation_id,
        vm=VMResponse(**vm.model_dump()) if vm else None,
        disk=DiskResponse(**disk.model_dump()) if disk else None,
        stemcell=StemcellResponse(**stemcell.model_dump()) if stemcell else None,
    )


@router.delete("", response_model=TeardownResponse)
async def delete_deployment(
    container: Annotated[ServiceContainer, Depends(get_service_container)],
) -> TeardownResponse:
    """Tear down the current deployment."""
    state = await container.state_manager.snapshot()
    lock_key = f"deployment:{state.installation_id or 'default'}:delete"
    acquired = await container.lock_service.acquire(
        lock_key, ttl_seconds=container.settings.redis.lock_timeout
    )
    if not acquired:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A teardown of this deployment is already in progress",
        )

    stage = RecordingStage()
    started = time.monotonic()
    try:
        service = await container.teardown_service()
        deployment = await service.delete(stage)
    except TeardownError as e:
        TEARDOWN_RUNS_TOTAL.labels(result="failed").inc()
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={
                "error": str(e),
                "action": e.action.value,
                "cid": e.cid,
                "steps": [s.model_dump(mode="json") for s in _steps_response(stage)],
            },
        ) from e
    except Exception:
        TEARDOWN_RUNS_TOTAL.labels(result="failed").inc()
        raise
    finally:
        TEARDOWN_DURATION.observe(time.monotonic() - started)
        await container.lock_service.release(lock_key)

    deleted = not deployment.is_empty
    TEARDOWN_RUNS_TOTAL.labels(result="deleted" if deleted else "noop").inc()
    return TeardownResponse(
        deployment_id=deployment.id,
        phases=service.plan(deployment),
        steps=_steps_response(stage),
        deleted=deleted,
    )
