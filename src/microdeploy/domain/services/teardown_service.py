"""Domain service that tears down the current deployment."""

from __future__ import annotations

from collections.abc import Awaitable, Callable

import structlog
from opentelemetry import trace

from microdeploy.domain.events.teardown_events import (
    DeploymentTeardownCompleted,
    ResourceDeleted,
)
from microdeploy.domain.models.cloud import CloudError
from microdeploy.domain.models.deployment import (
    DEFAULT_JOB_NAME,
    Deployment,
    Instance,
    PHASE_ORDER,
    TeardownAction,
    TeardownPhase,
)
from microdeploy.domain.models.resources import (
    DiskRecord,
    ResourceKind,
    StemcellRecord,
)
from microdeploy.domain.ports.repositories import (
    DiskRepository,
    StemcellRepository,
    VMRepository,
)
from microdeploy.domain.ports.services import (
    AgentClient,
    Cloud,
    EventPublisher,
    Stage,
)
from microdeploy.domain.services.steps import perform_step, SkipStepError


logger = structlog.get_logger(__name__)
tracer = trace.get_tracer("microdeploy.teardown")

PhaseHandler = Callable[[Deployment, Stage], Awaitable[None]]


class DeploymentTeardownService:
    """Deletes the current VM, disk and stemcell of a deployment.

    Each phase only runs when its current record exists, and a record is
    only removed once the infrastructure confirmed the resource is gone
    (deleted now, or already missing). This makes ``delete`` safe to re-run
    after a failure at any point: completed phases find no record and are
    skipped, the failed phase is retried.
    """

    def __init__(
        self,
        vm_repo: VMRepository,
        disk_repo: DiskRepository,
        stemcell_repo: StemcellRepository,
        cloud: Cloud,
        agent_client: AgentClient,
        event_publisher: EventPublisher | None = None,
        job_name: str = DEFAULT_JOB_NAME,
    ) -> None:
        self._vm_repo = vm_repo
        self._disk_repo = disk_repo
        self._stemcell_repo = stemcell_repo
        self._cloud = cloud
        self._agent_client = agent_client
        self._event_publisher = event_publisher
        self._job_name = job_name
        self._phase_handlers: dict[TeardownPhase, PhaseHandler] = {
            TeardownPhase.VM: self.delete_vm_phase,
            TeardownPhase.DISK: self.delete_disk_phase,
            TeardownPhase.STEMCELL: self.delete_stemcell_phase,
        }

    # ------------------------------------------------------------------
    # Snapshot and plan
    # ------------------------------------------------------------------

    async def find_current(self) -> Deployment | None:
        """Build the deployment from the current records, if any exist."""
        vm = await self._vm_repo.find_current()
        disk = await self._disk_repo.find_current()
        stemcell = await self._stemcell_repo.find_current()
        if vm is None and disk is None and stemcell is None:
            return None

        return Deployment(
            instances=[Instance(job_name=self._job_name, index=0, vm=vm)] if vm else [],
            disks=[disk] if disk else [],
            stemcells=[stemcell] if stemcell else [],
        )

    def plan(self, deployment: Deployment) -> list[TeardownPhase]:
        """Phases that have something to delete, in execution order."""
        return [phase for phase in PHASE_ORDER if deployment.has_resources_for(phase)]

    # ------------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------------

    async def delete(self, stage: Stage) -> Deployment:
        """Tear down whatever is currently deployed.

        Returns the deployment snapshot that was torn down (empty when
        nothing was deployed). Raises ``TeardownError`` on the first
        unrecoverable failure.
        """
        deployment = await self.find_current() or Deployment.empty()
        phases = self.plan(deployment)
        if not phases:
            logger.info("teardown_nothing_to_delete")
            return deployment

        logger.info(
            "teardown_started",
            deployment_id=deployment.id,
            phases=[p.value for p in phases],
        )
        try:
            for phase in phases:
                with tracer.start_as_current_span(f"teardown.{phase.value}"):
                    await self._phase_handlers[phase](deployment, stage)
        except TeardownError as e:
            logger.error(
                "teardown_failed",
                deployment_id=deployment.id,
                action=e.action.value,
                cid=e.cid,
                error=str(e.cause),
            )
            raise
        else:
            deployment.add_event(DeploymentTeardownCompleted(
                deployment_id=deployment.id,
                phases=[p.value for p in phases],
                correlation_id=deployment.id,
            ))
            logger.info("teardown_completed", deployment_id=deployment.id)
        finally:
            await self._publish_events(deployment)

        return deployment

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    async def delete_vm_phase(self, deployment: Deployment, stage: Stage) -> None:
        """Shut the instance down gracefully if possible, then delete its VM."""
        for instance in deployment.instances:
            if await self.wait_for_agent(instance, stage):
                await self.stop_jobs(instance, stage)
                await self.unmount_disks(instance, stage)

            deleted = await self.delete_vm(instance, stage)

            await self._vm_repo.delete(instance.vm)
            deployment.add_event(ResourceDeleted(
                resource_kind=ResourceKind.VM,
                cid=instance.vm.cid,
                already_absent=not deleted,
                correlation_id=deployment.id,
            ))

    async def delete_disk_phase(self, deployment: Deployment, stage: Stage) -> None:
        """Delete the current disk and drop its record."""
        for disk in deployment.disks:
            deleted = await self.delete_disk(disk, stage)

            await self._disk_repo.delete(disk)
            deployment.add_event(ResourceDeleted(
                resource_kind=ResourceKind.DISK,
                cid=disk.cid,
                already_absent=not deleted,
                correlation_id=deployment.id,
            ))

    async def delete_stemcell_phase(self, deployment: Deployment, stage: Stage) -> None:
        """Delete the current stemcell and drop its record."""
        for stemcell in deployment.stemcells:
            deleted = await self.delete_stemcell(stemcell, stage)

            await self._stemcell_repo.delete(stemcell)
            deployment.add_event(ResourceDeleted(
                resource_kind=ResourceKind.STEMCELL,
                cid=stemcell.cid,
                already_absent=not deleted,
                correlation_id=deployment.id,
            ))

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    async def wait_for_agent(self, instance: Instance, stage: Stage) -> bool:
        """Check the VM exists and its agent responds to a single ping.

        Returns False (and skips the step) when the VM is gone or the agent
        fails to answer the ping for any reason; neither is an error.
        """
        vm_cid = instance.vm.cid

        async def _wait() -> None:
            if not await self._cloud.has_vm(vm_cid):
                logger.info("vm_missing_skipping_agent", vm_cid=vm_cid)
                raise SkipStepError(f"VM '{vm_cid}' not found")
            try:
                state = await self._agent_client.ping()
            except Exception as e:
                logger.warning("agent_unresponsive", vm_cid=vm_cid, error=str(e))
                raise SkipStepError(str(e)) from e
            logger.debug("agent_ready", vm_cid=vm_cid, state=state)

        return await self._run_step(
            stage,
            TeardownAction.WAIT_FOR_AGENT,
            vm_cid,
            TeardownAction.WAIT_FOR_AGENT.step_name(cid=vm_cid),
            _wait,
        )

    async def stop_jobs(self, instance: Instance, stage: Stage) -> None:
        """Stop every job on the instance."""
        await self._run_step(
            stage,
            TeardownAction.STOP_JOBS,
            instance.vm.cid,
            TeardownAction.STOP_JOBS.step_name(job=instance.job_name, index=instance.index),
            self._agent_client.stop,
        )

    async def unmount_disks(self, instance: Instance, stage: Stage) -> None:
        """Unmount each disk the agent reports as mounted, in reported order."""
        vm_cid = instance.vm.cid
        try:
            disk_cids = await self._agent_client.list_disk()
        except Exception as e:
            raise TeardownError(
                TeardownAction.UNMOUNT_DISK,
                vm_cid,
                f"Listing mounted disks on VM '{vm_cid}'",
                e,
            ) from e

        for disk_cid in disk_cids:

            async def _unmount(disk_cid: str = disk_cid) -> None:
                await self._agent_client.unmount_disk(disk_cid)

            await self._run_step(
                stage,
                TeardownAction.UNMOUNT_DISK,
                disk_cid,
                TeardownAction.UNMOUNT_DISK.step_name(cid=disk_cid),
                _unmount,
            )

    async def delete_vm(self, instance: Instance, stage: Stage) -> bool:
        """Delete the VM. Returns False if it was already gone."""
        vm_cid = instance.vm.cid
        return await self._run_step(
            stage,
            TeardownAction.DELETE_VM,
            vm_cid,
            TeardownAction.DELETE_VM.step_name(cid=vm_cid),
            self._tolerate_not_found(ResourceKind.VM, self._cloud.delete_vm, vm_cid),
        )

    async def delete_disk(self, disk: DiskRecord, stage: Stage) -> bool:
        """Delete the disk. Returns False if it was already gone."""
        return await self._run_step(
            stage,
            TeardownAction.DELETE_DISK,
            disk.cid,
            TeardownAction.DELETE_DISK.step_name(cid=disk.cid),
            self._tolerate_not_found(ResourceKind.DISK, self._cloud.delete_disk, disk.cid),
        )

    async def delete_stemcell(self, stemcell: StemcellRecord, stage: Stage) -> bool:
        """Delete the stemcell. Returns False if it was already gone."""
        return await self._run_step(
            stage,
            TeardownAction.DELETE_STEMCELL,
            stemcell.cid,
            TeardownAction.DELETE_STEMCELL.step_name(cid=stemcell.cid),
            self._tolerate_not_found(
                ResourceKind.STEMCELL, self._cloud.delete_stemcell, stemcell.cid
            ),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _tolerate_not_found(
        self,
        kind: ResourceKind,
        delete: Callable[[str], Awaitable[None]],
        cid: str,
    ) -> Callable[[], Awaitable[None]]:
        async def _delete() -> None:
            try:
                await delete(cid)
            except CloudError as e:
                if not e.is_not_found(kind):
                    raise
                logger.info(f"{kind.value}_already_deleted", cid=cid, error=str(e))
                raise SkipStepError(str(e)) from e

        return _delete

    async def _run_step(
        self,
        stage: Stage,
        action: TeardownAction,
        cid: str,
        name: str,
        fn: Callable[[], Awaitable[None]],
    ) -> bool:
        try:
            return await perform_step(stage, name, fn)
        except Exception as e:
            raise TeardownError(action, cid, name, e) from e

    async def _publish_events(self, deployment: Deployment) -> None:
        """Collect and publish all pending domain events from the deployment."""
        events = deployment.collect_events()
        if self._event_publisher is None:
            return
        for event in events:
            await self._event_publisher.publish(
                event.event_type, event.model_dump(mode="json")
            )


class TeardownError(Exception):
    """Raised when a teardown action fails with an unrecoverable error."""

    def __init__(
        self, action: TeardownAction, cid: str, description: str, cause: BaseException
    ) -> None:
        super().__init__(f"{description}: {cause}")
        self.action = action
        self.cid = cid
        self.cause = cause
