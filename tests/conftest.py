"""Shared test fixtures."""

from __future__ import annotations

import pytest

from microdeploy.config import (
    AgentSettings,
    Environment,
    Settings,
    StateBackend,
    StateSettings,
)
from microdeploy.domain.services.teardown_service import DeploymentTeardownService
from microdeploy.infrastructure.agent.simulated import SimulatedAgentClient
from microdeploy.infrastructure.cloud.simulated import SimulatedCloud
from microdeploy.infrastructure.messaging.event_publisher import InMemoryEventPublisher
from microdeploy.infrastructure.persistence import (
    DeploymentStateManager,
    InMemoryStateStore,
)
from microdeploy.infrastructure.progress.stage import RecordingStage


@pytest.fixture
def settings() -> Settings:
    return Settings(
        environment=Environment.TESTING,
        state=StateSettings(backend=StateBackend.MEMORY),
        agent=AgentSettings(simulated=True),
    )


@pytest.fixture
def call_log() -> list[str]:
    """Cloud and agent calls, in the order they happened."""
    return []


@pytest.fixture
def state_manager() -> DeploymentStateManager:
    return DeploymentStateManager(InMemoryStateStore())


@pytest.fixture
def cloud(call_log: list[str]) -> SimulatedCloud:
    return SimulatedCloud(vms={"v1"}, disks={"d1"}, stemcells={"s1"}, call_log=call_log)


@pytest.fixture
def agent(call_log: list[str]) -> SimulatedAgentClient:
    return SimulatedAgentClient(mounted_disks=["d1"], call_log=call_log)


@pytest.fixture
def event_publisher() -> InMemoryEventPublisher:
    return InMemoryEventPublisher()


@pytest.fixture
def stage() -> RecordingStage:
    return RecordingStage()


@pytest.fixture
def service(
    state_manager: DeploymentStateManager,
    cloud: SimulatedCloud,
    agent: SimulatedAgentClient,
    event_publisher: InMemoryEventPublisher,
) -> DeploymentTeardownService:
    return DeploymentTeardownService(
        vm_repo=state_manager.vms,
        disk_repo=state_manager.disks,
        stemcell_repo=state_manager.stemcells,
        cloud=cloud,
        agent_client=agent,
        event_publisher=event_publisher,
    )


class StateSeeder:
    """Writes current resource records the way a previous deploy would."""

    def __init__(self, manager: DeploymentStateManager) -> None:
        self._manager = manager

    async def vm(self, cid: str = "v1") -> None:
        record = await self._manager.vms.save(cid)
        await self._manager.vms.update_current(record.id)

    async def disk(self, cid: str = "d1", size: int = 100) -> None:
        record = await self._manager.disks.save(cid, size)
        await self._manager.disks.update_current(record.id)

    async def stemcell(self, cid: str = "s1") -> None:
        record = await self._manager.stemcells.save("bosh-warden-stemcell", "3000", cid)
        await self._manager.stemcells.update_current(record.id)

    async def full_deployment(self) -> None:
        await self._manager.set_identity("fake-director-id", "fake-installation-id")
        await self.vm()
        await self.disk()
        await self.stemcell()


@pytest.fixture
def seeder(state_manager: DeploymentStateManager) -> StateSeeder:
    return StateSeeder(state_manager)
