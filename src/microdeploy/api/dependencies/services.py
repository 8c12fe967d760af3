"""Service dependencies for FastAPI dependency injection."""

from __future__ import annotations

import asyncio

import structlog

from microdeploy.config import get_settings, Settings, StateBackend
from microdeploy.domain.ports.repositories import StateStore
from microdeploy.domain.ports.services import AgentClient, Cloud, DistributedLock
from microdeploy.domain.services.teardown_service import DeploymentTeardownService
from microdeploy.infrastructure.agent.http_client import HttpAgentClient
from microdeploy.infrastructure.agent.simulated import SimulatedAgentClient
from microdeploy.infrastructure.cloud.simulated import SimulatedCloud
from microdeploy.infrastructure.locking.locks import (
    create_redis_client,
    InMemoryDistributedLock,
    RedisDistributedLock,
)
from microdeploy.infrastructure.messaging.event_publisher import InMemoryEventPublisher
from microdeploy.infrastructure.persistence import (
    DeploymentStateManager,
    InMemoryStateStore,
    JsonFileStateStore,
)


logger = structlog.get_logger(__name__)


class ServiceContainer:
    """Composition root assembling the teardown service and its adapters."""

    _instance: ServiceContainer | None = None

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or get_settings()
        self._state_manager = DeploymentStateManager(self._build_state_store())
        self._event_publisher = InMemoryEventPublisher()
        self._agent_client = self._build_agent_client()
        self._cloud: Cloud | None = None
        self._cloud_lock = asyncio.Lock()
        self._lock_service: DistributedLock | None = None

    @classmethod
    def get_instance(cls) -> ServiceContainer:
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        cls._instance = None

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def state_manager(self) -> DeploymentStateManager:
        return self._state_manager

    @property
    def event_publisher(self) -> InMemoryEventPublisher:
        return self._event_publisher

    @property
    def agent_client(self) -> AgentClient:
        return self._agent_client

    @property
    def lock_service(self) -> DistributedLock:
        if self._lock_service is None:
            if self._settings.redis.enabled:
                client = create_redis_client(self._settings.redis)
                self._lock_service = RedisDistributedLock(client)
            else:
                self._lock_service = InMemoryDistributedLock()
        return self._lock_service

    async def cloud(self) -> Cloud:
        """Infrastructure client, created on first use."""
        if self._cloud is None:
            async with self._cloud_lock:
                if self._cloud is None:
                    self._cloud = await self._build_cloud()
        return self._cloud

    async def teardown_service(self) -> DeploymentTeardownService:
        return DeploymentTeardownService(
            vm_repo=self._state_manager.vms,
            disk_repo=self._state_manager.disks,
            stemcell_repo=self._state_manager.stemcells,
            cloud=await self.cloud(),
            agent_client=self._agent_client,
            event_publisher=self._event_publisher,
        )

    def _build_state_store(self) -> StateStore:
        if self._settings.state.backend == StateBackend.MEMORY:
            return InMemoryStateStore()
        return JsonFileStateStore(self._settings.state.path)

    def _build_agent_client(self) -> AgentClient:
        if self._settings.agent.simulated:
            return SimulatedAgentClient()
        return HttpAgentClient(
            self._settings.agent.mbus_url,
            timeout=self._settings.agent.request_timeout,
        )

    async def _build_cloud(self) -> Cloud:
        backend = self._settings.cloud.backend
        if backend != "simulated":
            raise ValueError(f"Unsupported cloud backend: {backend}")

        # The simulated backend starts out owning exactly what the state records
        state = await self._state_manager.snapshot()
        logger.info("simulated_cloud_seeded", vms=len(state.vms), disks=len(state.disks))
        return SimulatedCloud(
            vms={r.cid for r in state.vms},
            disks={r.cid for r in state.disks},
            stemcells={r.cid for r in state.stemcells},
        )


def get_service_container() -> ServiceContainer:
    return ServiceContainer.get_instance()
