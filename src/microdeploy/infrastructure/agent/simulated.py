"""Simulated agent client."""

from __future__ import annotations

from microdeploy.domain.models.cloud import AgentClientError
from microdeploy.domain.ports.services import AgentClient


class SimulatedAgentClient(AgentClient):
    """In-memory agent for development/testing."""

    def __init__(
        self,
        mounted_disks: list[str] | None = None,
        responsive: bool = True,
        call_log: list[str] | None = None,
    ) -> None:
        self._mounted_disks = list(mounted_disks or [])
        self._responsive = responsive
        self._failures: dict[str, Exception] = {}
        self._call_log = call_log
        self.calls: list[str] = []
        self.jobs_running = True

    async def ping(self) -> str:
        self._record("ping")
        if not self._responsive:
            raise AgentClientError("ping", "unresponsive agent")
        return "running" if self.jobs_running else "stopped"

    async def stop(self) -> None:
        self._record("stop")
        self.jobs_running = False

    async def list_disk(self) -> list[str]:
        self._record("list_disk")
        return list(self._mounted_disks)

    async def unmount_disk(self, disk_cid: str) -> None:
        self._record("unmount_disk")
        if disk_cid not in self._mounted_disks:
            raise AgentClientError("unmount_disk", f"disk '{disk_cid}' is not mounted")
        self._mounted_disks.remove(disk_cid)

    def fail_on(self, method: str, error: Exception) -> None:
        """Make every call to ``method`` raise ``error``."""
        self._failures[method] = error

    def clear_failure(self, method: str) -> None:
        self._failures.pop(method, None)

    @property
    def mounted_disks(self) -> list[str]:
        return list(self._mounted_disks)

    def _record(self, method: str) -> None:
        self.calls.append(method)
        if self._call_log is not None:
            self._call_log.append(method)
        failure = self._failures.get(method)
        if failure is not None:
            raise failure
