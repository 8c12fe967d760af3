"""Simulated infrastructure client."""

from __future__ import annotations

import structlog

from microdeploy.domain.models.cloud import CloudError
from microdeploy.domain.ports.services import Cloud
from microdeploy.infrastructure.observability.metrics import CLOUD_CALLS_TOTAL


logger = structlog.get_logger(__name__)


class SimulatedCloud(Cloud):
    """In-memory infrastructure backend for development/testing.

    Tracks which VMs, disks and stemcells exist and answers CPI calls the
    way a real backend would, including not-found errors for resources that
    were never created or were removed out of band. Every call is appended
    to ``calls`` (and to a shared ``call_log`` when one is given).
    """

    def __init__(
        self,
        vms: set[str] | None = None,
        disks: set[str] | None = None,
        stemcells: set[str] | None = None,
        call_log: list[str] | None = None,
    ) -> None:
        self._vms = set(vms or ())
        self._disks = set(disks or ())
        self._stemcells = set(stemcells or ())
        self._failures: dict[str, Exception] = {}
        self._call_log = call_log
        self.calls: list[tuple[str, str]] = []

    async def has_vm(self, vm_cid: str) -> bool:
        self._record("has_vm", vm_cid)
        return vm_cid in self._vms

    async def delete_vm(self, vm_cid: str) -> None:
        self._record("delete_vm", vm_cid)
        self._delete(self._vms, vm_cid, "delete_vm", "Bosh::Clouds::VMNotFound")

    async def delete_disk(self, disk_cid: str) -> None:
        self._record("delete_disk", disk_cid)
        self._delete(self._disks, disk_cid, "delete_disk", "Bosh::Clouds::DiskNotFound")

    async def delete_stemcell(self, stemcell_cid: str) -> None:
        self._record("delete_stemcell", stemcell_cid)
        self._delete(
            self._stemcells, stemcell_cid, "delete_stemcell", "Bosh::Clouds::StemcellNotFound"
        )

    def fail_on(self, method: str, error: Exception) -> None:
        """Make every call to ``method`` raise ``error``."""
        self._failures[method] = error

    def clear_failure(self, method: str) -> None:
        self._failures.pop(method, None)

    def remove_out_of_band(self, cid: str) -> None:
        """Drop a resource as if someone deleted it behind our back."""
        self._vms.discard(cid)
        self._disks.discard(cid)
        self._stemcells.discard(cid)

    @property
    def vms(self) -> set[str]:
        return set(self._vms)

    @property
    def disks(self) -> set[str]:
        return set(self._disks)

    @property
    def stemcells(self) -> set[str]:
        return set(self._stemcells)

    def _record(self, method: str, cid: str) -> None:
        self.calls.append((method, cid))
        if self._call_log is not None:
            self._call_log.append(method)
        failure = self._failures.get(method)
        if failure is not None:
            CLOUD_CALLS_TOTAL.labels(method=method, result="error").inc()
            raise failure

    def _delete(self, inventory: set[str], cid: str, method: str, not_found_type: str) -> None:
        if cid not in inventory:
            CLOUD_CALLS_TOTAL.labels(method=method, result="not_found").inc()
            raise CloudError.from_cpi_error(method, not_found_type, f"'{cid}' not found")
        inventory.discard(cid)
        CLOUD_CALLS_TOTAL.labels(method=method, result="success").inc()
        logger.info("simulated_resource_deleted", method=method, cid=cid)
