"""Infrastructure (CPI) error classification."""

from __future__ import annotations

from enum import Enum

from microdeploy.domain.models.resources import ResourceKind


class CloudErrorKind(str, Enum):
    """Classified cause of an infrastructure failure."""

    VM_NOT_FOUND = "vm_not_found"
    DISK_NOT_FOUND = "disk_not_found"
    STEMCELL_NOT_FOUND = "stemcell_not_found"
    UNKNOWN = "unknown"


# Error type strings reported by CPI backends
CPI_ERROR_TYPES: dict[str, CloudErrorKind] = {
    "Bosh::Clouds::VMNotFound": CloudErrorKind.VM_NOT_FOUND,
    "Bosh::Clouds::DiskNotFound": CloudErrorKind.DISK_NOT_FOUND,
    "Bosh::Clouds::StemcellNotFound": CloudErrorKind.STEMCELL_NOT_FOUND,
}

NOT_FOUND_KINDS: dict[ResourceKind, CloudErrorKind] = {
    ResourceKind.VM: CloudErrorKind.VM_NOT_FOUND,
    ResourceKind.DISK: CloudErrorKind.DISK_NOT_FOUND,
    ResourceKind.STEMCELL: CloudErrorKind.STEMCELL_NOT_FOUND,
}


class CloudError(Exception):
    """Raised by infrastructure clients when a CPI method fails."""

    def __init__(
        self,
        method: str,
        kind: CloudErrorKind = CloudErrorKind.UNKNOWN,
        message: str = "",
        ok_to_retry: bool = False,
    ) -> None:
        super().__init__(f"CPI '{method}' method responded with error: {kind.value}: {message}")
        self.method = method
        self.kind = kind
        self.message = message
        self.ok_to_retry = ok_to_retry

    @classmethod
    def from_cpi_error(
        cls, method: str, error_type: str, message: str, ok_to_retry: bool = False
    ) -> CloudError:
        """Build an error from a backend-reported error type string."""
        kind = CPI_ERROR_TYPES.get(error_type, CloudErrorKind.UNKNOWN)
        return cls(method, kind=kind, message=message, ok_to_retry=ok_to_retry)

    def is_not_found(self, resource_kind: ResourceKind) -> bool:
        """Whether this error means the given resource kind no longer exists."""
        return self.kind == NOT_FOUND_KINDS[resource_kind]


class AgentClientError(Exception):
    """Raised by agent clients when the in-VM agent fails or is unreachable."""

    def __init__(self, method: str, message: str) -> None:
        super().__init__(f"Agent '{method}' failed: {message}")
        self.method = method
        self.message = message
