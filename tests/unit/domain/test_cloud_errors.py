"""Unit tests for infrastructure and agent error types."""

from __future__ import annotations

import pytest

from microdeploy.domain.models.cloud import AgentClientError, CloudError, CloudErrorKind
from microdeploy.domain.models.resources import ResourceKind


class TestCloudError:
    @pytest.mark.parametrize(
        ("error_type", "kind"),
        [
            ("Bosh::Clouds::VMNotFound", CloudErrorKind.VM_NOT_FOUND),
            ("Bosh::Clouds::DiskNotFound", CloudErrorKind.DISK_NOT_FOUND),
            ("Bosh::Clouds::StemcellNotFound", CloudErrorKind.STEMCELL_NOT_FOUND),
            ("Bosh::Clouds::CloudError", CloudErrorKind.UNKNOWN),
        ],
    )
    def test_from_cpi_error(self, error_type: str, kind: CloudErrorKind) -> None:
        err = CloudError.from_cpi_error("delete_vm", error_type, "boom")
        assert err.kind == kind
        assert err.method == "delete_vm"

    def test_message(self) -> None:
        err = CloudError("delete_disk", CloudErrorKind.DISK_NOT_FOUND, "'d1' not found")
        assert str(err) == (
            "CPI 'delete_disk' method responded with error: disk_not_found: 'd1' not found"
        )

    def test_is_not_found_matches_kind(self) -> None:
        err = CloudError("delete_vm", CloudErrorKind.VM_NOT_FOUND)
        assert err.is_not_found(ResourceKind.VM)
        assert not err.is_not_found(ResourceKind.DISK)
        assert not err.is_not_found(ResourceKind.STEMCELL)

    def test_unknown_is_never_not_found(self) -> None:
        err = CloudError("delete_stemcell")
        assert not any(err.is_not_found(kind) for kind in ResourceKind)

    def test_retry_flag(self) -> None:
        err = CloudError.from_cpi_error("delete_vm", "x", "y", ok_to_retry=True)
        assert err.ok_to_retry is True


class TestAgentClientError:
    def test_message(self) -> None:
        err = AgentClientError("ping", "connection refused")
        assert str(err) == "Agent 'ping' failed: connection refused"
        assert err.method == "ping"
