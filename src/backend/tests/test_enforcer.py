"""Tests for the quota enforcer.

Covers:
- Strict hard > used boundary
- Missing tag: rejected for most kinds, admitted for secrets
- Deletion always admitted
- Referenced ProjectResourceQuota deleted since tagging
- Rejection message content
"""

from unittest.mock import AsyncMock

import pytest

from projectquota.errors import (
    MissingOwnershipTagError,
    NotFoundError,
    QuotaExceededError,
    UpstreamError,
)
from projectquota.resources import GOVERNED_KINDS, Operation, ResourceKind
from projectquota.schemas.project_quota import ProjectQuota
from projectquota.services.enforcer import QuotaEnforcer

QUOTA_KEY = "jenting.io/project-resource-quota"

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _quota(name="p1", hard=None, used=None) -> ProjectQuota:
    return ProjectQuota(name=name, namespaces=["team-a"], hard=hard or {}, used=used or {})


def _tagged(channel="annotations", quota_name="p1") -> dict:
    return {
        "metadata": {
            "name": "obj-1",
            "namespace": "team-a",
            channel: {QUOTA_KEY: quota_name},
        }
    }


def _untagged() -> dict:
    return {"metadata": {"name": "obj-1", "namespace": "team-a"}}


def _make_enforcer(quota: ProjectQuota | None = None) -> tuple[QuotaEnforcer, AsyncMock]:
    repo = AsyncMock()
    repo.get = AsyncMock(return_value=quota)
    return QuotaEnforcer(repo), repo


PVC = GOVERNED_KINDS[ResourceKind.PERSISTENT_VOLUME_CLAIM]
RC = GOVERNED_KINDS[ResourceKind.REPLICATION_CONTROLLER]
RQ = GOVERNED_KINDS[ResourceKind.RESOURCE_QUOTA]
SECRET = GOVERNED_KINDS[ResourceKind.SECRET]


# ---------------------------------------------------------------------------
# Boundary
# ---------------------------------------------------------------------------


class TestBoundary:
    async def test_used_equal_to_hard_is_rejected(self):
        enforcer, _ = _make_enforcer(
            _quota(hard={"persistentvolumeclaims": "5"}, used={"persistentvolumeclaims": "5"})
        )

        with pytest.raises(QuotaExceededError):
            await enforcer.enforce(PVC, _tagged(), Operation.CREATE)

    async def test_used_below_hard_is_admitted(self):
        enforcer, _ = _make_enforcer(
            _quota(hard={"persistentvolumeclaims": "5"}, used={"persistentvolumeclaims": "4"})
        )

        await enforcer.enforce(PVC, _tagged(), Operation.CREATE)

    async def test_used_above_hard_is_rejected(self):
        enforcer, _ = _make_enforcer(
            _quota(hard={"resourcequotas": "1"}, used={"resourcequotas": "3"})
        )

        with pytest.raises(QuotaExceededError):
            await enforcer.enforce(RQ, _tagged(), Operation.CREATE)

    async def test_missing_used_counts_as_zero(self):
        enforcer, _ = _make_enforcer(_quota(hard={"replicationcontrollers": "1"}))

        await enforcer.enforce(RC, _tagged(), Operation.CREATE)

    async def test_missing_hard_counts_as_zero(self):
        enforcer, _ = _make_enforcer(_quota(hard={"cpu": "4"}))

        with pytest.raises(QuotaExceededError):
            await enforcer.enforce(RC, _tagged(), Operation.CREATE)

    async def test_quantities_compare_numerically(self):
        enforcer, _ = _make_enforcer(
            _quota(hard={"persistentvolumeclaims": "1k"}, used={"persistentvolumeclaims": "999"})
        )

        await enforcer.enforce(PVC, _tagged(), Operation.CREATE)

    async def test_update_is_enforced_like_create(self):
        enforcer, _ = _make_enforcer(
            _quota(hard={"persistentvolumeclaims": "2"}, used={"persistentvolumeclaims": "2"})
        )

        with pytest.raises(QuotaExceededError):
            await enforcer.enforce(PVC, _tagged(), Operation.UPDATE)


# ---------------------------------------------------------------------------
# Ownership tag
# ---------------------------------------------------------------------------


class TestOwnershipTag:
    @pytest.mark.parametrize("governed", [PVC, RC, RQ])
    async def test_missing_annotation_is_rejected(self, governed):
        enforcer, repo = _make_enforcer()

        with pytest.raises(MissingOwnershipTagError) as exc_info:
            await enforcer.enforce(governed, _untagged(), Operation.CREATE)

        assert exc_info.value.message == f"missing annotation {QUOTA_KEY}"
        repo.get.assert_not_awaited()

    async def test_missing_secret_label_is_admitted(self):
        enforcer, repo = _make_enforcer()

        await enforcer.enforce(SECRET, _untagged(), Operation.CREATE)

        repo.get.assert_not_awaited()

    async def test_tag_in_wrong_channel_is_ignored(self):
        enforcer, _ = _make_enforcer()

        with pytest.raises(MissingOwnershipTagError):
            await enforcer.enforce(PVC, _tagged(channel="labels"), Operation.CREATE)

    async def test_referenced_quota_is_fetched_by_name(self):
        enforcer, repo = _make_enforcer(_quota(name="p9", hard={"secrets": "3"}))

        await enforcer.enforce(SECRET, _tagged(channel="labels", quota_name="p9"), Operation.CREATE)

        repo.get.assert_awaited_once_with("p9")


# ---------------------------------------------------------------------------
# Delete, races, failures
# ---------------------------------------------------------------------------


class TestDelete:
    @pytest.mark.parametrize("governed", [PVC, RC, RQ, SECRET])
    async def test_delete_always_admitted(self, governed):
        enforcer, repo = _make_enforcer(_quota(hard={governed.dimension: "0"}))

        await enforcer.enforce(governed, _untagged(), Operation.DELETE)
        await enforcer.enforce(governed, _tagged(), Operation.DELETE)

        repo.get.assert_not_awaited()


class TestRaces:
    async def test_quota_deleted_since_tagging_is_upstream_error(self):
        enforcer, repo = _make_enforcer()
        repo.get = AsyncMock(side_effect=NotFoundError("ProjectResourceQuota 'p1' not found"))

        with pytest.raises(UpstreamError):
            await enforcer.enforce(PVC, _tagged(), Operation.CREATE)

    async def test_fetch_failure_propagates(self):
        enforcer, repo = _make_enforcer()
        repo.get = AsyncMock(side_effect=UpstreamError("timeout"))

        with pytest.raises(UpstreamError):
            await enforcer.enforce(PVC, _tagged(), Operation.UPDATE)


# ---------------------------------------------------------------------------
# Scenario
# ---------------------------------------------------------------------------


class TestSecretScenario:
    async def test_full_secret_quota_rejects_with_dimension_used_and_hard(self):
        enforcer, _ = _make_enforcer(_quota(hard={"secrets": "2"}, used={"secrets": "2"}))

        with pytest.raises(QuotaExceededError) as exc_info:
            await enforcer.enforce(SECRET, _tagged(channel="labels"), Operation.CREATE)

        assert exc_info.value.message == (
            "over project resource quota. current secrets counts 2, hard limit count 2"
        )

    async def test_message_orders_used_before_hard(self):
        enforcer, _ = _make_enforcer(_quota(hard={"secrets": "1"}, used={"secrets": "7"}))

        with pytest.raises(QuotaExceededError) as exc_info:
            await enforcer.enforce(SECRET, _tagged(channel="labels"), Operation.CREATE)

        message = exc_info.value.message
        assert message.index("counts 7") < message.index("hard limit count 1")


class TestEmptyTag:
    @pytest.mark.parametrize("governed", [PVC, RC, RQ])
    async def test_empty_annotation_counts_as_missing(self, governed):
        enforcer, repo = _make_enforcer()

        with pytest.raises(MissingOwnershipTagError):
            await enforcer.enforce(governed, _tagged(quota_name=""), Operation.CREATE)

        repo.get.assert_not_awaited()

    async def test_empty_secret_label_is_admitted_without_lookup(self):
        enforcer, repo = _make_enforcer()

        await enforcer.enforce(SECRET, _tagged(channel="labels", quota_name=""), Operation.CREATE)

        repo.get.assert_not_awaited()
