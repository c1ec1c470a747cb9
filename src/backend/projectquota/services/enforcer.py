"""Quota enforcer: admits governed objects only while their project has room.

Invariant: an object is admitted iff hard > used for its dimension. Equality
counts as exhausted, because the accounting controller is expected to have
counted the object being admitted already.

The ProjectResourceQuota named by the tag is re-fetched here; it may have been
deleted since tagging. That surfaces as UpstreamError, exactly like any other
lookup failure.
"""

import logging
from typing import Any

from projectquota.errors import (
    MissingOwnershipTagError,
    NotFoundError,
    QuotaExceededError,
    UpstreamError,
)
from projectquota.repositories.project_quota_repo import ProjectQuotaRepository
from projectquota.resources import GovernedKind, Operation, quota_tag_key

log = logging.getLogger(__name__)

_ENFORCED_OPERATIONS = (Operation.CREATE, Operation.UPDATE)


class QuotaEnforcer:
    def __init__(self, repo: ProjectQuotaRepository) -> None:
        self.repo = repo

    async def enforce(
        self, governed: GovernedKind, obj: dict[str, Any], operation: Operation
    ) -> None:
        if operation not in _ENFORCED_OPERATIONS:
            return

        metadata = obj.get("metadata") or {}
        tags = metadata.get(governed.channel.value) or {}
        key = quota_tag_key()
        quota_name = tags.get(key)

        if not quota_name:
            if governed.require_tag:
                raise MissingOwnershipTagError(f"missing {governed.channel.singular} {key}")
            return

        try:
            quota = await self.repo.get(quota_name)
        except NotFoundError as exc:
            raise UpstreamError(
                f"ProjectResourceQuota '{quota_name}' could not be resolved: {exc.message}"
            ) from exc
        dimension = governed.dimension

        if quota.hard_quantity(dimension) > quota.used_quantity(dimension):
            log.info(
                "Admitted %s %s/%s under ProjectResourceQuota %s",
                governed.kind.value,
                metadata.get("namespace", ""),
                metadata.get("name", ""),
                quota_name,
            )
            return

        message = (
            f"over project resource quota. current {dimension} counts "
            f"{quota.used_display(dimension)}, hard limit count "
            f"{quota.hard_display(dimension)}"
        )
        log.warning(
            "Rejected %s %s/%s: %s",
            governed.kind.value,
            metadata.get("namespace", ""),
            metadata.get("name", ""),
            message,
        )
        raise QuotaExceededError(message)
