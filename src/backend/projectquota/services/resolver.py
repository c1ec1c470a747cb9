"""Quota resolver: which ProjectResourceQuota owns a namespace for a dimension.

Resolution walks the listing in the order the API server returns it and the
first non-deleting record that claims the namespace wins. If that record does
not declare a hard limit for the dimension, the object is untracked even when
a later record would have tracked it.

The optional listing cache holds the raw listing, so both rules above are
evaluated exactly as they are against a fresh listing.
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass

from projectquota.repositories.project_quota_repo import ProjectQuotaRepository
from projectquota.schemas.project_quota import ProjectQuota

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class Owner:
    quota_name: str
    namespace: str


class QuotaResolver:
    def __init__(
        self,
        repo: ProjectQuotaRepository,
        cache_ttl_seconds: float = 0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.repo = repo
        self._cache_ttl = cache_ttl_seconds
        self._clock = clock
        self._snapshot: tuple[float, list[ProjectQuota]] | None = None

    async def _list(self) -> list[ProjectQuota]:
        if self._cache_ttl <= 0:
            return await self.repo.list_all()

        now = self._clock()
        snapshot = self._snapshot
        if snapshot is not None and now - snapshot[0] < self._cache_ttl:
            return snapshot[1]

        quotas = await self.repo.list_all()
        self._snapshot = (now, quotas)
        return quotas

    def invalidate(self) -> None:
        self._snapshot = None

    async def resolve(self, namespace: str, dimension: str) -> Owner | None:
        claimants = [
            quota
            for quota in await self._list()
            if not quota.deletion_requested and namespace in quota.namespaces
        ]
        if not claimants:
            return None

        if len(claimants) > 1:
            log.warning(
                "Namespace %s is claimed by several ProjectResourceQuotas %s; using %s",
                namespace,
                [quota.name for quota in claimants],
                claimants[0].name,
            )

        owner = claimants[0]
        if not owner.tracks(dimension):
            return None
        return Owner(quota_name=owner.name, namespace=namespace)
