"""Ownership tagger: stamps the owning ProjectResourceQuota onto governed objects.

Runs in the mutating phase on create and update. The tag is recomputed from
the namespace and the current ProjectResourceQuota listing every time, so
running it twice over unchanged state writes the same keys and values.
"""

import logging
from typing import Any

from projectquota.resources import GovernedKind, namespace_tag_key, quota_tag_key
from projectquota.services.resolver import QuotaResolver

log = logging.getLogger(__name__)


class OwnershipTagger:
    def __init__(self, resolver: QuotaResolver, clear_stale_tags: bool = False) -> None:
        self.resolver = resolver
        self.clear_stale_tags = clear_stale_tags

    async def tag(self, governed: GovernedKind, obj: dict[str, Any]) -> dict[str, Any]:
        metadata = obj.get("metadata") or {}
        namespace = metadata.get("namespace", "")

        owner = await self.resolver.resolve(namespace, governed.dimension)
        if owner is None:
            if self.clear_stale_tags:
                self._clear(governed, metadata)
            return obj

        obj["metadata"] = metadata
        tags = metadata.get(governed.channel.value) or {}
        metadata[governed.channel.value] = tags

        if governed.tag_namespace:
            tags[namespace_tag_key()] = owner.namespace
        tags[quota_tag_key()] = owner.quota_name

        log.info(
            "Tagged %s %s/%s with ProjectResourceQuota %s",
            governed.kind.value,
            namespace,
            metadata.get("name", ""),
            owner.quota_name,
        )
        return obj

    @staticmethod
    def _clear(governed: GovernedKind, metadata: dict[str, Any]) -> None:
        tags = metadata.get(governed.channel.value)
        if not tags:
            return
        removed = [key for key in governed.tag_keys() if tags.pop(key, None) is not None]
        if removed:
            log.info(
                "Cleared stale ownership %s %s from %s %s/%s",
                governed.channel.singular,
                removed,
                governed.kind.value,
                metadata.get("namespace", ""),
                metadata.get("name", ""),
            )
