"""Repository for ProjectResourceQuota records.

The kubernetes client is blocking, so every call runs in a worker thread.
Listing and fetching failures surface as UpstreamError; a missing record
surfaces as NotFoundError. A malformed record is left out of listings so it
cannot break resolution for namespaces it does not claim.
"""

import asyncio
import logging
from typing import Any

from kubernetes import client
from kubernetes.client.exceptions import ApiException
from pydantic import ValidationError
from urllib3.exceptions import HTTPError

from projectquota.config import settings
from projectquota.errors import NotFoundError, UpstreamError
from projectquota.schemas.project_quota import ProjectQuota

log = logging.getLogger(__name__)


def _decode(obj: dict[str, Any]) -> ProjectQuota:
    try:
        return ProjectQuota.from_k8s(obj)
    except ValidationError as exc:
        name = (obj.get("metadata") or {}).get("name", "<unnamed>")
        raise UpstreamError(f"Malformed ProjectResourceQuota '{name}': {exc}") from exc


class ProjectQuotaRepository:
    def __init__(self, api: client.CustomObjectsApi) -> None:
        self.api = api

    async def list_all(self) -> list[ProjectQuota]:
        """Return every ProjectResourceQuota in the order the API server lists them."""
        try:
            body = await asyncio.to_thread(
                self.api.list_cluster_custom_object,
                group=settings.PRQ_GROUP,
                version=settings.PRQ_VERSION,
                plural=settings.PRQ_PLURAL,
                _request_timeout=settings.KUBE_REQUEST_TIMEOUT_SECONDS,
            )
        except (ApiException, HTTPError) as exc:
            raise UpstreamError(f"Failed to list ProjectResourceQuotas: {exc}") from exc
        quotas: list[ProjectQuota] = []
        for item in body.get("items", []):
            try:
                quotas.append(_decode(item))
            except UpstreamError as exc:
                log.warning("Skipping ProjectResourceQuota: %s", exc.message)
        return quotas

    async def get(self, name: str) -> ProjectQuota:
        try:
            body = await asyncio.to_thread(
                self.api.get_cluster_custom_object,
                group=settings.PRQ_GROUP,
                version=settings.PRQ_VERSION,
                plural=settings.PRQ_PLURAL,
                name=name,
                _request_timeout=settings.KUBE_REQUEST_TIMEOUT_SECONDS,
            )
        except ApiException as exc:
            if exc.status == 404:
                raise NotFoundError(f"ProjectResourceQuota '{name}' not found") from exc
            raise UpstreamError(f"Failed to get ProjectResourceQuota '{name}': {exc}") from exc
        except HTTPError as exc:
            raise UpstreamError(f"Failed to get ProjectResourceQuota '{name}': {exc}") from exc
        return _decode(body)
