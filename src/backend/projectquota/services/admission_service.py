"""Admission service: routes defaulting and validation calls by resource kind.

Governed kinds share one tagger and one enforcer, parameterised by their
GovernedKind record. ProjectResourceQuota updates go to the self-validator.
"""

from typing import Any

from pydantic import ValidationError

from projectquota.errors import BadRequestError, InvalidQuotaError
from projectquota.repositories.project_quota_repo import ProjectQuotaRepository
from projectquota.resources import GOVERNED_KINDS, Operation, ResourceKind
from projectquota.schemas.project_quota import ProjectQuota
from projectquota.services.enforcer import QuotaEnforcer
from projectquota.services.project_quota_validator import validate_update
from projectquota.services.resolver import QuotaResolver
from projectquota.services.tagger import OwnershipTagger


def _decode_project_quota(obj: dict[str, Any] | None) -> ProjectQuota | None:
    if obj is None:
        return None
    try:
        return ProjectQuota.from_k8s(obj)
    except ValidationError as exc:
        raise InvalidQuotaError(f"Invalid ProjectResourceQuota: {exc}") from exc


def _decode_stored(obj: dict[str, Any] | None) -> ProjectQuota | None:
    # A malformed stored record must stay repairable by an update.
    try:
        return _decode_project_quota(obj)
    except InvalidQuotaError:
        return None


class AdmissionService:
    def __init__(
        self,
        resolver: QuotaResolver,
        repo: ProjectQuotaRepository,
        clear_stale_tags: bool = False,
    ) -> None:
        self.resolver = resolver
        self.tagger = OwnershipTagger(resolver, clear_stale_tags=clear_stale_tags)
        self.enforcer = QuotaEnforcer(repo)

    async def default(
        self, kind: ResourceKind, operation: Operation, obj: dict[str, Any]
    ) -> dict[str, Any]:
        if kind is ResourceKind.PROJECT_RESOURCE_QUOTA:
            return obj
        if operation not in (Operation.CREATE, Operation.UPDATE):
            return obj
        return await self.tagger.tag(GOVERNED_KINDS[kind], obj)

    async def validate(
        self,
        kind: ResourceKind,
        operation: Operation,
        obj: dict[str, Any] | None,
        old_obj: dict[str, Any] | None = None,
    ) -> None:
        if kind is ResourceKind.PROJECT_RESOURCE_QUOTA:
            if operation in (Operation.CREATE, Operation.UPDATE):
                new = _decode_project_quota(obj)
                if new is None:
                    raise BadRequestError(
                        f"{operation.value} request carries no ProjectResourceQuota"
                    )
                if operation is Operation.UPDATE:
                    validate_update(_decode_stored(old_obj), new)
            # Namespace ownership may have changed.
            self.resolver.invalidate()
            return

        await self.enforcer.enforce(GOVERNED_KINDS[kind], obj or {}, operation)
