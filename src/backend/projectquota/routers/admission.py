"""Admission webhook endpoints, one mutating and one validating per kind.

POST /mutate--v1-<kind>      -- ownership tagging, answers with a JSONPatch
POST /validate--v1-<kind>    -- quota enforcement
POST /mutate-jenting-io-v1-projectresourcequota    -- no-op
POST /validate-jenting-io-v1-projectresourcequota  -- hard >= used check

Policy violations are answered with allowed=false. Any other error escapes
to the global handler and yields a non-2xx response, so the API server
applies the webhook's configured failure policy.
"""

import base64
import copy
import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Request

from projectquota.errors import BadRequestError, PolicyViolation
from projectquota.middleware import request_id_var
from projectquota.resources import ResourceKind, TagChannel
from projectquota.schemas.admission import (
    AdmissionResponse,
    AdmissionReview,
    AdmissionReviewResponse,
    AdmissionStatus,
)
from projectquota.services.admission_service import AdmissionService

log = logging.getLogger(__name__)

router = APIRouter(tags=["admission"])

_CORE_PATHS: dict[ResourceKind, str] = {
    ResourceKind.PERSISTENT_VOLUME_CLAIM: "-v1-persistentvolumeclaim",
    ResourceKind.REPLICATION_CONTROLLER: "-v1-replicationcontroller",
    ResourceKind.RESOURCE_QUOTA: "-v1-resourcequota",
    ResourceKind.SECRET: "-v1-secret",
    ResourceKind.PROJECT_RESOURCE_QUOTA: "jenting-io-v1-projectresourcequota",
}


def get_admission_service(request: Request) -> AdmissionService:
    return request.app.state.admission_service


# ── Response helpers ───────────────────────────────────────────────────────────

def _escape(key: str) -> str:
    return key.replace("~", "~0").replace("/", "~1")


def tag_patch(before: dict[str, Any], after: dict[str, Any]) -> list[dict[str, Any]]:
    """JSONPatch operations turning ``before`` into ``after`` on the tag channels."""
    if "metadata" not in before and after.get("metadata"):
        return [{"op": "add", "path": "/metadata", "value": after["metadata"]}]

    before_meta = before.get("metadata") or {}
    after_meta = after.get("metadata") or {}
    ops: list[dict[str, Any]] = []

    for channel in TagChannel:
        old = before_meta.get(channel.value)
        new = after_meta.get(channel.value) or {}
        if (old or {}) == new:
            continue
        if old is None:
            ops.append({"op": "add", "path": f"/metadata/{channel.value}", "value": new})
            continue
        for key, value in new.items():
            if old.get(key) != value:
                path = f"/metadata/{channel.value}/{_escape(key)}"
                ops.append({"op": "add", "path": path, "value": value})
        for key in old:
            if key not in new:
                path = f"/metadata/{channel.value}/{_escape(key)}"
                ops.append({"op": "remove", "path": path})
    return ops


def _allowed(uid: str, patch: list[dict[str, Any]] | None = None) -> dict[str, Any]:
    response = AdmissionResponse(uid=uid, allowed=True)
    if patch:
        response.patch = base64.b64encode(json.dumps(patch).encode()).decode()
        response.patch_type = "JSONPatch"
    return AdmissionReviewResponse(response=response).model_dump(
        by_alias=True, exclude_none=True
    )


def _denied(uid: str, exc: PolicyViolation) -> dict[str, Any]:
    response = AdmissionResponse(
        uid=uid,
        allowed=False,
        status=AdmissionStatus(code=exc.status_code, message=exc.message, reason=exc.code),
    )
    return AdmissionReviewResponse(response=response).model_dump(
        by_alias=True, exclude_none=True
    )


def _check_kind(review: AdmissionReview, kind: ResourceKind) -> None:
    got = review.request.kind.kind
    if got != kind.value:
        raise BadRequestError(f"expected a {kind.value} but got a {got}")


def _request_object(review: AdmissionReview) -> dict[str, Any]:
    request = review.request
    obj = copy.deepcopy(request.object or request.old_object or {})
    metadata = obj.get("metadata")
    if metadata is not None and not metadata.get("namespace") and request.namespace:
        metadata["namespace"] = request.namespace
    return obj


# ── Handlers ───────────────────────────────────────────────────────────────────

def _mutating_handler(kind: ResourceKind):
    async def mutate(
        review: AdmissionReview,
        svc: AdmissionService = Depends(get_admission_service),
    ) -> dict[str, Any]:
        request = review.request
        request_id_var.set(request.uid)
        _check_kind(review, kind)
        obj = _request_object(review)
        before = copy.deepcopy(obj)
        tagged = await svc.default(kind, request.operation, obj)
        return _allowed(request.uid, tag_patch(before, tagged))

    return mutate


def _validating_handler(kind: ResourceKind):
    async def validate(
        review: AdmissionReview,
        svc: AdmissionService = Depends(get_admission_service),
    ) -> dict[str, Any]:
        request = review.request
        request_id_var.set(request.uid)
        _check_kind(review, kind)
        try:
            await svc.validate(
                kind,
                request.operation,
                _request_object(review),
                request.old_object,
            )
        except PolicyViolation as exc:
            log.info("Denied %s %s: %s", request.operation.value, kind.value, exc.message)
            return _denied(request.uid, exc)
        return _allowed(request.uid)

    return validate


for _kind, _suffix in _CORE_PATHS.items():
    router.post(f"/mutate-{_suffix}", name=f"mutate-{_kind.value}")(_mutating_handler(_kind))
    router.post(f"/validate-{_suffix}", name=f"validate-{_kind.value}")(
        _validating_handler(_kind)
    )
