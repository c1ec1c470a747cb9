"""Pydantic schemas for the admission.k8s.io/v1 AdmissionReview envelope."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from projectquota.resources import Operation

# ── Request schemas ────────────────────────────────────────────────────────────

class GroupVersionKind(BaseModel):
    group: str = ""
    version: str = ""
    kind: str


class AdmissionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uid: str
    kind: GroupVersionKind
    namespace: str | None = None
    name: str | None = None
    operation: Operation
    object: dict[str, Any] | None = None
    old_object: dict[str, Any] | None = Field(default=None, alias="oldObject")
    dry_run: bool = Field(default=False, alias="dryRun")


class AdmissionReview(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    api_version: str = Field(default="admission.k8s.io/v1", alias="apiVersion")
    kind: str = "AdmissionReview"
    request: AdmissionRequest


# ── Response schemas ───────────────────────────────────────────────────────────

class AdmissionStatus(BaseModel):
    code: int
    message: str
    reason: str | None = None


class AdmissionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    uid: str
    allowed: bool
    status: AdmissionStatus | None = None
    patch: str | None = None
    patch_type: str | None = Field(default=None, alias="patchType")


class AdmissionReviewResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    api_version: str = Field(default="admission.k8s.io/v1", alias="apiVersion")
    kind: str = "AdmissionReview"
    response: AdmissionResponse
