"""Pydantic model of the ProjectResourceQuota custom resource."""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from kubernetes.utils import parse_quantity
from pydantic import BaseModel, field_validator

_ZERO = "0"


class ProjectQuota(BaseModel):
    """Decoded ProjectResourceQuota.

    hard and used keep the declared quantity strings so messages can quote
    them verbatim; comparisons go through hard_quantity/used_quantity.
    """

    name: str
    namespaces: list[str] = []
    hard: dict[str, str] = {}
    used: dict[str, str] = {}
    deletion_requested: bool = False

    @field_validator("hard", "used", mode="before")
    @classmethod
    def validate_quantities(cls, v: Any) -> dict[str, str]:
        if v is None:
            return {}
        quantities = {str(k): str(q) for k, q in dict(v).items()}
        for dimension, quantity in quantities.items():
            if parse_quantity(quantity) < 0:
                msg = f"quantity for {dimension} must be non-negative, got {quantity}"
                raise ValueError(msg)
        return quantities

    @classmethod
    def from_k8s(cls, obj: dict[str, Any]) -> ProjectQuota:
        metadata = obj.get("metadata") or {}
        spec = obj.get("spec") or {}
        status = obj.get("status") or {}
        return cls(
            name=metadata.get("name", ""),
            namespaces=spec.get("namespaces") or [],
            hard=spec.get("hard"),
            used=status.get("used"),
            deletion_requested=metadata.get("deletionTimestamp") is not None,
        )

    def tracks(self, dimension: str) -> bool:
        return dimension in self.hard

    def hard_display(self, dimension: str) -> str:
        return self.hard.get(dimension, _ZERO)

    def used_display(self, dimension: str) -> str:
        return self.used.get(dimension, _ZERO)

    def hard_quantity(self, dimension: str) -> Decimal:
        return parse_quantity(self.hard_display(dimension))

    def used_quantity(self, dimension: str) -> Decimal:
        return parse_quantity(self.used_display(dimension))
