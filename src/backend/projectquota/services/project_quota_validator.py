"""ProjectResourceQuota self-validation.

A declared hard limit may not drop below the usage already recorded for it.
Equality is allowed: the declaration is consistent with what exists.
"""

from projectquota.errors import InvalidQuotaError
from projectquota.resources import TRACKED_DIMENSIONS
from projectquota.schemas.project_quota import ProjectQuota


def validate_update(old: ProjectQuota | None, new: ProjectQuota) -> None:
    for dimension in TRACKED_DIMENSIONS:
        if new.hard_quantity(dimension) < new.used_quantity(dimension):
            raise InvalidQuotaError(
                f"hard limit {new.hard_display(dimension)} is less than used "
                f"{new.used_display(dimension)} for {dimension}"
            )
