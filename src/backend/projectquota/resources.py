"""Resource kinds, quota dimensions and per-kind ownership tag contracts.

Every governed kind is described by one GovernedKind record: the quota
dimension it counts against, the metadata channel its ownership tag lives in,
whether the matched namespace is written too, and whether a missing tag is a
rejection. The accounting controller counts objects off these exact channels,
so the table below is part of the external contract.
"""

from dataclasses import dataclass
from enum import Enum

from projectquota.config import settings


class ResourceKind(str, Enum):
    PERSISTENT_VOLUME_CLAIM = "PersistentVolumeClaim"
    REPLICATION_CONTROLLER = "ReplicationController"
    RESOURCE_QUOTA = "ResourceQuota"
    SECRET = "Secret"
    PROJECT_RESOURCE_QUOTA = "ProjectResourceQuota"


class Operation(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    CONNECT = "CONNECT"


class TagChannel(str, Enum):
    ANNOTATIONS = "annotations"
    LABELS = "labels"

    @property
    def singular(self) -> str:
        return self.value.removesuffix("s")


# ── Quota dimensions (core/v1 ResourceName values) ──────────────────────────

CPU = "cpu"
MEMORY = "memory"
STORAGE = "storage"
EPHEMERAL_STORAGE = "ephemeral-storage"
PODS = "pods"
SERVICES = "services"
REPLICATION_CONTROLLERS = "replicationcontrollers"
RESOURCE_QUOTAS = "resourcequotas"
SECRETS = "secrets"
CONFIG_MAPS = "configmaps"
PERSISTENT_VOLUME_CLAIMS = "persistentvolumeclaims"
SERVICES_NODE_PORTS = "services.nodeports"
SERVICES_LOAD_BALANCERS = "services.loadbalancers"
REQUESTS_CPU = "requests.cpu"
REQUESTS_MEMORY = "requests.memory"
REQUESTS_STORAGE = "requests.storage"
REQUESTS_EPHEMERAL_STORAGE = "requests.ephemeral-storage"
LIMITS_CPU = "limits.cpu"
LIMITS_MEMORY = "limits.memory"
LIMITS_EPHEMERAL_STORAGE = "limits.ephemeral-storage"

# Checked in this order by the ProjectResourceQuota validator.
TRACKED_DIMENSIONS: tuple[str, ...] = (
    CPU,
    MEMORY,
    STORAGE,
    EPHEMERAL_STORAGE,
    PODS,
    SERVICES,
    REPLICATION_CONTROLLERS,
    RESOURCE_QUOTAS,
    SECRETS,
    CONFIG_MAPS,
    PERSISTENT_VOLUME_CLAIMS,
    SERVICES_NODE_PORTS,
    SERVICES_LOAD_BALANCERS,
    REQUESTS_CPU,
    REQUESTS_MEMORY,
    REQUESTS_STORAGE,
    REQUESTS_EPHEMERAL_STORAGE,
    LIMITS_CPU,
    LIMITS_MEMORY,
    LIMITS_EPHEMERAL_STORAGE,
)


# ── Ownership tag keys ──────────────────────────────────────────────────────

def quota_tag_key() -> str:
    return f"{settings.TAG_KEY_PREFIX}/project-resource-quota"


def namespace_tag_key() -> str:
    return f"{settings.TAG_KEY_PREFIX}/project-namespace"


@dataclass(frozen=True)
class GovernedKind:
    kind: ResourceKind
    dimension: str
    channel: TagChannel
    tag_namespace: bool
    require_tag: bool

    def tag_keys(self) -> tuple[str, ...]:
        if self.tag_namespace:
            return (namespace_tag_key(), quota_tag_key())
        return (quota_tag_key(),)


GOVERNED_KINDS: dict[ResourceKind, GovernedKind] = {
    ResourceKind.PERSISTENT_VOLUME_CLAIM: GovernedKind(
        kind=ResourceKind.PERSISTENT_VOLUME_CLAIM,
        dimension=PERSISTENT_VOLUME_CLAIMS,
        channel=TagChannel.ANNOTATIONS,
        tag_namespace=True,
        require_tag=True,
    ),
    ResourceKind.REPLICATION_CONTROLLER: GovernedKind(
        kind=ResourceKind.REPLICATION_CONTROLLER,
        dimension=REPLICATION_CONTROLLERS,
        channel=TagChannel.ANNOTATIONS,
        tag_namespace=False,
        require_tag=True,
    ),
    ResourceKind.RESOURCE_QUOTA: GovernedKind(
        kind=ResourceKind.RESOURCE_QUOTA,
        dimension=RESOURCE_QUOTAS,
        channel=TagChannel.ANNOTATIONS,
        tag_namespace=True,
        require_tag=True,
    ),
    # Secrets created before quota tracking carry no label and stay admitted.
    ResourceKind.SECRET: GovernedKind(
        kind=ResourceKind.SECRET,
        dimension=SECRETS,
        channel=TagChannel.LABELS,
        tag_namespace=False,
        require_tag=False,
    ),
}
