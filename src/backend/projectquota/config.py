"""AppSettings -- project quota webhook configuration.

All environment variables are read via pydantic-settings. Nothing is
required: the defaults match an in-cluster deployment of the jenting.io CRD.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Webhook settings, loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    LOG_LEVEL: str = "INFO"

    # Kubernetes API access
    KUBE_IN_CLUSTER: bool = True
    KUBE_REQUEST_TIMEOUT_SECONDS: int = 10

    # ProjectResourceQuota custom resource
    PRQ_GROUP: str = "jenting.io"
    PRQ_VERSION: str = "v1"
    PRQ_PLURAL: str = "projectresourcequotas"

    # Ownership tag keys are "<prefix>/project-resource-quota" and
    # "<prefix>/project-namespace"
    TAG_KEY_PREFIX: str = "jenting.io"

    # 0 disables the resolver listing cache
    RESOLVER_CACHE_TTL_SECONDS: float = 0

    # When false a tag stays on an object whose namespace no longer resolves
    CLEAR_STALE_TAGS: bool = False


settings = AppSettings()
