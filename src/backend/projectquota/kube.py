"""Kubernetes API client bootstrap.

In-cluster service account credentials are used by default; set
KUBE_IN_CLUSTER=false to fall back to the local kubeconfig.
"""

import logging

from kubernetes import client, config

from projectquota.config import settings

log = logging.getLogger(__name__)


def load_custom_objects_api() -> client.CustomObjectsApi:
    if settings.KUBE_IN_CLUSTER:
        config.load_incluster_config()
        log.info("Loaded in-cluster Kubernetes configuration")
    else:
        config.load_kube_config()
        log.info("Loaded kubeconfig Kubernetes configuration")
    return client.CustomObjectsApi()
