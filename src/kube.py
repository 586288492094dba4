"""Kubernetes client access for resource plugins.

Plugins receive a KubeClient and call the typed API objects on it. How the
API client is built (kubeconfig file, kubeconfig dict from a connectivity
record, in-cluster service account) is decided here.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from kubernetes import client, config
from kubernetes.client import ApiClient
from kubernetes.config.config_exception import ConfigException

from errors import BackendError

logger = logging.getLogger(__name__)


@dataclass
class KubeClient:
    """Typed Kubernetes API objects sharing one ApiClient.

    Attributes:
        core_v1: Namespaces, services, pods
        apps_v1: Deployments
        custom_objects: CRDs (e.g. CNI network objects)
        api_client: Underlying ApiClient (None for test doubles)
    """
    core_v1: Any
    apps_v1: Any
    custom_objects: Any
    api_client: Optional[ApiClient] = None

    @classmethod
    def from_api_client(cls, api_client: ApiClient) -> 'KubeClient':
        return cls(
            core_v1=client.CoreV1Api(api_client),
            apps_v1=client.AppsV1Api(api_client),
            custom_objects=client.CustomObjectsApi(api_client),
            api_client=api_client,
        )


def load_kube_client(
    kubeconfig: Optional[Path] = None,
    config_dict: Optional[dict] = None,
) -> KubeClient:
    """Build a KubeClient.

    Priority:
    1. config_dict - kubeconfig content (e.g. from a connectivity record)
    2. kubeconfig - kubeconfig file path
    3. In-cluster service account, then the default kubeconfig

    Raises:
        BackendError: If no usable configuration is found
    """
    try:
        if config_dict is not None:
            api_client = config.new_client_from_config_dict(config_dict)
        elif kubeconfig is not None:
            api_client = config.new_client_from_config(config_file=str(kubeconfig))
        else:
            try:
                config.load_incluster_config()
                logger.debug("Using in-cluster Kubernetes configuration")
            except ConfigException:
                config.load_kube_config()
                logger.debug("Using default kubeconfig")
            api_client = ApiClient()
    except (ConfigException, OSError) as e:
        raise BackendError(f"Cannot configure Kubernetes client: {e}")

    return KubeClient.from_api_client(api_client)
