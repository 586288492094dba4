"""Namespace resource handler."""

import logging
from typing import Any, Optional

from kubernetes.client.rest import ApiException

from common import ResourceRequest
from plugins.base import is_not_found, namespace_or_default

logger = logging.getLogger(__name__)


def create_resource(request: ResourceRequest, client: Any) -> str:
    """Create the request's namespace."""
    name = namespace_or_default(request.namespace)
    client.core_v1.create_namespace(body={'metadata': {'name': name}})
    logger.info(f"Namespace ({name}) created")
    return name


def list_resources(limit: int, namespace: str, client: Any) -> list[str]:
    result = client.core_v1.list_namespace(limit=limit)
    return [item.metadata.name for item in (result.items or [])]


def delete_resource(name: str, namespace: str, client: Any) -> None:
    logger.info(f"Deleting namespace: {name}")
    client.core_v1.delete_namespace(name, propagation_policy='Foreground')


def get_resource(name: str, namespace: str, client: Any) -> Optional[str]:
    """Return the namespace name if it exists."""
    try:
        ns = client.core_v1.read_namespace(namespace_or_default(name))
    except ApiException as e:
        if is_not_found(e):
            return None
        raise
    return ns.metadata.name
