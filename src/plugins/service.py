"""Service resource handler."""

import logging
from typing import Any, Optional

from kubernetes.client.rest import ApiException

from common import ResourceRequest
from plugins.base import is_not_found, namespace_or_default, prepare_object

logger = logging.getLogger(__name__)


def create_resource(request: ResourceRequest, client: Any) -> str:
    body = prepare_object(request, 'Service')
    namespace = body['metadata']['namespace']
    result = client.core_v1.create_namespaced_service(namespace, body)
    logger.info(f"Service {result.metadata.name} created in {namespace}")
    return result.metadata.name


def list_resources(limit: int, namespace: str, client: Any) -> list[str]:
    result = client.core_v1.list_namespaced_service(namespace_or_default(namespace), limit=limit)
    return [item.metadata.name for item in (result.items or [])]


def delete_resource(name: str, namespace: str, client: Any) -> None:
    logger.info(f"Deleting service: {name}")
    client.core_v1.delete_namespaced_service(
        name, namespace_or_default(namespace), propagation_policy='Foreground',
    )


def get_resource(name: str, namespace: str, client: Any) -> Optional[str]:
    try:
        service = client.core_v1.read_namespaced_service(name, namespace_or_default(namespace))
    except ApiException as e:
        if is_not_found(e):
            return None
        raise
    return service.metadata.name
