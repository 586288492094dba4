"""Resource plugin contract and helpers shared by built-in handlers."""

import logging
from enum import Enum
from typing import Any, Optional, Protocol, runtime_checkable

from kubernetes.client.rest import ApiException

from common import DEFAULT_NAMESPACE, ResourceRequest, decode_yaml_file
from errors import InvalidManifestError

logger = logging.getLogger(__name__)


class Capability(str, Enum):
    """Capability names a plugin exposes, mapped to their Python callables."""
    CREATE = 'create_resource'
    LIST = 'list_resources'
    DELETE = 'delete_resource'
    GET = 'get_resource'


@runtime_checkable
class ResourcePlugin(Protocol):
    """Protocol for resource-type handlers.

    A handler may be a module or an object; it only needs these callables.
    """

    def create_resource(self, request: ResourceRequest, client: Any) -> str:
        """Create the resource described by request; return its name."""

    def list_resources(self, limit: int, namespace: str, client: Any) -> list[str]:
        """List up to limit resource names in namespace."""

    def delete_resource(self, name: str, namespace: str, client: Any) -> None:
        """Delete a resource by name."""

    def get_resource(self, name: str, namespace: str, client: Any) -> Optional[str]:
        """Return the resource name if it exists, None otherwise."""


def namespace_or_default(namespace: Optional[str]) -> str:
    return namespace or DEFAULT_NAMESPACE


def prepare_object(request: ResourceRequest, kind: str) -> dict:
    """Decode a resource file and bind it to the request.

    Sets metadata.namespace and prefixes metadata.name with the internal
    VNF ID (cloud1-default-1a2b-sisedeploy).

    Raises:
        NotFoundError: If the file does not exist
        InvalidManifestError: If the file does not hold a named object of kind
    """
    if request.yaml_file_path is None:
        raise InvalidManifestError(f"{kind} request has no resource file")
    obj = decode_yaml_file(request.yaml_file_path, expected_kind=kind)
    metadata = obj.setdefault('metadata', {}) or {}
    if not metadata.get('name'):
        raise InvalidManifestError(f"{request.yaml_file_path}: {kind} has no metadata.name")
    metadata['namespace'] = namespace_or_default(request.namespace)
    if request.internal_vnf_id:
        metadata['name'] = f"{request.internal_vnf_id}-{metadata['name']}"
    obj['metadata'] = metadata
    return obj


def is_not_found(error: ApiException) -> bool:
    return getattr(error, 'status', None) == 404
