"""Virtual network resource handler.

Network files name their CNI in metadata.cnitype; creation is delegated to
the matching CNI handler. The created name encodes the CNI so delete and get
can find the handler again:

    {internal_vnf_id}_{cnitype}_{network name}
"""

import logging
from typing import Any, Iterable, Optional

from common import ResourceRequest, decode_yaml_file
from errors import InvalidManifestError, NotFoundError

logger = logging.getLogger(__name__)


def split_network_name(name: str, cni_types: Iterable[str] = ()) -> tuple[str, str, str]:
    """Split a created network name into (vnf_id, cni_type, network_name).

    The VNF ID starts with the cloud region, which may itself contain '_'.
    When cni_types is given, the first '_{cni}_' segment naming a known CNI
    marks the split; otherwise the name is split at its first two '_'.

    Raises:
        InvalidManifestError: If name does not have three parts
    """
    for index, char in enumerate(name):
        if char != '_' or index == 0:
            continue
        for cni_type in cni_types:
            marker = f"{cni_type}_"
            rest = name[index + 1:]
            if rest.startswith(marker) and len(rest) > len(marker):
                return name[:index], cni_type, rest[len(marker):]

    parts = name.split('_', 2)
    if len(parts) != 3 or not all(parts):
        raise InvalidManifestError(f"Malformed network resource name: {name}")
    return parts[0], parts[1], parts[2]


class NetworkPlugin:
    """Dispatches network operations to CNI handlers by cnitype.

    Attributes:
        cni_handlers: cnitype -> handler with create_network/delete_network/get_network
    """

    def __init__(self, cni_handlers: Optional[dict[str, Any]] = None):
        self.cni_handlers: dict[str, Any] = dict(cni_handlers or {})

    @classmethod
    def with_builtins(cls) -> 'NetworkPlugin':
        from plugins.network.ovn4nfvk8s import Ovn4nfvNetwork
        return cls({'ovn4nfvk8s': Ovn4nfvNetwork()})

    def _handler(self, cni_type: str) -> Any:
        handler = self.cni_handlers.get(cni_type)
        if handler is None:
            raise NotFoundError(f"No plugin for network type {cni_type} found")
        return handler

    def create_resource(self, request: ResourceRequest, client: Any) -> str:
        logger.info("Create virtual network")
        if request.yaml_file_path is None:
            raise InvalidManifestError("Network request has no resource file")
        network_file = decode_yaml_file(request.yaml_file_path)
        cni_type = (network_file.get('metadata') or {}).get('cnitype')
        if not cni_type:
            raise InvalidManifestError(f"{request.yaml_file_path}: metadata.cnitype is required")

        name = self._handler(cni_type).create_network(request, client)
        return f"{request.internal_vnf_id}_{cni_type}_{name}"

    def list_resources(self, limit: int, namespace: str, client: Any) -> list[str]:
        # CNI networks are not namespaced objects; nothing to enumerate
        return []

    def delete_resource(self, name: str, namespace: str, client: Any) -> None:
        _, cni_type, network_name = split_network_name(name, self.cni_handlers)
        logger.info(f"Deleting network: {name}")
        self._handler(cni_type).delete_network(network_name, client)

    def get_resource(self, name: str, namespace: str, client: Any) -> Optional[str]:
        _, cni_type, network_name = split_network_name(name, self.cni_handlers)
        if self._handler(cni_type).get_network(network_name, client) is None:
            return None
        return name
