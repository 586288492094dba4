"""OVN network handler driven through ovn-nbctl.

A network is a logical switch attached to the ovn4nfv router:

    router --[rtos-<name>]--[stor-<name>]-- switch <name> (subnet, gateway)
"""

import logging
import os
import random
from typing import Any, Optional

from common import ResourceRequest, decode_yaml_file, run_command
from errors import BackendError, InvalidManifestError

logger = logging.getLogger(__name__)

OVN4NFV_ROUTER = 'ovn4nfv-master'


def generate_mac() -> str:
    """Generate a locally administered MAC for a router port."""
    return '00:00:00:' + ':'.join(f'{random.randint(0, 254):02x}' for _ in range(3))


class Ovn4nfvNetwork:
    """Creates and deletes OVN logical switches for networks.

    Attributes:
        nb_db: Northbound DB address (e.g. tcp:198.51.100.3:6641); None = local
        nbctl: ovn-nbctl binary
        timeout: Per-command timeout in seconds
    """

    def __init__(self, nb_db: Optional[str] = None, nbctl: str = 'ovn-nbctl', timeout: int = 30):
        self.nb_db = nb_db if nb_db is not None else os.environ.get('OVN_NB_DB')
        self.nbctl = nbctl
        self.timeout = timeout

    def _nbctl(self, *args: str) -> str:
        cmd = [self.nbctl]
        if self.nb_db:
            cmd.append(f'--db={self.nb_db}')
        cmd.extend(args)
        rc, out, err = run_command(cmd, timeout=self.timeout)
        if rc != 0:
            logger.error(f"ovn-nbctl {' '.join(args)} failed: {err.strip()}")
            raise BackendError(f"ovn-nbctl {args[0] if args else ''} failed: {err.strip()}")
        return out.strip().strip('"')

    def create_network(self, request: ResourceRequest, client: Any) -> str:
        spec = (decode_yaml_file(request.yaml_file_path).get('spec') or {})
        name = spec.get('name')
        subnet = spec.get('subnet')
        gateway = spec.get('gateway')
        if not name or not subnet or not gateway:
            raise InvalidManifestError(
                f"{request.yaml_file_path}: spec.name, spec.subnet and spec.gateway are required"
            )

        router_mac = self._nbctl('--if-exist', 'get', 'logical_router_port', f'rtos-{name}', 'mac')
        if not router_mac:
            router_mac = generate_mac()

        self._nbctl('--may-exist', 'lrp-add', OVN4NFV_ROUTER, f'rtos-{name}', router_mac, gateway)
        self._nbctl('--', '--may-exist', 'ls-add', name,
                    '--', 'set', 'logical_switch', name,
                    f'other-config:subnet={subnet}', f'external-ids:gateway_ip={gateway}')
        self._nbctl('--', '--may-exist', 'lsp-add', name, f'stor-{name}',
                    '--', 'set', 'logical_switch_port', f'stor-{name}', 'type=router',
                    f'options:router-port=rtos-{name}', f'addresses="{router_mac}"')
        logger.info(f"OVN network {name} created ({subnet}, gw {gateway})")
        return name

    def delete_network(self, name: str, client: Any) -> None:
        self._nbctl('--if-exist', 'ls-del', name)
        self._nbctl('--if-exist', 'lrp-del', f'rtos-{name}')
        self._nbctl('--if-exist', 'lsp-del', f'stor-{name}')
        logger.info(f"OVN network {name} deleted")

    def get_network(self, name: str, client: Any) -> Optional[str]:
        found = self._nbctl('--if-exist', 'get', 'logical_switch', name, 'name')
        return name if found else None
