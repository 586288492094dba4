"""Common utilities and types for bundle orchestration."""

import logging
import secrets
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml

from errors import InvalidManifestError, NotFoundError

logger = logging.getLogger(__name__)

# Default limit for plugin list operations
RESOURCES_LIST_LIMIT = 10

# Namespace used when a request leaves it empty
DEFAULT_NAMESPACE = 'default'


@dataclass
class ResourceRequest:
    """Request passed to a plugin's create capability.

    Attributes:
        yaml_file_path: Resource definition file inside the bundle
            (None for resources built from the request alone, e.g. namespaces)
        namespace: Target namespace
        internal_vnf_id: Internal VNF ID shared by every resource of the bundle
    """
    yaml_file_path: Optional[Path] = None
    namespace: str = DEFAULT_NAMESPACE
    internal_vnf_id: str = ''

    def __post_init__(self):
        if isinstance(self.yaml_file_path, str):
            self.yaml_file_path = Path(self.yaml_file_path)
        if not self.namespace:
            self.namespace = DEFAULT_NAMESPACE


def generate_external_id() -> str:
    """Generate a short random external VNF ID (16-bit token, hex-encoded)."""
    return secrets.token_hex(2)


def internal_vnf_id(cloud_region_id: str, namespace: str, external_id: str) -> str:
    """Derive the internal VNF ID.

    Unique across (cloud region, namespace, instance) triples:
    cloud1-default-1a2b
    """
    return f"{cloud_region_id}-{namespace}-{external_id}"


def decode_yaml_file(path: Path, expected_kind: Optional[str] = None) -> dict:
    """Read a Kubernetes object definition from a YAML file.

    Args:
        path: File to read
        expected_kind: If set, the object's 'kind' must match

    Returns:
        The decoded object

    Raises:
        NotFoundError: If the file does not exist
        InvalidManifestError: If the file is not a YAML object of the expected kind
    """
    path = Path(path)
    if not path.is_file():
        raise NotFoundError(f"File {path} not found")

    logger.debug(f"Decoding YAML: {path}")
    try:
        with open(path, encoding='utf-8') as f:
            obj = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InvalidManifestError(f"Invalid YAML in {path}: {e}")

    if not isinstance(obj, dict):
        raise InvalidManifestError(f"{path} must contain a YAML object")

    if expected_kind is not None and obj.get('kind') != expected_kind:
        raise InvalidManifestError(
            f"{path} contains another resource different than {expected_kind}"
        )
    return obj


def run_command(
    cmd: list[str],
    cwd: Optional[Path] = None,
    timeout: int = 60,
    capture: bool = True,
    env: Optional[dict] = None
) -> tuple[int, str, str]:
    """Run a command and return (returncode, stdout, stderr)."""
    logger.debug(f"Running: {' '.join(cmd)}")
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            capture_output=capture,
            text=True,
            timeout=timeout,
            env=env,
            check=False  # We handle return codes explicitly
        )
        return result.returncode, result.stdout, result.stderr
    except subprocess.TimeoutExpired:
        return -1, '', f'Command timed out after {timeout}s'
    except OSError as e:
        return -1, '', str(e)
