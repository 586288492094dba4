"""Orchestrator configuration management.

Configuration is loaded from a single YAML file:
- csar_dir: Directory holding one subdirectory per bundle (CSAR)
- plugins_dir: Optional directory of extra resource-type plugins (*.py)
- database_type: KeyedStore backend ('memory' or 'file')
- database_path: Root directory for the 'file' backend
- kubeconfig: Default kubeconfig for cluster access
- rollback_on_failure: Destroy partially created bundles on failure
- list_limit: Default limit for plugin list operations

Resolution order for the file:
1. Explicit path argument
2. $KUBEBUNDLE_CONFIG environment variable
3. /usr/local/etc/kubebundle/config.yaml (FHS)
4. Built-in defaults

Environment variables CSAR_DIR, PLUGINS_DIR, DATABASE_TYPE, DATABASE_PATH
and KUBECONFIG override values from the file.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

SUPPORTED_DATABASE_TYPES = ('memory', 'file')

FHS_CONFIG_PATH = Path('/usr/local/etc/kubebundle/config.yaml')

# Environment variable -> config attribute
ENV_OVERRIDES = {
    'CSAR_DIR': 'csar_dir',
    'PLUGINS_DIR': 'plugins_dir',
    'DATABASE_TYPE': 'database_type',
    'DATABASE_PATH': 'database_path',
    'KUBECONFIG': 'kubeconfig',
}


class ConfigError(Exception):
    """Configuration error."""


@dataclass
class OrchestratorConfig:
    """Runtime configuration for the orchestrator.

    Attributes:
        csar_dir: Directory containing bundle directories
        plugins_dir: Directory of extra plugin modules (None = built-ins only)
        database_type: Store backend name
        database_path: Root directory for the file store
        kubeconfig: Path to default kubeconfig (None = in-cluster/default)
        rollback_on_failure: Destroy partial bundles when instantiation fails
        list_limit: Default resource list limit
        source_path: File the config was loaded from (for debugging)
    """
    csar_dir: Path = field(default_factory=lambda: Path('/opt/csar'))
    plugins_dir: Optional[Path] = None
    database_type: str = 'memory'
    database_path: Path = field(default_factory=lambda: Path('/var/lib/kubebundle'))
    kubeconfig: Optional[Path] = None
    rollback_on_failure: bool = False
    list_limit: int = 10
    source_path: Optional[Path] = None

    def __post_init__(self):
        if isinstance(self.csar_dir, str):
            self.csar_dir = Path(self.csar_dir)
        if isinstance(self.plugins_dir, str):
            self.plugins_dir = Path(self.plugins_dir)
        if isinstance(self.database_path, str):
            self.database_path = Path(self.database_path)
        if isinstance(self.kubeconfig, str):
            self.kubeconfig = Path(self.kubeconfig)
        self.validate()

    def validate(self) -> None:
        """Check values that cannot be fixed up silently.

        Raises:
            ConfigError: If a value is out of range
        """
        if self.database_type not in SUPPORTED_DATABASE_TYPES:
            raise ConfigError(
                f"Unsupported database type: {self.database_type}. "
                f"Supported: {', '.join(SUPPORTED_DATABASE_TYPES)}"
            )
        if not isinstance(self.list_limit, int) or self.list_limit <= 0:
            raise ConfigError(f"list_limit must be a positive integer, got {self.list_limit!r}")

    def bundle_dir(self, bundle_id: str) -> Path:
        """Directory of a bundle inside csar_dir."""
        return self.csar_dir / bundle_id

    @classmethod
    def from_dict(cls, data: dict, source_path: Optional[Path] = None) -> 'OrchestratorConfig':
        """Create config from a dictionary, ignoring unknown keys."""
        kwargs = {}
        for name in ('csar_dir', 'plugins_dir', 'database_type', 'database_path',
                     'kubeconfig', 'rollback_on_failure', 'list_limit'):
            if name in data and data[name] is not None:
                kwargs[name] = data[name]
        if 'rollback_on_failure' in kwargs:
            kwargs['rollback_on_failure'] = _as_bool(kwargs['rollback_on_failure'])
        return cls(source_path=source_path, **kwargs)


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ('1', 'true', 'yes', 'on')
    return bool(value)


def _parse_yaml(path: Path) -> dict:
    """Parse a YAML file and return contents."""
    try:
        with open(path, encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}")
    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must be a YAML object (dict)")
    return data


def discover_config_path() -> Optional[Path]:
    """Discover the config file.

    Returns:
        Path to the config file, or None to use defaults

    Raises:
        ConfigError: If $KUBEBUNDLE_CONFIG points to a missing file
    """
    if env_path := os.environ.get('KUBEBUNDLE_CONFIG'):
        path = Path(env_path)
        if path.is_file():
            return path
        raise ConfigError(f"KUBEBUNDLE_CONFIG={env_path} does not exist")

    if FHS_CONFIG_PATH.is_file():
        return FHS_CONFIG_PATH

    return None


def load_config(path: Optional[Path] = None) -> OrchestratorConfig:
    """Load orchestrator configuration.

    Args:
        path: Explicit config file. Auto-discovered if not provided.

    Returns:
        OrchestratorConfig with environment overrides applied

    Raises:
        ConfigError: If the file is missing, invalid, or has bad values
    """
    if path is not None:
        path = Path(path)
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
    else:
        path = discover_config_path()

    data: dict = {}
    if path is not None:
        data = _parse_yaml(path)
        logger.debug(f"Loaded config from {path}")

    for env_var, attr in ENV_OVERRIDES.items():
        if value := os.environ.get(env_var):
            data[attr] = value

    return OrchestratorConfig.from_dict(data, source_path=path)
