"""Bundle manifest loading and validation.

A bundle (CSAR) is a directory of resource definition files plus a
metadata.yaml that says which files implement which resource type:

    resources:
      deployment: [d1.yaml, d2.yaml]
      service: [s1.yaml]

The sequence form is accepted too, and keeps the same ordering:

    resources:
      - deployment: [d1.yaml, d2.yaml]
      - service: [s1.yaml]
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import yaml

from errors import ManifestNotFoundError, ManifestParseError, ResourceFileMissingError

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = 'metadata.yaml'


def _parse_file_list(resource_type: str, files: Any) -> list[str]:
    if not isinstance(files, list) or not all(isinstance(f, str) and f for f in files):
        raise ManifestParseError(
            f"Resource type '{resource_type}' must map to a list of file paths"
        )
    for f in files:
        if Path(f).is_absolute() or '..' in Path(f).parts:
            raise ManifestParseError(f"File path must be relative to the bundle: {f}")
    return list(files)


@dataclass
class BundleManifest:
    """Ordered mapping of resource type -> relative file paths.

    Attributes:
        resources: Resource type -> files, in declaration order
        source_path: metadata.yaml the manifest was loaded from
    """
    resources: dict[str, list[str]] = field(default_factory=dict)
    source_path: Optional[Path] = None

    @property
    def bundle_dir(self) -> Path:
        if self.source_path is None:
            return Path('.')
        return self.source_path.parent

    @property
    def resource_types(self) -> list[str]:
        return list(self.resources)

    def files_for(self, resource_type: str) -> list[Path]:
        """Absolute paths of the files listed for resource_type."""
        return [self.bundle_dir / f for f in self.resources.get(resource_type, [])]

    def check_files(self, resource_type: str) -> None:
        """Verify every file of resource_type exists.

        Raises:
            ResourceFileMissingError: On the first missing file
        """
        for path in self.files_for(resource_type):
            if not path.is_file():
                raise ResourceFileMissingError(resource_type, path)

    def missing_files(self) -> list[tuple[str, Path]]:
        """(resource_type, path) for every missing file, in manifest order."""
        return [
            (rtype, path)
            for rtype in self.resources
            for path in self.files_for(rtype)
            if not path.is_file()
        ]

    def to_dict(self) -> dict:
        return {'resources': {k: list(v) for k, v in self.resources.items()}}

    @classmethod
    def from_dict(cls, data: Any, source_path: Optional[Path] = None) -> 'BundleManifest':
        """Create a manifest from its parsed YAML.

        Raises:
            ManifestParseError: If the document has the wrong shape
        """
        if not isinstance(data, dict):
            raise ManifestParseError(f"Manifest {source_path} must be a YAML object (dict)")
        raw = data.get('resources')
        if not raw:
            raise ManifestParseError(f"Manifest {source_path} missing required field: resources")

        resources: dict[str, list[str]] = {}
        if isinstance(raw, dict):
            entries = list(raw.items())
        elif isinstance(raw, list):
            entries = []
            for i, item in enumerate(raw):
                if not isinstance(item, dict):
                    raise ManifestParseError(f"resources[{i}] must be a mapping of type to files")
                entries.extend(item.items())
        else:
            raise ManifestParseError("resources must be a mapping or a list of mappings")

        for resource_type, files in entries:
            if not isinstance(resource_type, str) or not resource_type:
                raise ManifestParseError(f"Invalid resource type: {resource_type!r}")
            resources.setdefault(resource_type, []).extend(_parse_file_list(resource_type, files))

        return cls(resources=resources, source_path=source_path)


class ManifestLoader:
    """Loads bundle manifests from the CSAR directory."""

    def __init__(self, csar_dir: Path):
        self.csar_dir = Path(csar_dir)

    def list_bundles(self) -> list[str]:
        """Bundle IDs that have a manifest."""
        if not self.csar_dir.is_dir():
            return []
        return sorted(
            d.name for d in self.csar_dir.iterdir()
            if d.is_dir() and (d / MANIFEST_FILENAME).is_file()
        )

    def load(self, bundle_id: str) -> BundleManifest:
        """Load the manifest of a bundle.

        Raises:
            ManifestNotFoundError: If the bundle has no manifest
            ManifestParseError: If the manifest is invalid
        """
        return self.load_file(self.csar_dir / bundle_id / MANIFEST_FILENAME)

    def load_file(self, path: Path) -> BundleManifest:
        path = Path(path)
        if not path.is_file():
            raise ManifestNotFoundError(path)

        logger.info(f"Reading metadata YAML: {path}")
        try:
            with open(path, encoding='utf-8') as f:
                data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ManifestParseError(f"Invalid YAML in manifest {path}: {e}")

        return BundleManifest.from_dict(data, source_path=path)
