"""Bundle definition records and their uploaded archives.

The metadata lives under the 'metadata' tag and the uploaded archive (a
gzip-compressed tar holding metadata.yaml and the resource files) under the
'content' tag of the same key.
"""

import io
import logging
import tarfile
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from bundle.manifest import MANIFEST_FILENAME
from errors import AlreadyExistsError, InvalidManifestError, NotFoundError
from records.base import RecordClient

logger = logging.getLogger(__name__)


@dataclass
class BundleDefinitionKey:
    rbname: str = field(metadata={'json': 'rb-name'})
    rbversion: str = field(metadata={'json': 'rb-version'})


@dataclass
class BundleDefinition:
    rbname: str
    rbversion: str
    uuid: str = ''
    description: str = ''
    labels: dict[str, str] = field(default_factory=dict)

    @property
    def bundle_id(self) -> str:
        """Directory name of the extracted bundle in the CSAR directory."""
        return f"{self.rbname}-{self.rbversion}"

    def to_dict(self) -> dict:
        return {
            'rb-name': self.rbname,
            'rb-version': self.rbversion,
            'uuid': self.uuid,
            'description': self.description,
            'labels': dict(self.labels),
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'BundleDefinition':
        return cls(
            rbname=data['rb-name'],
            rbversion=data['rb-version'],
            uuid=data.get('uuid', ''),
            description=data.get('description', ''),
            labels=dict(data.get('labels') or {}),
        )


def _member_names(archive: tarfile.TarFile) -> list[str]:
    names = []
    for member in archive.getmembers():
        name = member.name
        while name.startswith('./'):
            name = name[2:]
        names.append(name)
    return names


def validate_archive(content: bytes) -> None:
    """Check that content is a tar.gz with metadata.yaml at its root.

    Raises:
        InvalidManifestError: If the archive is unusable
    """
    try:
        with tarfile.open(fileobj=io.BytesIO(content), mode='r:gz') as archive:
            names = _member_names(archive)
    except (tarfile.TarError, OSError, EOFError) as e:
        raise InvalidManifestError(f"Error in file format: {e}")
    if MANIFEST_FILENAME not in names:
        raise InvalidManifestError(f"Archive has no {MANIFEST_FILENAME} at its root")


def _safe_members(archive: tarfile.TarFile, dest: Path) -> list[tarfile.TarInfo]:
    root = dest.resolve()
    members = []
    for member in archive.getmembers():
        if not (member.isfile() or member.isdir()):
            raise InvalidManifestError(f"Unsupported archive member: {member.name}")
        target = (root / member.name).resolve()
        if target != root and root not in target.parents:
            raise InvalidManifestError(f"Archive member escapes destination: {member.name}")
        members.append(member)
    return members


class BundleDefinitionClient(RecordClient):
    collection = 'rbdef'
    tag = 'metadata'
    content_tag = 'content'
    record_name = 'bundle definition'
    record_class = BundleDefinition

    @staticmethod
    def _label(name: str, version: str) -> str:
        return f"{name}/{version}"

    def create(self, definition: BundleDefinition) -> BundleDefinition:
        if not definition.uuid:
            definition.uuid = str(uuid.uuid4())
        key = BundleDefinitionKey(definition.rbname, definition.rbversion)
        return self._create(key, definition, self._label(definition.rbname, definition.rbversion))

    def get(self, name: str, version: str) -> BundleDefinition:
        return self._get(BundleDefinitionKey(name, version), self._label(name, version))

    def list(self, name: Optional[str] = None) -> list[BundleDefinition]:
        """All definitions, or only the versions of name."""
        return [d for d in self._list() if name is None or d.rbname == name]

    def delete(self, name: str, version: str) -> None:
        """Delete a definition and its uploaded content, if any."""
        key = BundleDefinitionKey(name, version)
        self._delete(key, self._label(name, version))
        try:
            self.store.delete(self.collection, key, self.content_tag)
        except NotFoundError:
            logger.debug(f"No content stored for {self._label(name, version)}")

    def upload(self, name: str, version: str, content: bytes) -> None:
        """Store the archive of an existing definition.

        Raises:
            NotFoundError: If the definition does not exist
            InvalidManifestError: If content is not a bundle archive
            AlreadyExistsError: If content was already uploaded
        """
        self.get(name, version)
        validate_archive(content)
        try:
            self.store.create(self.collection, BundleDefinitionKey(name, version),
                              self.content_tag, content)
        except AlreadyExistsError:
            raise AlreadyExistsError(
                f"{self.record_name} content already exists: {self._label(name, version)}"
            ) from None
        logger.info(f"Uploaded {len(content)} bytes for {self._label(name, version)}")

    def download(self, name: str, version: str) -> bytes:
        self.get(name, version)
        return self._read(BundleDefinitionKey(name, version), self._label(name, version),
                          tag=self.content_tag)

    def extract(self, name: str, version: str, dest: Path) -> Path:
        """Unpack the stored archive into dest.

        Returns:
            dest, which now holds metadata.yaml

        Raises:
            InvalidManifestError: If a member would land outside dest
        """
        content = self.download(name, version)
        dest = Path(dest)
        dest.mkdir(parents=True, exist_ok=True)
        with tarfile.open(fileobj=io.BytesIO(content), mode='r:gz') as archive:
            for member in _safe_members(archive, dest):
                archive.extract(member, dest)
        logger.info(f"Extracted {self._label(name, version)} to {dest}")
        return dest
