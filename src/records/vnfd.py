"""VNF definition records."""

import uuid
from dataclasses import dataclass, field

from records.base import RecordClient


@dataclass
class VNFDefinitionKey:
    uuid: str = field(metadata={'json': 'uuid'})


@dataclass
class VNFDefinition:
    name: str
    description: str = ''
    uuid: str = ''
    service_type: str = ''

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'description': self.description,
            'uuid': self.uuid,
            'service-type': self.service_type,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'VNFDefinition':
        return cls(
            name=data['name'],
            description=data.get('description', ''),
            uuid=data.get('uuid', ''),
            service_type=data.get('service-type', ''),
        )


class VNFDefinitionClient(RecordClient):
    collection = 'vnfd'
    tag = 'metadata'
    record_name = 'VNF definition'
    record_class = VNFDefinition

    def create(self, vnfd: VNFDefinition) -> VNFDefinition:
        """Store a definition, assigning a UUID if it has none."""
        if not vnfd.uuid:
            vnfd.uuid = str(uuid.uuid4())
        return self._create(VNFDefinitionKey(vnfd.uuid), vnfd, vnfd.uuid)

    def get(self, vnfd_id: str) -> VNFDefinition:
        return self._get(VNFDefinitionKey(vnfd_id), vnfd_id)

    def delete(self, vnfd_id: str) -> None:
        self._delete(VNFDefinitionKey(vnfd_id), vnfd_id)

    def list(self) -> list[VNFDefinition]:
        return self._list()
