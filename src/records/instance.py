"""Instance records: the handle produced by a bundle instantiation."""

from dataclasses import dataclass, field
from typing import Optional

from records.base import RecordClient


@dataclass
class InstanceKey:
    id: str = field(metadata={'json': 'id'})


@dataclass
class Instance:
    """A live bundle instance.

    Attributes:
        id: Instance ID (the internal VNF ID)
        external_id: External VNF ID returned to the caller
        bundle_id: Bundle that was instantiated
        cloud_region_id: Region it runs in
        namespace: Namespace it runs in
        resources: Resource type -> created names, in creation order
    """
    id: str
    external_id: str = ''
    bundle_id: str = ''
    cloud_region_id: str = ''
    namespace: str = ''
    resources: dict[str, list[str]] = field(default_factory=dict)

    @property
    def internal_vnf_id(self) -> str:
        return self.id

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'external-id': self.external_id,
            'bundle-id': self.bundle_id,
            'cloud-region-id': self.cloud_region_id,
            'namespace': self.namespace,
            'resources': {k: list(v) for k, v in self.resources.items()},
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Instance':
        return cls(
            id=data['id'],
            external_id=data.get('external-id', ''),
            bundle_id=data.get('bundle-id', ''),
            cloud_region_id=data.get('cloud-region-id', ''),
            namespace=data.get('namespace', ''),
            resources={k: list(v) for k, v in (data.get('resources') or {}).items()},
        )


class InstanceClient(RecordClient):
    collection = 'instance'
    tag = 'instance'
    record_name = 'instance'
    record_class = Instance

    def create(self, instance: Instance) -> Instance:
        return self._create(InstanceKey(instance.id), instance, instance.id)

    def get(self, instance_id: str) -> Instance:
        return self._get(InstanceKey(instance_id), instance_id)

    def delete(self, instance_id: str) -> None:
        self._delete(InstanceKey(instance_id), instance_id)

    def list(self, cloud_region_id: Optional[str] = None) -> list[Instance]:
        instances = self._list()
        if cloud_region_id is not None:
            instances = [i for i in instances if i.cloud_region_id == cloud_region_id]
        return sorted(instances, key=lambda i: i.id)
