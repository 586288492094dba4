"""Cluster connectivity records: how to reach a cloud region's cluster."""

from dataclasses import dataclass, field
from typing import Any

from kube import KubeClient, load_kube_client
from records.base import RecordClient


@dataclass
class ConnectivityKey:
    connectivity_name: str = field(metadata={'json': 'connectivity-name'})


@dataclass
class Connectivity:
    """Connection details for one cloud region.

    Attributes:
        name: Record name (usually the cloud region ID)
        cloud_owner: Owner of the cloud region
        cloud_region_id: Cloud region this record reaches
        kubeconfig: Parsed kubeconfig content
        other_connectivity: Free-form extra connection data
    """
    name: str
    cloud_owner: str = ''
    cloud_region_id: str = ''
    kubeconfig: dict[str, Any] = field(default_factory=dict)
    other_connectivity: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'cloud-owner': self.cloud_owner,
            'cloud-region-id': self.cloud_region_id,
            'kubeconfig': self.kubeconfig,
            'other-connectivity-list': self.other_connectivity,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Connectivity':
        return cls(
            name=data['name'],
            cloud_owner=data.get('cloud-owner', ''),
            cloud_region_id=data.get('cloud-region-id', ''),
            kubeconfig=dict(data.get('kubeconfig') or {}),
            other_connectivity=dict(data.get('other-connectivity-list') or {}),
        )


class ConnectivityClient(RecordClient):
    collection = 'connectivity'
    tag = 'metadata'
    record_name = 'connectivity'
    record_class = Connectivity

    def create(self, connectivity: Connectivity) -> Connectivity:
        return self._create(ConnectivityKey(connectivity.name), connectivity, connectivity.name)

    def get(self, name: str) -> Connectivity:
        return self._get(ConnectivityKey(name), name)

    def delete(self, name: str) -> None:
        self._delete(ConnectivityKey(name), name)

    def kube_client(self, name: str) -> KubeClient:
        """Kubernetes client for the cluster a record points at.

        Raises:
            NotFoundError: If there is no such record
            BackendError: If the stored kubeconfig is unusable
        """
        return load_kube_client(config_dict=self.get(name).kubeconfig)
