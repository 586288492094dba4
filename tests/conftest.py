"""Shared pytest fixtures for kubebundle tests."""

import sys
from pathlib import Path
from typing import Optional
from unittest.mock import MagicMock

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from plugins.registry import PluginRegistry


DEPLOYMENT_YAML = """
apiVersion: apps/v1
kind: Deployment
metadata:
  name: {name}
spec:
  replicas: 1
"""

SERVICE_YAML = """
apiVersion: v1
kind: Service
metadata:
  name: {name}
spec:
  ports:
    - port: 80
"""


def write_bundle(csar_dir: Path, bundle_id: str, manifest: str, files: dict) -> Path:
    """Create a bundle directory with a metadata.yaml and resource files."""
    bundle = csar_dir / bundle_id
    bundle.mkdir(parents=True, exist_ok=True)
    (bundle / 'metadata.yaml').write_text(manifest)
    for name, content in files.items():
        (bundle / name).write_text(content)
    return bundle


@pytest.fixture
def csar_dir(tmp_path):
    """CSAR directory holding bundle 'vnf1' (two deployments, one service)."""
    csar = tmp_path / 'csar'
    write_bundle(
        csar, 'vnf1',
        """
resources:
  deployment:
    - d1.yaml
    - d2.yaml
  service:
    - s1.yaml
""",
        {
            'd1.yaml': DEPLOYMENT_YAML.format(name='web'),
            'd2.yaml': DEPLOYMENT_YAML.format(name='db'),
            's1.yaml': SERVICE_YAML.format(name='websvc'),
        },
    )
    return csar


class RecordingPlugin:
    """Resource handler double that records calls into a shared list.

    create_resource returns '<internal_vnf_id>-<file stem>'.
    """

    def __init__(self, name: str, calls: list, fail_create: Optional[str] = None,
                 fail_delete: Optional[str] = None, error: Optional[Exception] = None):
        self.name = name
        self.calls = calls
        self.fail_create = fail_create
        self.fail_delete = fail_delete
        self.error = error or RuntimeError('boom')

    def create_resource(self, request, client):
        stem = request.yaml_file_path.stem
        self.calls.append(('create', self.name, stem))
        if stem == self.fail_create:
            raise self.error
        return f"{request.internal_vnf_id}-{stem}"

    def list_resources(self, limit, namespace, client):
        return [f"{self.name}-{i}" for i in range(limit)]

    def delete_resource(self, name, namespace, client):
        self.calls.append(('delete', self.name, name))
        if name == self.fail_delete:
            raise self.error

    def get_resource(self, name, namespace, client):
        return name


class NamespaceDouble:
    """Namespace handler double; existing holds namespaces already present."""

    def __init__(self, calls: list, existing=(), fail: bool = False):
        self.calls = calls
        self.existing = set(existing)
        self.fail = fail

    def create_resource(self, request, client):
        self.calls.append(('create', 'namespace', request.namespace))
        if self.fail:
            raise RuntimeError('namespace create refused')
        self.existing.add(request.namespace)
        return request.namespace

    def list_resources(self, limit, namespace, client):
        return sorted(self.existing)[:limit]

    def delete_resource(self, name, namespace, client):
        self.existing.discard(name)

    def get_resource(self, name, namespace, client):
        self.calls.append(('get', 'namespace', name))
        return name if name in self.existing else None


@pytest.fixture
def calls():
    return []


@pytest.fixture
def registry(calls):
    """Registry of recording doubles for namespace, deployment and service."""
    reg = PluginRegistry()
    reg.register('namespace', NamespaceDouble(calls))
    reg.register('deployment', RecordingPlugin('deployment', calls))
    reg.register('service', RecordingPlugin('service', calls))
    return reg


@pytest.fixture
def kube_client():
    """KubeClient stand-in whose create calls echo the submitted name."""
    client = MagicMock()

    def _echo(namespace, body):
        result = MagicMock()
        result.metadata.name = body['metadata']['name']
        return result

    client.apps_v1.create_namespaced_deployment.side_effect = _echo
    client.core_v1.create_namespaced_service.side_effect = _echo
    return client
