"""Tests for plugins.network and its OVN handler."""

import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from bundle.lifecycle import BundleLifecycleManager
from bundle.manifest import ManifestLoader
from common import ResourceRequest
from conftest import NamespaceDouble, write_bundle
from errors import BackendError, InvalidManifestError, NotFoundError
from plugins.network import NetworkPlugin, split_network_name
from plugins.network.ovn4nfvk8s import Ovn4nfvNetwork, generate_mac
from plugins.registry import PluginRegistry

NETWORK_YAML = """
apiVersion: v1
kind: Network
metadata:
  name: ovn-priv-net
  cnitype: ovn4nfvk8s
spec:
  name: mynet
  subnet: 172.16.33.0/24
  gateway: 172.16.33.1/24
"""


@pytest.fixture
def network_file(tmp_path):
    f = tmp_path / 'net.yaml'
    f.write_text(NETWORK_YAML)
    return f


class TestSplitNetworkName:
    """Tests for split_network_name()."""

    def test_three_parts(self):
        assert split_network_name('c1-ns-1a2b_ovn4nfvk8s_my_net') == ('c1-ns-1a2b', 'ovn4nfvk8s', 'my_net')

    def test_region_with_underscore(self):
        assert split_network_name('region_one-ns-1a2b_ovn4nfvk8s_my_net', ['ovn4nfvk8s']) == (
            'region_one-ns-1a2b', 'ovn4nfvk8s', 'my_net',
        )

    @pytest.mark.parametrize('name', ['plain', 'a_b', 'a__c'])
    def test_malformed(self, name):
        with pytest.raises(InvalidManifestError):
            split_network_name(name)


class TestNetworkPlugin:
    """Tests for CNI dispatch."""

    def test_create_dispatches_by_cnitype(self, network_file):
        cni = MagicMock()
        cni.create_network.return_value = 'mynet'
        plugin = NetworkPlugin({'ovn4nfvk8s': cni})

        name = plugin.create_resource(ResourceRequest(network_file, 'ns1', 'c1-ns1-1a2b'), None)

        assert name == 'c1-ns1-1a2b_ovn4nfvk8s_mynet'
        cni.create_network.assert_called_once()

    def test_create_unknown_cni(self, network_file):
        with pytest.raises(NotFoundError, match='ovn4nfvk8s'):
            NetworkPlugin({}).create_resource(ResourceRequest(network_file, 'ns1', 'v'), None)

    def test_create_without_cnitype(self, tmp_path):
        f = tmp_path / 'n.yaml'
        f.write_text('kind: Network\nmetadata:\n  name: n\n')
        with pytest.raises(InvalidManifestError, match='cnitype'):
            NetworkPlugin({}).create_resource(ResourceRequest(f, 'ns1', 'v'), None)

    def test_delete_and_get_route_by_name(self):
        cni = MagicMock()
        cni.get_network.return_value = 'mynet'
        plugin = NetworkPlugin({'ovn4nfvk8s': cni})

        plugin.delete_resource('v_ovn4nfvk8s_mynet', 'ns1', None)
        assert plugin.get_resource('v_ovn4nfvk8s_mynet', 'ns1', None) == 'v_ovn4nfvk8s_mynet'

        cni.delete_network.assert_called_once_with('mynet', None)

    def test_get_absent(self):
        cni = MagicMock()
        cni.get_network.return_value = None
        assert NetworkPlugin({'ovn4nfvk8s': cni}).get_resource('v_ovn4nfvk8s_x', 'ns', None) is None

    def test_list_is_empty(self):
        assert NetworkPlugin({}).list_resources(10, 'ns', None) == []

    def test_destroy_after_instantiate_in_underscore_region(self, tmp_path, calls):
        write_bundle(
            tmp_path, 'b', "resources:\n  network: [n.yaml]\n",
            {'n.yaml': 'kind: Network\nmetadata:\n  name: n\n  cnitype: fake\n'},
        )
        cni = MagicMock()
        cni.create_network.return_value = 'net1'
        registry = PluginRegistry()
        registry.register('namespace', NamespaceDouble(calls))
        registry.register('network', NetworkPlugin({'fake': cni}))
        manager = BundleLifecycleManager(registry=registry, loader=ManifestLoader(tmp_path))

        _, resources = manager.instantiate('b', 'region_one', 'ns', None)
        manager.destroy(resources, 'ns', None)

        assert resources['network'][0].startswith('region_one-ns-')
        cni.delete_network.assert_called_once_with('net1', None)


class TestOvn4nfvNetwork:
    """Tests for the ovn-nbctl driven handler."""

    @patch('plugins.network.ovn4nfvk8s.run_command')
    def test_create_network(self, mock_run, network_file):
        mock_run.return_value = (0, '', '')
        handler = Ovn4nfvNetwork(nb_db='tcp:198.51.100.3:6641')

        name = handler.create_network(ResourceRequest(network_file, 'ns1', 'v'), None)

        assert name == 'mynet'
        commands = [call[0][0] for call in mock_run.call_args_list]
        assert all(cmd[:2] == ['ovn-nbctl', '--db=tcp:198.51.100.3:6641'] for cmd in commands)
        verbs = [next(a for a in cmd if a in ('get', 'lrp-add', 'ls-add', 'lsp-add')) for cmd in commands]
        assert verbs == ['get', 'lrp-add', 'ls-add', 'lsp-add']

    @patch('plugins.network.ovn4nfvk8s.run_command')
    def test_create_reuses_existing_router_mac(self, mock_run, network_file):
        mock_run.return_value = (0, '"00:00:00:aa:bb:cc"\n', '')
        Ovn4nfvNetwork(nb_db='').create_network(ResourceRequest(network_file, 'ns1', 'v'), None)

        lrp_add = mock_run.call_args_list[1][0][0]
        assert '00:00:00:aa:bb:cc' in lrp_add

    def test_create_requires_spec(self, tmp_path):
        f = tmp_path / 'n.yaml'
        f.write_text('kind: Network\nspec:\n  name: x\n')
        with pytest.raises(InvalidManifestError):
            Ovn4nfvNetwork(nb_db='').create_network(ResourceRequest(f, 'ns1', 'v'), None)

    @patch('plugins.network.ovn4nfvk8s.run_command')
    def test_command_failure(self, mock_run):
        mock_run.return_value = (1, '', 'connection refused')
        with pytest.raises(BackendError, match='connection refused'):
            Ovn4nfvNetwork(nb_db='').delete_network('mynet', None)

    @patch('plugins.network.ovn4nfvk8s.run_command')
    def test_delete_network(self, mock_run):
        mock_run.return_value = (0, '', '')
        Ovn4nfvNetwork(nb_db='').delete_network('mynet', None)

        commands = [call[0][0] for call in mock_run.call_args_list]
        assert commands == [
            ['ovn-nbctl', '--if-exist', 'ls-del', 'mynet'],
            ['ovn-nbctl', '--if-exist', 'lrp-del', 'rtos-mynet'],
            ['ovn-nbctl', '--if-exist', 'lsp-del', 'stor-mynet'],
        ]

    @patch('plugins.network.ovn4nfvk8s.run_command')
    def test_get_network(self, mock_run):
        mock_run.return_value = (0, '', '')
        assert Ovn4nfvNetwork(nb_db='').get_network('mynet', None) is None
        mock_run.return_value = (0, 'mynet\n', '')
        assert Ovn4nfvNetwork(nb_db='').get_network('mynet', None) == 'mynet'

    def test_generate_mac(self):
        mac = generate_mac()
        assert mac.startswith('00:00:00:')
        assert len(mac.split(':')) == 6
