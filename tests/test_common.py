"""Tests for common module."""

import re
import subprocess
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from common import (
    ResourceRequest,
    decode_yaml_file,
    generate_external_id,
    internal_vnf_id,
    run_command,
)
from errors import InvalidManifestError, NotFoundError


class TestIds:
    """Tests for external and internal VNF IDs."""

    def test_external_id_is_four_hex_chars(self):
        for _ in range(20):
            assert re.fullmatch(r'[0-9a-f]{4}', generate_external_id())

    def test_internal_id_format(self):
        assert internal_vnf_id('cloud1', 'default', '1a2b') == 'cloud1-default-1a2b'


class TestResourceRequest:
    """Tests for ResourceRequest."""

    def test_path_coerced(self):
        request = ResourceRequest('/x/d.yaml', 'ns1', 'vnf')
        assert request.yaml_file_path == Path('/x/d.yaml')

    def test_empty_namespace_defaults(self):
        assert ResourceRequest(namespace='').namespace == 'default'


class TestDecodeYamlFile:
    """Tests for decode_yaml_file()."""

    def test_decodes_object(self, tmp_path):
        f = tmp_path / 'd.yaml'
        f.write_text('kind: Deployment\nmetadata:\n  name: web\n')
        assert decode_yaml_file(f, 'Deployment')['metadata']['name'] == 'web'

    def test_missing_file(self, tmp_path):
        with pytest.raises(NotFoundError):
            decode_yaml_file(tmp_path / 'missing.yaml')

    def test_wrong_kind(self, tmp_path):
        f = tmp_path / 's.yaml'
        f.write_text('kind: Service\n')
        with pytest.raises(InvalidManifestError, match='Deployment'):
            decode_yaml_file(f, 'Deployment')

    def test_not_an_object(self, tmp_path):
        f = tmp_path / 'l.yaml'
        f.write_text('- a\n')
        with pytest.raises(InvalidManifestError):
            decode_yaml_file(f)

    def test_invalid_yaml(self, tmp_path):
        f = tmp_path / 'bad.yaml'
        f.write_text('a: [\n')
        with pytest.raises(InvalidManifestError, match='Invalid YAML'):
            decode_yaml_file(f)


class TestRunCommand:
    """Tests for run_command()."""

    @patch('common.subprocess.run')
    def test_returns_output(self, mock_run):
        mock_run.return_value = MagicMock(returncode=0, stdout='ok\n', stderr='')
        assert run_command(['echo', 'ok']) == (0, 'ok\n', '')

    @patch('common.subprocess.run')
    def test_timeout(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd='x', timeout=5)
        rc, _, err = run_command(['sleep', '10'], timeout=5)
        assert rc == -1
        assert 'timed out after 5s' in err

    @patch('common.subprocess.run')
    def test_missing_binary(self, mock_run):
        mock_run.side_effect = FileNotFoundError('No such file: ovn-nbctl')
        rc, _, err = run_command(['ovn-nbctl', 'show'])
        assert rc == -1
        assert 'ovn-nbctl' in err
