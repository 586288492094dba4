"""Tests for errors module."""

import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from errors import (
    AlreadyExistsError,
    BackendError,
    CapabilityNotFoundError,
    ManifestNotFoundError,
    ManifestParseError,
    NotFoundError,
    OrchestratorError,
    PartialInstantiationError,
    PluginInvocationError,
    ResourceFileMissingError,
    InvalidManifestError,
)


class TestOrchestratorError:
    """Tests for the base error."""

    def test_message_and_code(self):
        e = OrchestratorError('something broke')
        assert str(e) == 'something broke'
        assert e.code == 'E000'

    def test_code_override(self):
        assert OrchestratorError('x', code='E999').code == 'E999'

    def test_with_context_prefixes_and_returns_self(self):
        e = NotFoundError('no such file')
        assert e.with_context('inner').with_context('outer') is e
        assert str(e) == 'outer: inner: no such file'
        assert e.message == 'no such file'

    def test_defaults(self):
        e = BackendError('x')
        assert e.partial_resources == {}
        assert e.remaining_resources == {}


class TestErrorKinds:
    """Tests for subclasses and their codes."""

    def test_codes(self):
        assert NotFoundError('x').code == 'E404'
        assert AlreadyExistsError('x').code == 'E409'
        assert InvalidManifestError('x').code == 'E400'
        assert BackendError('x').code == 'E500'

    def test_capability_not_found(self):
        e = CapabilityNotFoundError('deployment', 'get_resource')
        assert e.code == 'E501'
        assert 'deployment' in str(e) and 'get_resource' in str(e)

    def test_specific_not_found_kinds(self):
        assert isinstance(ManifestNotFoundError('/x/metadata.yaml'), NotFoundError)
        missing = ResourceFileMissingError('service', '/x/s.yaml')
        assert isinstance(missing, NotFoundError)
        assert str(missing) == "File /x/s.yaml for resource type 'service' does not exist"

    def test_parse_error_is_invalid_manifest(self):
        assert isinstance(ManifestParseError('x'), InvalidManifestError)

    def test_plugin_invocation_is_backend(self):
        cause = RuntimeError('api down')
        e = PluginInvocationError('service', 'create_resource', cause)
        assert isinstance(e, BackendError)
        assert e.cause is cause
        assert 'api down' in str(e)

    def test_partial_instantiation(self):
        cause = NotFoundError('gone')
        e = PartialInstantiationError(cause, {'deployment': ['a']})
        assert e.code == 'E520'
        assert e.cause is cause
        assert e.partial_resources == {'deployment': ['a']}
