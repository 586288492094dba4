"""Tests for bundle.state module."""

import sys
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from bundle.state import InstantiationState, Stage, StateTransitionError


def _state():
    return InstantiationState('vnf1', 'cloud1', 'ns1')


class TestTransitions:
    """Tests for stage transitions."""

    def test_happy_path(self):
        state = _state()
        state.advance(Stage.NAMESPACE_ENSURING)
        state.advance(Stage.MANIFEST_LOADING)
        state.advance(Stage.RESOURCE_CREATING, 'deployment', 0)
        state.advance(Stage.RESOURCE_CREATING, 'deployment', 1)
        state.advance(Stage.COMPLETED)

        assert state.stage == Stage.COMPLETED
        assert state.is_terminal
        assert state.resource_type is None
        assert state.duration is not None

    def test_resource_creating_records_position(self):
        state = _state()
        state.advance(Stage.NAMESPACE_ENSURING)
        state.advance(Stage.MANIFEST_LOADING)
        state.advance(Stage.RESOURCE_CREATING, 'service', 2)

        assert state.describe() == 'resource_creating(service, 2)'

    def test_skipping_stage_rejected(self):
        with pytest.raises(StateTransitionError):
            _state().advance(Stage.MANIFEST_LOADING)

    def test_no_transition_out_of_completed(self):
        state = _state()
        state.advance(Stage.NAMESPACE_ENSURING)
        state.advance(Stage.MANIFEST_LOADING)
        state.advance(Stage.COMPLETED)

        with pytest.raises(StateTransitionError):
            state.advance(Stage.NAMESPACE_ENSURING)
        with pytest.raises(StateTransitionError):
            state.fail('late')

    def test_fail_from_any_active_stage(self):
        state = _state()
        state.advance(Stage.NAMESPACE_ENSURING)
        state.fail('namespace refused')

        assert state.stage == Stage.FAILED
        assert state.error == 'namespace refused'
        with pytest.raises(StateTransitionError):
            state.advance(Stage.MANIFEST_LOADING)

    def test_advance_to_failed_rejected(self):
        with pytest.raises(StateTransitionError, match='fail'):
            _state().advance(Stage.FAILED)


class TestSerialization:
    """Tests for to_dict/from_dict."""

    def test_round_trip(self):
        state = _state()
        state.advance(Stage.NAMESPACE_ENSURING)
        state.external_id = '1a2b'
        state.internal_id = 'cloud1-ns1-1a2b'
        state.record('deployment', 'cloud1-ns1-1a2b-web')

        restored = InstantiationState.from_dict(state.to_dict())

        assert restored == state

    def test_to_dict_omits_unset(self):
        d = _state().to_dict()
        assert d == {
            'bundle_id': 'vnf1',
            'cloud_region_id': 'cloud1',
            'namespace': 'ns1',
            'stage': 'idle',
            'resources': {},
        }
