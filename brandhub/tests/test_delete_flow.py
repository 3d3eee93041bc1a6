"""
Tests for DeleteFlow.
"""

import pytest

from brandhub.services.delete_flow import DeleteFlow, DeleteFlowState, StateTransitionError
from brandhub.services.taxonomy import (
    CycleError,
    DeleteResolution,
    NotFoundError,
    ResolutionRequiredError,
)


class TestDeleteFlowState:
    """Tests for DeleteFlowState enum."""

    def test_state_values(self):
        assert DeleteFlowState.IDLE.value == "idle"
        assert DeleteFlowState.AWAITING_RESOLUTION.value == "awaiting_resolution"
        assert DeleteFlowState.CONFIRMING_SIMPLE_DELETE.value == "confirming_simple_delete"
        assert DeleteFlowState.RESOLVED.value == "resolved"


class TestDeleteFlow:
    """Tests for DeleteFlow class."""

    def test_initial_state(self, scenario_tree):
        flow = DeleteFlow(scenario_tree)
        assert flow.state == DeleteFlowState.IDLE
        assert flow.plan is None

    def test_request_with_children_awaits_resolution(self, scenario_tree):
        flow = DeleteFlow(scenario_tree)
        assert flow.request('audio') == DeleteFlowState.AWAITING_RESOLUTION
        assert flow.needs_resolution
        assert flow.category.id == 'audio'

    def test_request_childless_confirms(self, scenario_tree):
        flow = DeleteFlow(scenario_tree)
        assert flow.request('sonos') == DeleteFlowState.CONFIRMING_SIMPLE_DELETE
        assert not flow.needs_resolution

    def test_request_unknown(self, scenario_tree):
        flow = DeleteFlow(scenario_tree)
        with pytest.raises(NotFoundError):
            flow.request('ghost')
        assert flow.state == DeleteFlowState.IDLE

    def test_simple_delete_commit(self, scenario_tree):
        flow = DeleteFlow(scenario_tree)
        flow.request('sonos')
        plan = flow.commit()
        assert plan.resolution is DeleteResolution.SIMPLE_DELETE
        assert flow.state == DeleteFlowState.RESOLVED
        assert flow.plan is plan

    def test_purge_commit(self, scenario_tree):
        flow = DeleteFlow(scenario_tree)
        flow.request('audio')
        plan = flow.commit(DeleteResolution.RECURSIVE_PURGE)
        assert set(plan.deleted_ids) == {'audio', 'sonos'}

    def test_commit_without_resolution_stays_awaiting(self, scenario_tree):
        flow = DeleteFlow(scenario_tree)
        flow.request('audio')
        with pytest.raises(ResolutionRequiredError):
            flow.commit()
        assert flow.state == DeleteFlowState.AWAITING_RESOLUTION
        assert flow.plan is None

    def test_cycle_keeps_flow_open(self, scenario_tree):
        flow = DeleteFlow(scenario_tree)
        flow.request('electronics')
        with pytest.raises(CycleError):
            flow.commit(DeleteResolution.REASSIGN_CHILDREN, 'sonos')
        assert flow.state == DeleteFlowState.AWAITING_RESOLUTION
        plan = flow.commit(DeleteResolution.REASSIGN_CHILDREN, None)
        assert [(n.id, n.parent_id) for n in plan.reparented] == [('audio', None)]

    def test_cancel_discards(self, scenario_tree):
        flow = DeleteFlow(scenario_tree)
        flow.request('audio')
        flow.cancel()
        assert flow.state == DeleteFlowState.IDLE
        assert flow.category is None
        assert flow.plan is None

    def test_cancel_when_idle_is_noop(self, scenario_tree):
        flow = DeleteFlow(scenario_tree)
        flow.cancel()
        assert flow.state == DeleteFlowState.IDLE

    def test_finish_returns_to_idle(self, scenario_tree):
        flow = DeleteFlow(scenario_tree)
        flow.request('sonos')
        flow.commit()
        flow.finish()
        assert flow.state == DeleteFlowState.IDLE

    def test_invalid_transitions(self, scenario_tree):
        flow = DeleteFlow(scenario_tree)
        with pytest.raises(StateTransitionError):
            flow.commit()
        with pytest.raises(StateTransitionError):
            flow.finish()
        flow.request('audio')
        with pytest.raises(StateTransitionError):
            flow.request('sonos')

    def test_reassignment_targets(self, scenario_tree):
        flow = DeleteFlow(scenario_tree)
        assert flow.reassignment_targets() == []
        flow.request('audio')
        assert [n.id for n in flow.reassignment_targets()] == ['electronics']

    def test_repr(self, scenario_tree):
        assert repr(DeleteFlow(scenario_tree)) == "DeleteFlow(state=IDLE)"
