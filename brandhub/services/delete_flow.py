"""
Delete Resolution Flow for BrandHub categories.

Tracks one delete interaction from request to commit:
- IDLE: nothing requested
- AWAITING_RESOLUTION: the category has children, a strategy must be chosen
- CONFIRMING_SIMPLE_DELETE: the category is childless, only confirmation needed
- RESOLVED: a DeletePlan was committed and is ready to apply

Cancelling before commit returns to IDLE without a plan, so an aborted
flow never leaves a partial cascade behind.
"""

import logging
from enum import Enum
from typing import Dict, List, Optional

from brandhub.services.taxonomy import (
    CategoryTree,
    DeletePlan,
    DeleteResolution,
    TaxonomyNode,
)

logger = logging.getLogger(__name__)


class DeleteFlowState(Enum):
    """Represents the current step of a delete interaction."""
    IDLE = "idle"
    AWAITING_RESOLUTION = "awaiting_resolution"
    CONFIRMING_SIMPLE_DELETE = "confirming_simple_delete"
    RESOLVED = "resolved"


class StateTransitionError(Exception):
    """Raised when an invalid delete flow transition is attempted."""
    pass


class DeleteFlow:
    """
    State machine for deleting a single category.

    Valid transitions:
    - IDLE -> AWAITING_RESOLUTION (request on a category with children)
    - IDLE -> CONFIRMING_SIMPLE_DELETE (request on a childless category)
    - AWAITING_RESOLUTION -> RESOLVED (commit with a resolution)
    - CONFIRMING_SIMPLE_DELETE -> RESOLVED (commit)
    - AWAITING_RESOLUTION, CONFIRMING_SIMPLE_DELETE or RESOLVED -> IDLE
      (cancel / finish)
    """

    VALID_TRANSITIONS: Dict[DeleteFlowState, List[DeleteFlowState]] = {
        DeleteFlowState.IDLE: [
            DeleteFlowState.AWAITING_RESOLUTION,
            DeleteFlowState.CONFIRMING_SIMPLE_DELETE,
        ],
        DeleteFlowState.AWAITING_RESOLUTION: [
            DeleteFlowState.RESOLVED,
            DeleteFlowState.IDLE,
        ],
        DeleteFlowState.CONFIRMING_SIMPLE_DELETE: [
            DeleteFlowState.RESOLVED,
            DeleteFlowState.IDLE,
        ],
        DeleteFlowState.RESOLVED: [DeleteFlowState.IDLE],
    }

    def __init__(self, tree: CategoryTree):
        """
        Initialize the flow over a snapshot.

        Args:
            tree: CategoryTree built from the snapshot the user is looking at
        """
        self._tree = tree
        self._state = DeleteFlowState.IDLE
        self._category: Optional[TaxonomyNode] = None
        self._plan: Optional[DeletePlan] = None

    @property
    def state(self) -> DeleteFlowState:
        return self._state

    @property
    def category(self) -> Optional[TaxonomyNode]:
        """Category currently being deleted."""
        return self._category

    @property
    def plan(self) -> Optional[DeletePlan]:
        """Committed plan, set only in RESOLVED."""
        return self._plan

    @property
    def needs_resolution(self) -> bool:
        return self._state == DeleteFlowState.AWAITING_RESOLUTION

    def _transition_to(self, target: DeleteFlowState) -> None:
        if target not in self.VALID_TRANSITIONS.get(self._state, []):
            raise StateTransitionError(
                f"Invalid transition: {self._state.name} -> {target.name}"
            )
        logger.debug("Delete flow transition: %s -> %s", self._state.name, target.name)
        self._state = target

    def request(self, category_id: str) -> DeleteFlowState:
        """
        Start deleting a category.

        Returns:
            AWAITING_RESOLUTION if the category has children,
            CONFIRMING_SIMPLE_DELETE otherwise

        Raises:
            NotFoundError: If the category is not in the snapshot
            StateTransitionError: If a delete is already in progress
        """
        if self._state != DeleteFlowState.IDLE:
            raise StateTransitionError(
                f"Cannot request a delete while {self._state.name}"
            )
        category = self._tree.require(category_id)
        if self._tree.has_children(category.id):
            self._transition_to(DeleteFlowState.AWAITING_RESOLUTION)
        else:
            self._transition_to(DeleteFlowState.CONFIRMING_SIMPLE_DELETE)
        self._category = category
        return self._state

    def reassignment_targets(self) -> List[TaxonomyNode]:
        if self._category is None:
            return []
        return self._tree.available_reassignment_targets(self._category.id)

    def commit(
        self,
        resolution: Optional[DeleteResolution] = None,
        new_parent_id: Optional[str] = None,
    ) -> DeletePlan:
        """
        Commit the chosen resolution and return the plan to apply.

        A rejected resolution (cycle, bad target) leaves the flow where it
        was so another choice can be made.
        """
        if self._state not in (
            DeleteFlowState.AWAITING_RESOLUTION,
            DeleteFlowState.CONFIRMING_SIMPLE_DELETE,
        ):
            raise StateTransitionError(f"Nothing to commit while {self._state.name}")

        plan = self._tree.plan_delete(self._category.id, resolution, new_parent_id)
        self._transition_to(DeleteFlowState.RESOLVED)
        self._plan = plan
        logger.info(
            "Delete of %s resolved as %s (%d deleted, %d reparented)",
            plan.category_id,
            plan.resolution.value,
            len(plan.deleted_ids),
            len(plan.reparented),
        )
        return plan

    def cancel(self) -> None:
        """Abort the flow. No plan is kept."""
        if self._state == DeleteFlowState.IDLE:
            return
        self._transition_to(DeleteFlowState.IDLE)
        self._category = None
        self._plan = None

    def finish(self) -> None:
        """Return to IDLE once the plan has been applied."""
        if self._state != DeleteFlowState.RESOLVED:
            raise StateTransitionError(f"Cannot finish while {self._state.name}")
        self._transition_to(DeleteFlowState.IDLE)
        self._category = None
        self._plan = None

    def __repr__(self) -> str:
        return f"DeleteFlow(state={self._state.name})"
