"""
BrandHub Services Package.

Business logic for the category taxonomy:
- CategoryTree: pure taxonomy engine over a snapshot
- DeleteFlow: delete resolution state machine
- insights: drill-down volume and direct feeds
- CategoryStore / CategoryService: persistence and orchestration
  (import from their modules; they depend on brandhub.models)
"""

from brandhub.services.taxonomy import (
    CategoryLevel,
    CategoryTree,
    ContentEntry,
    CycleError,
    DeletePlan,
    DeleteResolution,
    NotFoundError,
    ResolutionRequiredError,
    TaxonomyError,
    TaxonomyNode,
    ValidationError,
)
from brandhub.services.delete_flow import (
    DeleteFlow,
    DeleteFlowState,
    StateTransitionError,
)

__all__ = [
    'CategoryLevel',
    'CategoryTree',
    'ContentEntry',
    'CycleError',
    'DeletePlan',
    'DeleteResolution',
    'NotFoundError',
    'ResolutionRequiredError',
    'TaxonomyError',
    'TaxonomyNode',
    'ValidationError',
    'DeleteFlow',
    'DeleteFlowState',
    'StateTransitionError',
]
