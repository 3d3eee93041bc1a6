"""
Category Service for BrandHub.

Provides business logic for the category taxonomy:
- Snapshots: fetch categories and posts, build the CategoryTree
- CRUD: create, rename and delete categories
- Delete resolution: purge, reassign or promote children to root
- Insights: drill-down volume, direct feeds, orphaned content

Every call starts from a fresh snapshot. Mutations are planned by the
taxonomy engine and then applied through the CategoryStore one record
at a time.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple

from brandhub.services.category_store import CategoryStore
from brandhub.services.delete_flow import DeleteFlow, DeleteFlowState
from brandhub.services import insights
from brandhub.services.taxonomy import (
    CategoryTree,
    ContentEntry,
    DeletePlan,
    DeleteResolution,
    TaxonomyNode,
    ValidationError,
)

logger = logging.getLogger(__name__)


class CategoryService:
    """
    Service class for managing the category taxonomy.

    Methods return plain dictionaries ready for JSON responses and raise
    taxonomy errors (ValidationError, CycleError, NotFoundError) for the
    caller to report.
    """

    # Accepted values for the delete 'resolution' field
    RESOLUTIONS = {
        'purge': DeleteResolution.RECURSIVE_PURGE,
        'reassign': DeleteResolution.REASSIGN_CHILDREN,
        'simple': DeleteResolution.SIMPLE_DELETE,
    }

    # ==========================================================================
    # Snapshot
    # ==========================================================================

    @classmethod
    def snapshot(cls) -> Tuple[CategoryTree, List[ContentEntry]]:
        """Fetch categories and posts and build the tree."""
        tree = CategoryTree(CategoryStore.fetch_categories())
        entries = CategoryStore.fetch_content_entries()
        return tree, entries

    # ==========================================================================
    # Queries
    # ==========================================================================

    @classmethod
    def list_categories(cls) -> List[Dict[str, Any]]:
        tree, entries = cls.snapshot()
        return [tree.describe(node, entries) for node in tree.nodes]

    @classmethod
    def get_tree(cls) -> List[Dict[str, Any]]:
        tree, entries = cls.snapshot()
        return tree.to_tree(entries)

    @classmethod
    def get_category(cls, category_id: str) -> Dict[str, Any]:
        tree, entries = cls.snapshot()
        return tree.describe(tree.require(category_id), entries)

    @classmethod
    def list_children(cls, category_id: str) -> List[Dict[str, Any]]:
        tree, entries = cls.snapshot()
        tree.require(category_id)
        return [
            tree.describe(child, entries)
            for child in tree.list_children(category_id)
        ]

    @classmethod
    def reassignment_targets(cls, category_id: str) -> List[Dict[str, Any]]:
        tree, _ = cls.snapshot()
        tree.require(category_id)
        return [
            cls._describe_target(tree, node)
            for node in tree.available_reassignment_targets(category_id)
        ]

    @classmethod
    def placement(cls, parent_id: Optional[str] = None) -> Dict[str, Any]:
        """Level a new category would get under parent_id, plus eligible parents."""
        tree, _ = cls.snapshot()
        level = tree.placement_level(parent_id)
        return {
            'parent_id': parent_id,
            'level': level.value,
            'level_label': level.label,
            'parents': [
                cls._describe_target(tree, node) for node in tree.placement_parents()
            ],
        }

    @staticmethod
    def _describe_target(tree: CategoryTree, node: TaxonomyNode) -> Dict[str, Any]:
        level = tree.classify_level(node.id)
        return dict(node.to_dict(), level=level.value, level_label=level.label)

    # ==========================================================================
    # Mutations
    # ==========================================================================

    @classmethod
    def create_category(
        cls, name: Optional[str], parent_id: Optional[str] = None
    ) -> Dict[str, Any]:
        """
        Create a category under parent_id.

        Returns:
            The new category with its level and counts

        Raises:
            ValidationError: If name is empty or parent is a Brand
            NotFoundError: If the parent does not exist
        """
        tree, _ = cls.snapshot()
        node = tree.create(name, parent_id or None)
        CategoryStore.upsert_category(node)
        logger.info(f"Created category {node.id} ({node.name}) under {node.parent_id}")
        return cls.get_category(node.id)

    @classmethod
    def rename_category(cls, category_id: str, name: Optional[str]) -> Dict[str, Any]:
        tree, _ = cls.snapshot()
        node = tree.rename(category_id, name)
        CategoryStore.upsert_category(node)
        logger.info(f"Renamed category {node.id} to {node.name}")
        return cls.get_category(node.id)

    @classmethod
    def parse_resolution(cls, value: Optional[str]) -> Optional[DeleteResolution]:
        if value is None or value == '':
            return None
        resolution = cls.RESOLUTIONS.get(str(value).lower())
        if resolution is None:
            raise ValidationError(
                f"resolution must be one of: {', '.join(sorted(cls.RESOLUTIONS))}"
            )
        return resolution

    @classmethod
    def delete_category(
        cls,
        category_id: str,
        resolution: Optional[DeleteResolution] = None,
        new_parent_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Delete a category, resolving its children if it has any.

        When the category has children and no resolution is given, nothing
        is changed and the response asks for one, listing the children and
        the valid reassignment targets.

        Returns:
            {'status': 'resolution_required', ...} or
            {'status': 'deleted', 'plan': ..., 'orphaned_content': ...}
        """
        tree, _ = cls.snapshot()
        flow = DeleteFlow(tree)
        state = flow.request(category_id)

        needs_choice = resolution in (None, DeleteResolution.SIMPLE_DELETE)
        if state == DeleteFlowState.AWAITING_RESOLUTION and needs_choice:
            category = flow.category
            children = tree.list_children(category.id)
            targets = flow.reassignment_targets()
            flow.cancel()
            return {
                'status': 'resolution_required',
                'category': category.to_dict(),
                'children': [child.to_dict() for child in children],
                'reassignment_targets': [
                    cls._describe_target(tree, node) for node in targets
                ],
                'resolutions': ['purge', 'reassign'],
            }

        try:
            plan = flow.commit(resolution, new_parent_id)
        except Exception:
            flow.cancel()
            raise

        cls._apply_plan(plan)
        flow.finish()

        # Purged ids may still be referenced by posts
        fresh_tree, entries = cls.snapshot()
        purged = set(plan.deleted_ids)
        orphaned = [
            orphan for orphan in fresh_tree.orphaned_entries(entries)
            if purged.intersection(orphan['dangling'].values())
        ]
        if orphaned:
            logger.warning(
                f"Delete of {plan.category_id} left {len(orphaned)} posts "
                f"referencing removed categories"
            )

        return {
            'status': 'deleted',
            'plan': plan.to_dict(),
            'orphaned_content': orphaned,
        }

    @classmethod
    def _apply_plan(cls, plan: DeletePlan) -> None:
        """Re-parent children, then delete ids parent-first. Not atomic."""
        applied: List[str] = []
        try:
            for node in plan.reparented:
                CategoryStore.upsert_category(node)
                applied.append(node.id)
            for category_id in plan.deleted_ids:
                CategoryStore.delete_category_by_id(category_id)
                applied.append(category_id)
        except Exception:
            logger.error(
                f"Delete of {plan.category_id} partially applied; "
                f"completed {applied}, re-fetch to reconcile"
            )
            raise
        logger.info(
            f"Deleted category {plan.category_id} ({plan.resolution.value}): "
            f"{len(plan.deleted_ids)} removed, {len(plan.reparented)} reparented"
        )

    # ==========================================================================
    # Insights
    # ==========================================================================

    @staticmethod
    def current_month() -> str:
        return datetime.now(timezone.utc).strftime('%Y-%m')

    @classmethod
    def insights(
        cls,
        path: Sequence[str] = (),
        mode: str = insights.MODE_HIERARCHY,
        search: Optional[str] = None,
        month: Optional[str] = None,
    ) -> Dict[str, Any]:
        tree, entries = cls.snapshot()
        scoped = insights.filter_by_month(entries, month)
        result = insights.drill_down(tree, scoped, path=path, mode=mode, search=search)
        result['month'] = month
        return result

    @classmethod
    def direct_feed(
        cls, category_id: str, month: Optional[str] = None
    ) -> Dict[str, Any]:
        tree, entries = cls.snapshot()
        scoped = insights.filter_by_month(entries, month)
        feed = insights.direct_feed(tree, scoped, category_id)
        return {
            'category': tree.describe(tree.require(category_id), scoped),
            'month': month,
            'posts': [
                dict(entry.to_dict(), labels=tree.entry_labels(entry))
                for entry in feed
            ],
            'count': len(feed),
        }

    @classmethod
    def orphaned_content(cls) -> List[Dict[str, Any]]:
        tree, entries = cls.snapshot()
        return tree.orphaned_entries(entries)
