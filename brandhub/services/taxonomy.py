"""
Taxonomy Engine for BrandHub.

Builds and queries the three-level category tree (Main > Sub > Brand)
from a flat snapshot of categories, derives per-node content counts and
resolves structural mutations:
- Level classification from parent depth
- Branch counts and strict-level counts
- Child listing and descendant traversal
- Category creation and renaming (validation only, no persistence)
- Delete planning with an explicit resolution strategy
- Orphaned content reporting

Nothing in this module touches Flask or the database. Every operation is
a pure computation over the snapshot handed to CategoryTree.
"""

import logging
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional


logger = logging.getLogger(__name__)


# =============================================================================
# Errors
# =============================================================================

class TaxonomyError(Exception):
    """Base exception for taxonomy operations."""
    pass


class ValidationError(TaxonomyError):
    """Raised when input is malformed (empty name, missing ids, bad target)."""
    pass


class ResolutionRequiredError(ValidationError):
    """Raised when deleting a category with children without a resolution."""

    def __init__(self, message: str, category_id: str, child_ids: List[str]):
        super().__init__(message)
        self.category_id = category_id
        self.child_ids = child_ids


class CycleError(TaxonomyError):
    """Raised when a reassignment target is the deleted node or a descendant."""
    pass


class NotFoundError(TaxonomyError):
    """Raised when an id is no longer present in the snapshot."""
    pass


# =============================================================================
# Types
# =============================================================================

class CategoryLevel(Enum):
    """Depth of a category in the taxonomy."""
    MAIN = "main"
    SUB = "sub"
    BRAND = "brand"

    @property
    def label(self) -> str:
        return _LEVEL_LABELS[self]


_LEVEL_LABELS = {
    CategoryLevel.MAIN: 'Main Category',
    CategoryLevel.SUB: 'Sub-Category',
    CategoryLevel.BRAND: 'Brand / Type',
}


class DeleteResolution(Enum):
    """How the children of a deleted category are handled."""
    SIMPLE_DELETE = "simple"
    RECURSIVE_PURGE = "purge"
    REASSIGN_CHILDREN = "reassign"


@dataclass
class TaxonomyNode:
    """A category as seen by the engine."""

    id: str
    name: str
    parent_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'parent_id': self.parent_id}


@dataclass
class ContentEntry:
    """A taxonomy-tagged content record (a post)."""

    id: str
    main_category_id: Optional[str] = None
    sub_category_id: Optional[str] = None
    brand_type_id: Optional[str] = None
    date: Optional[str] = None  # YYYY-MM-DD
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        result = dict(self.payload)
        result.update({
            'id': self.id,
            'main_category_id': self.main_category_id,
            'sub_category_id': self.sub_category_id,
            'brand_type_id': self.brand_type_id,
            'date': self.date,
        })
        return result


@dataclass
class DeletePlan:
    """Ids to delete and nodes to re-parent for one committed delete."""

    category_id: str
    resolution: DeleteResolution
    deleted_ids: List[str]
    reparented: List[TaxonomyNode] = field(default_factory=list)
    new_parent_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'category_id': self.category_id,
            'resolution': self.resolution.value,
            'deleted_ids': list(self.deleted_ids),
            'reparented': [node.to_dict() for node in self.reparented],
            'new_parent_id': self.new_parent_id,
        }


def _present(value: Optional[str]) -> bool:
    """Empty strings count as absent, the way the content table stores them."""
    return bool(value and str(value).strip())


def direct_level(entry) -> Optional[CategoryLevel]:
    """Deepest taxonomy level an entry is tagged at, or None if untagged."""
    if _present(getattr(entry, 'brand_type_id', None)):
        return CategoryLevel.BRAND
    if _present(getattr(entry, 'sub_category_id', None)):
        return CategoryLevel.SUB
    if _present(getattr(entry, 'main_category_id', None)):
        return CategoryLevel.MAIN
    return None


_LEVEL_FIELDS = {
    CategoryLevel.MAIN: 'main_category_id',
    CategoryLevel.SUB: 'sub_category_id',
    CategoryLevel.BRAND: 'brand_type_id',
}


def _sort_by_name(nodes: Iterable[TaxonomyNode]) -> List[TaxonomyNode]:
    return sorted(nodes, key=lambda node: ((node.name or '').casefold(), node.id))


# =============================================================================
# Category Tree
# =============================================================================

class CategoryTree:
    """
    Arena of categories keyed by id, with traversal on demand.

    The hierarchy is only ever stored as parent pointers. Children,
    descendants and levels are recomputed from the snapshot each time,
    so nodes can be removed in any order without stale child lists.
    """

    def __init__(self, categories: Iterable[TaxonomyNode]):
        self._nodes: Dict[str, TaxonomyNode] = {}
        for node in categories:
            self._nodes[node.id] = node

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, category_id) -> bool:
        return category_id in self._nodes

    def __repr__(self) -> str:
        return f"CategoryTree(nodes={len(self._nodes)})"

    @property
    def nodes(self) -> List[TaxonomyNode]:
        """All nodes, sorted by name."""
        return _sort_by_name(self._nodes.values())

    def get(self, category_id: Optional[str]) -> Optional[TaxonomyNode]:
        if category_id is None:
            return None
        return self._nodes.get(category_id)

    def require(self, category_id: Optional[str]) -> TaxonomyNode:
        """Look up a node, raising NotFoundError if it left the snapshot."""
        node = self.get(category_id)
        if node is None:
            raise NotFoundError(f"Category '{category_id}' not found")
        return node

    def _parent_of(self, node: TaxonomyNode) -> Optional[TaxonomyNode]:
        if node.parent_id is None or node.parent_id == node.id:
            return None
        return self._nodes.get(node.parent_id)

    # -------------------------------------------------------------------------
    # Structure
    # -------------------------------------------------------------------------

    def classify_level(self, category_id: Optional[str]) -> CategoryLevel:
        """
        Derive the level of a category from its parent chain.

        An unresolvable parent makes the node a best-effort Main category.
        Unknown ids are also reported as Main. Never raises.
        """
        node = self.get(category_id)
        if node is None:
            return CategoryLevel.MAIN
        parent = self._parent_of(node)
        if parent is None:
            return CategoryLevel.MAIN
        if self._parent_of(parent) is None:
            return CategoryLevel.SUB
        return CategoryLevel.BRAND

    def is_root(self, node: TaxonomyNode) -> bool:
        return self._parent_of(node) is None

    def list_children(self, parent_id: Optional[str]) -> List[TaxonomyNode]:
        """
        Direct children of parent_id, sorted by name (case-insensitive).

        With parent_id None the roots are returned, including nodes whose
        parent no longer exists in the snapshot.
        """
        if parent_id is None:
            children = [node for node in self._nodes.values() if self.is_root(node)]
        else:
            children = [
                node for node in self._nodes.values()
                if node.parent_id == parent_id and node.id != parent_id
            ]
        return _sort_by_name(children)

    def has_children(self, category_id: str) -> bool:
        return any(
            node.parent_id == category_id and node.id != category_id
            for node in self._nodes.values()
        )

    def find_descendants(self, category_id: str) -> List[str]:
        """Ids of every transitive descendant, parents before their children."""
        descendants: List[str] = []
        visited = {category_id}

        def walk(parent_id: str) -> None:
            for child in self.list_children(parent_id):
                if child.id in visited:
                    # Corrupt data with a parent cycle
                    continue
                visited.add(child.id)
                descendants.append(child.id)
                walk(child.id)

        walk(category_id)
        return descendants

    def placement_level(self, parent_id: Optional[str]) -> CategoryLevel:
        """Level a new category would be created at under parent_id."""
        if parent_id is None:
            return CategoryLevel.MAIN
        parent_level = self.classify_level(self.require(parent_id).id)
        if parent_level is CategoryLevel.BRAND:
            raise ValidationError("Brand / Type categories cannot have children")
        if parent_level is CategoryLevel.MAIN:
            return CategoryLevel.SUB
        return CategoryLevel.BRAND

    def placement_parents(self) -> List[TaxonomyNode]:
        """Categories that may parent a new category (Main and Sub)."""
        return [
            node for node in self.nodes
            if self.classify_level(node.id) is not CategoryLevel.BRAND
        ]

    # -------------------------------------------------------------------------
    # Counts
    # -------------------------------------------------------------------------

    def branch_count(self, category_id: str, entries: Iterable[Any]) -> int:
        """Entries tagging this category in any of the three level fields."""
        if category_id not in self._nodes:
            return 0
        return sum(
            1 for entry in entries
            if category_id in (
                getattr(entry, 'main_category_id', None),
                getattr(entry, 'sub_category_id', None),
                getattr(entry, 'brand_type_id', None),
            )
        )

    def strict_level_count(self, category_id: str, entries: Iterable[Any]) -> int:
        """Entries whose deepest tag is exactly this category."""
        return len(self.strict_level_entries(category_id, entries))

    def strict_level_entries(
        self, category_id: str, entries: Iterable[Any]
    ) -> List[Any]:
        if category_id not in self._nodes:
            return []
        level = self.classify_level(category_id)
        level_field = _LEVEL_FIELDS[level]
        return [
            entry for entry in entries
            if direct_level(entry) is level
            and getattr(entry, level_field, None) == category_id
        ]

    # -------------------------------------------------------------------------
    # Mutations (planned here, applied by the caller)
    # -------------------------------------------------------------------------

    @staticmethod
    def _clean_name(name: Optional[str]) -> str:
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Category name is required")
        cleaned = name.strip()
        if len(cleaned) > 200:
            raise ValidationError("Category name must be at most 200 characters")
        return cleaned

    def create(
        self, name: Optional[str], parent_id: Optional[str] = None
    ) -> TaxonomyNode:
        """
        Build a new category node under parent_id (None for a Main category).

        Raises:
            ValidationError: If the name is empty or the parent is a Brand
            NotFoundError: If parent_id is not in the snapshot
        """
        cleaned = self._clean_name(name)
        self.placement_level(parent_id)
        node = TaxonomyNode(id=str(uuid.uuid4()), name=cleaned, parent_id=parent_id)
        logger.debug("Planned category %s (%s) under %s", node.id, node.name, parent_id)
        return node

    def rename(self, category_id: str, name: Optional[str]) -> TaxonomyNode:
        node = self.require(category_id)
        return replace(node, name=self._clean_name(name))

    def plan_delete(
        self,
        category_id: str,
        resolution: Optional[DeleteResolution] = None,
        new_parent_id: Optional[str] = None,
    ) -> DeletePlan:
        """
        Work out what deleting a category touches.

        A childless category is always a simple delete. Otherwise the
        caller must pick RECURSIVE_PURGE or REASSIGN_CHILDREN. Content
        entries pointing at purged ids are left as they are; use
        orphaned_entries() to report them.

        Raises:
            NotFoundError: Category or reassignment target not in snapshot
            ResolutionRequiredError: Children exist and no resolution given
            CycleError: Target is the category itself or a descendant
            ValidationError: Target is a Brand category
        """
        node = self.require(category_id)
        children = self.list_children(node.id)

        if not children:
            return DeletePlan(
                category_id=node.id,
                resolution=DeleteResolution.SIMPLE_DELETE,
                deleted_ids=[node.id],
            )

        if resolution is None or resolution is DeleteResolution.SIMPLE_DELETE:
            raise ResolutionRequiredError(
                f"Category '{node.name}' has {len(children)} child categories; "
                "choose purge or reassign",
                category_id=node.id,
                child_ids=[child.id for child in children],
            )

        if resolution is DeleteResolution.RECURSIVE_PURGE:
            return DeletePlan(
                category_id=node.id,
                resolution=resolution,
                deleted_ids=[node.id] + self.find_descendants(node.id),
            )

        self._check_reassignment_target(node.id, new_parent_id)
        return DeletePlan(
            category_id=node.id,
            resolution=resolution,
            deleted_ids=[node.id],
            reparented=[replace(child, parent_id=new_parent_id) for child in children],
            new_parent_id=new_parent_id,
        )

    def _check_reassignment_target(
        self, category_id: str, new_parent_id: Optional[str]
    ) -> None:
        if new_parent_id is None:
            return
        if new_parent_id == category_id:
            raise CycleError("Cannot reassign children to the category being deleted")
        if new_parent_id in self.find_descendants(category_id):
            raise CycleError("Cannot reassign children to one of their own descendants")
        self.require(new_parent_id)
        if self.classify_level(new_parent_id) is CategoryLevel.BRAND:
            raise ValidationError("Brand / Type categories cannot have children")

    def available_reassignment_targets(self, category_id: str) -> List[TaxonomyNode]:
        """Main and Sub categories outside the subtree of category_id."""
        excluded = set(self.find_descendants(category_id))
        excluded.add(category_id)
        return [
            node for node in self.placement_parents()
            if node.id not in excluded
        ]

    # -------------------------------------------------------------------------
    # Reporting
    # -------------------------------------------------------------------------

    def orphaned_entries(self, entries: Iterable[Any]) -> List[Dict[str, Any]]:
        """Entries referencing category ids that are not in the snapshot."""
        orphans = []
        for entry in entries:
            dangling = {
                field_name: getattr(entry, field_name, None)
                for field_name in _LEVEL_FIELDS.values()
                if _present(getattr(entry, field_name, None))
                and getattr(entry, field_name) not in self._nodes
            }
            if dangling:
                orphans.append({'entry_id': entry.id, 'dangling': dangling})
        return orphans

    def entry_labels(self, entry) -> Dict[str, Optional[str]]:
        labels = {}
        for level, field_name in _LEVEL_FIELDS.items():
            node = self.get(getattr(entry, field_name, None))
            labels[level.value] = node.name if node else None
        return labels

    def describe(self, node: TaxonomyNode, entries: List[Any]) -> Dict[str, Any]:
        """Node dict with level and both counts."""
        level = self.classify_level(node.id)
        result = node.to_dict()
        result.update({
            'level': level.value,
            'level_label': level.label,
            'branch_count': self.branch_count(node.id, entries),
            'strict_count': self.strict_level_count(node.id, entries),
            'has_children': self.has_children(node.id),
        })
        return result

    def to_tree(self, entries: List[Any]) -> List[Dict[str, Any]]:
        """Nested view of the forest, roots first, children sorted by name."""
        visited = set()

        def build(node: TaxonomyNode) -> Dict[str, Any]:
            visited.add(node.id)
            result = self.describe(node, entries)
            result['children'] = [
                build(child) for child in self.list_children(node.id)
                if child.id not in visited
            ]
            return result

        return [build(root) for root in self.list_children(None)]
