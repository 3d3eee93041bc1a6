"""
Taxonomy insights for the brand drill-down view.

Month filtering, per-node volume, drill-down listings with KPI ratios
and the direct feed of a single category.
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence

from brandhub.services.taxonomy import (
    CategoryLevel,
    CategoryTree,
    ValidationError,
    _present,
)


MODE_HIERARCHY = 'hierarchy'
MODE_FLAT_BRAND = 'flat-brand'
VIEW_MODES = (MODE_HIERARCHY, MODE_FLAT_BRAND)

# Level shown at each drill-down depth
_PATH_LEVELS = (CategoryLevel.MAIN, CategoryLevel.SUB, CategoryLevel.BRAND)


def filter_by_month(entries: Iterable[Any], month: Optional[str]) -> List[Any]:
    """Keep entries dated within month ('YYYY-MM'). No month keeps everything."""
    entries = list(entries)
    if not month:
        return entries
    return [
        entry for entry in entries
        if getattr(entry, 'date', None) and str(entry.date).startswith(month)
    ]


def volume_stats(entries: Iterable[Any]) -> Dict[str, int]:
    """Category id -> number of entries tagging it at any level, once per entry."""
    stats: Dict[str, int] = {}
    for entry in entries:
        tagged = {
            getattr(entry, field_name, None)
            for field_name in ('main_category_id', 'sub_category_id', 'brand_type_id')
        }
        for category_id in tagged:
            if _present(category_id):
                stats[category_id] = stats.get(category_id, 0) + 1
    return stats


def _check_path(tree: CategoryTree, path: List[str]) -> None:
    """A path starts at a Main category and each step is a child of the last."""
    if path and tree.classify_level(path[0]) is not CategoryLevel.MAIN:
        raise ValidationError(
            f"Drill-down must start at a Main category, got '{path[0]}'"
        )
    for parent_id, child_id in zip(path, path[1:]):
        if tree.get(child_id).parent_id != parent_id:
            raise ValidationError(f"'{child_id}' is not a child of '{parent_id}'")


def _ratio(numerator: int, denominator: int) -> float:
    if denominator <= 0:
        return 0.0
    return round(numerator / denominator * 100, 1)


def drill_down(
    tree: CategoryTree,
    entries: Sequence[Any],
    path: Sequence[str] = (),
    mode: str = MODE_HIERARCHY,
    search: Optional[str] = None,
) -> Dict[str, Any]:
    """
    List the categories visible at one drill-down step, with KPIs.

    Args:
        tree: Snapshot of the taxonomy
        entries: Content entries, already month-filtered
        path: Navigation stack below the root view ([], [main], [main, sub])
        mode: 'hierarchy' or 'flat-brand'
        search: Case-insensitive substring to match against names

    Returns:
        Dictionary with level, breadcrumb, items and kpis

    Raises:
        ValidationError: Unknown mode, a path deeper than two steps, or a
            path that does not walk down from a Main category
        NotFoundError: A path id is not in the snapshot
    """
    if mode not in VIEW_MODES:
        raise ValidationError(f"mode must be one of: {', '.join(VIEW_MODES)}")
    path = list(path or [])
    if len(path) > 2:
        raise ValidationError("Drill-down path can be at most two categories deep")

    breadcrumb = [tree.require(category_id).to_dict() for category_id in path]
    _check_path(tree, path)
    stats = volume_stats(entries)
    global_total = len(entries)

    if mode == MODE_FLAT_BRAND:
        level = CategoryLevel.BRAND
        candidates = [
            node for node in tree.nodes
            if tree.classify_level(node.id) is CategoryLevel.BRAND
        ]
    else:
        level = _PATH_LEVELS[len(path)]
        candidates = tree.list_children(path[-1] if path else None)

    needle = (search or '').strip().casefold()
    items = [
        node for node in candidates
        if not needle or needle in (node.name or '').casefold()
    ]

    total_volume = sum(stats.get(node.id, 0) for node in items)

    if mode == MODE_FLAT_BRAND:
        ratio, ratio_label = _ratio(total_volume, global_total), 'Brands Share'
        focus = 'ALL BRANDS'
    elif len(path) == 0:
        ratio, ratio_label = 100.0, 'Global Scope'
        focus = level.value.upper()
    elif len(path) == 1:
        ratio = _ratio(stats.get(path[0], 0), global_total)
        ratio_label = 'Global Weight'
        focus = level.value.upper()
    else:
        ratio = _ratio(stats.get(path[1], 0), stats.get(path[0], 0))
        ratio_label = 'Parent Contribution'
        focus = level.value.upper()

    return {
        'mode': mode,
        'level': level.value,
        'breadcrumb': breadcrumb,
        'items': [
            dict(node.to_dict(), volume=stats.get(node.id, 0))
            for node in items
        ],
        'kpis': {
            'active_nodes': len(items),
            'total_volume': total_volume,
            'ratio': ratio,
            'ratio_label': ratio_label,
            'focus': focus,
            'global_total': global_total,
        },
    }


def direct_feed(
    tree: CategoryTree, entries: Iterable[Any], category_id: str
) -> List[Any]:
    """Entries whose deepest tag is category_id, newest first."""
    tree.require(category_id)
    feed = tree.strict_level_entries(category_id, entries)
    return sorted(feed, key=lambda entry: entry.date or '', reverse=True)
