"""
BrandHub Categories Routes

Blueprint for the category taxonomy API:
- GET /: List categories with levels and counts (?view=tree for nesting)
- POST /: Create a category
- GET /placement: Level a new category would get, and eligible parents
- GET /insights: Drill-down volume and KPIs
- GET /orphaned-content: Posts referencing deleted categories
- GET /<id>: Get a category
- PUT /<id>: Rename a category
- DELETE /<id>: Delete a category with a resolution strategy
- GET /<id>/children: Direct children
- GET /<id>/reassignment-targets: Valid targets for reassigning children
- GET /<id>/feed: Posts tagged directly at this category

All endpoints are prefixed with /api/v1/categories when registered with the app.
Taxonomy errors are turned into JSON responses by the app's error handlers.
"""

import re

from flask import Blueprint, request, jsonify

from brandhub.services.category_service import CategoryService
from brandhub.services.taxonomy import ValidationError


# Create categories blueprint
categories_bp = Blueprint('categories', __name__)

MONTH_PATTERN = re.compile(r'^\d{4}-(0[1-9]|1[0-2])$')


def _month_arg():
    """
    Read the ?month= filter.

    Defaults to the current month. 'all' or an empty value disables
    the filter.
    """
    month = request.args.get('month')
    if month is None:
        return CategoryService.current_month()
    if month == '' or month.lower() == 'all':
        return None
    if not MONTH_PATTERN.match(month):
        raise ValidationError("month must be formatted as YYYY-MM")
    return month


@categories_bp.route('', methods=['GET'])
def list_categories():
    """
    List all categories.

    Query Parameters:
        view: 'flat' (default) or 'tree'

    Returns:
        200: {"categories": [...], "count": N}
    """
    if request.args.get('view') == 'tree':
        tree = CategoryService.get_tree()
        return jsonify({'categories': tree, 'count': len(tree)}), 200

    categories = CategoryService.list_categories()
    return jsonify({'categories': categories, 'count': len(categories)}), 200


@categories_bp.route('', methods=['POST'])
def create_category():
    """
    Create a new category.

    Request Body:
        {
            "name": "Graphic Cards" (required),
            "parent_id": "uuid" (optional, omit for a Main category)
        }

    Returns:
        201: New category
        400: Missing name or parent is a Brand / Type
        404: Parent not found
    """
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400

    category = CategoryService.create_category(data.get('name'), data.get('parent_id'))
    return jsonify(category), 201


@categories_bp.route('/placement', methods=['GET'])
def get_placement():
    """Level a category created under ?parent_id= would get."""
    parent_id = request.args.get('parent_id') or None
    return jsonify(CategoryService.placement(parent_id)), 200


@categories_bp.route('/insights', methods=['GET'])
def get_insights():
    """
    Drill-down insights for the brand view.

    Query Parameters:
        path: Comma separated ids below the root view ('' | main | main,sub)
        mode: 'hierarchy' (default) or 'flat-brand'
        search: Name filter
        month: 'YYYY-MM', default current month, 'all' for no filter

    Returns:
        200: {"level", "breadcrumb", "items", "kpis", "month"}
    """
    path = [part for part in request.args.get('path', '').split(',') if part]
    result = CategoryService.insights(
        path=path,
        mode=request.args.get('mode', 'hierarchy'),
        search=request.args.get('search'),
        month=_month_arg(),
    )
    return jsonify(result), 200


@categories_bp.route('/orphaned-content', methods=['GET'])
def get_orphaned_content():
    """Posts whose category tags point at categories that no longer exist."""
    orphans = CategoryService.orphaned_content()
    return jsonify({'orphaned_content': orphans, 'count': len(orphans)}), 200


@categories_bp.route('/<category_id>', methods=['GET'])
def get_category(category_id):
    return jsonify(CategoryService.get_category(category_id)), 200


@categories_bp.route('/<category_id>', methods=['PUT'])
def rename_category(category_id):
    """
    Rename a category.

    Request Body:
        {"name": "New Name"}

    Returns:
        200: Updated category
        400: Empty name
        404: Category not found
    """
    data = request.get_json(silent=True)
    if not data or not isinstance(data, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400

    return jsonify(CategoryService.rename_category(category_id, data.get('name'))), 200


@categories_bp.route('/<category_id>', methods=['DELETE'])
def delete_category(category_id):
    """
    Delete a category.

    Childless categories are deleted directly. Categories with children
    need a resolution:

    Request Body:
        {
            "resolution": "purge" | "reassign",
            "parent_id": "uuid" or null (reassign only, null moves children to root)
        }

    Returns:
        200: {"status": "deleted", "plan": {...}, "orphaned_content": [...]}
        400: Unknown resolution or invalid target
        404: Category or target not found
        409: Resolution required, or target would create a cycle
    """
    data = request.get_json(silent=True)
    if data is None:
        data = {}
    if not isinstance(data, dict):
        return jsonify({'error': 'Request body must be a JSON object'}), 400
    resolution = CategoryService.parse_resolution(data.get('resolution'))

    result = CategoryService.delete_category(
        category_id,
        resolution=resolution,
        new_parent_id=data.get('parent_id') or None,
    )
    if result['status'] == 'resolution_required':
        return jsonify(result), 409
    return jsonify(result), 200


@categories_bp.route('/<category_id>/children', methods=['GET'])
def list_children(category_id):
    children = CategoryService.list_children(category_id)
    return jsonify({'children': children, 'count': len(children)}), 200


@categories_bp.route('/<category_id>/reassignment-targets', methods=['GET'])
def get_reassignment_targets(category_id):
    targets = CategoryService.reassignment_targets(category_id)
    return jsonify({'targets': targets, 'count': len(targets)}), 200


@categories_bp.route('/<category_id>/feed', methods=['GET'])
def get_direct_feed(category_id):
    """Posts tagged exactly at this category, newest first. Supports ?month=."""
    return jsonify(CategoryService.direct_feed(category_id, month=_month_arg())), 200
