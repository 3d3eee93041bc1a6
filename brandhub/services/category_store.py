"""
Category store for BrandHub.

The persistence collaborator of the taxonomy engine. Reads full
snapshots of categories and posts, and writes one record per call.
Each write commits on its own, so a multi-record cascade is a sequence
of independent calls with no transaction around it.
"""

import logging
from typing import List

from sqlalchemy.exc import SQLAlchemyError

from brandhub.models import db, Category, Post
from brandhub.services.taxonomy import ContentEntry, TaxonomyNode

logger = logging.getLogger(__name__)


class CategoryStoreError(Exception):
    """Raised when a store call fails at the database."""
    pass


class CategoryStore:
    """Reads and writes taxonomy records through the Flask-SQLAlchemy session."""

    @classmethod
    def fetch_categories(cls) -> List[TaxonomyNode]:
        """All categories ordered by name."""
        rows = Category.query.order_by(Category.name).all()
        return [row.to_node() for row in rows]

    @classmethod
    def fetch_content_entries(cls) -> List[ContentEntry]:
        """All posts, newest first, as content entries."""
        rows = Post.query.order_by(Post.date.desc()).all()
        return [row.to_entry() for row in rows]

    @classmethod
    def upsert_category(cls, node: TaxonomyNode) -> None:
        """Insert or replace a category by id."""
        try:
            db.session.merge(
                Category(id=node.id, name=node.name, parent_id=node.parent_id)
            )
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to save category {node.id}: {e}")
            raise CategoryStoreError(f"Failed to save category {node.id}") from e

    @classmethod
    def delete_category_by_id(cls, category_id: str) -> None:
        """Delete one category. Missing ids are a no-op."""
        try:
            Category.query.filter_by(id=category_id).delete()
            db.session.commit()
        except SQLAlchemyError as e:
            db.session.rollback()
            logger.error(f"Failed to delete category {category_id}: {e}")
            raise CategoryStoreError(f"Failed to delete category {category_id}") from e
