"""
Category Model for BrandHub.

Represents one node of the content taxonomy. The hierarchy is stored
only as a nullable parent pointer; the level (Main, Sub, Brand) is
derived from the parent chain by the taxonomy engine.
"""

from datetime import datetime, timezone
import uuid

from brandhub.models import db, DateTimeUTC
from brandhub.services.taxonomy import TaxonomyNode


class Category(db.Model):
    """
    SQLAlchemy model representing a taxonomy category.

    Examples:
    - "Electronics" > "Audio" > "Sonos"
    - "Components" > "Graphic Cards"

    Attributes:
        id: String identifier (UUID for categories created here)
        name: Display label, not unique
        parent_id: ID of the parent category (None for Main categories)
        created_at: Timestamp when the category was created
        updated_at: Timestamp of last update
    """

    __tablename__ = 'categories'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = db.Column(db.String(200), nullable=False)

    # No foreign key: dangling parents are tolerated and read as Main
    parent_id = db.Column(db.String(36), nullable=True, index=True)

    created_at = db.Column(DateTimeUTC, default=lambda: datetime.now(timezone.utc))
    updated_at = db.Column(
        DateTimeUTC, nullable=True, onupdate=lambda: datetime.now(timezone.utc)
    )

    def to_node(self) -> TaxonomyNode:
        """Convert to the engine's snapshot representation."""
        return TaxonomyNode(id=self.id, name=self.name, parent_id=self.parent_id)

    def __repr__(self):
        return f'<Category {self.name}>'
