"""
Post Model for BrandHub.

A content calendar entry. Each post is tagged against the taxonomy with
up to three category ids, one per level. The ids are plain strings with
no foreign key, so posts survive the deletion of the categories they
reference.
"""

from datetime import datetime, timezone
import uuid

from brandhub.models import db, DateTimeUTC
from brandhub.services.taxonomy import ContentEntry


class Post(db.Model):
    """
    SQLAlchemy model representing a scheduled or published post.

    Attributes:
        id: Unique UUID identifier
        date: Publish date as 'YYYY-MM-DD'
        month: Month name used by the calendar view
        main_category_id: Main category tag
        sub_category_id: Sub-category tag
        brand_type_id: Optional brand / type tag
        product_model: Product models featured, comma separated
        content_type: Static, Carousel, Reel, Video or Story
        content_tag: Offer, Launch, Review, etc.
        campaign_name: Optional campaign the post belongs to
        status: Planned, Designed or Published
        notes: Free-form notes
        asset_link: Link to the creative asset
        created_at: Timestamp when the post was created
    """

    __tablename__ = 'posts'

    id = db.Column(db.String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    date = db.Column(db.String(10), nullable=False, index=True)
    month = db.Column(db.String(20), nullable=True)

    main_category_id = db.Column(db.String(36), nullable=True, index=True)
    sub_category_id = db.Column(db.String(36), nullable=True, index=True)
    brand_type_id = db.Column(db.String(36), nullable=True, index=True)

    product_model = db.Column(db.String(500), nullable=True)
    content_type = db.Column(db.String(20), default='Static')
    content_tag = db.Column(db.String(50), nullable=True)
    campaign_name = db.Column(db.String(200), nullable=True)
    status = db.Column(db.String(20), default='Planned')
    notes = db.Column(db.Text, nullable=True)
    asset_link = db.Column(db.String(500), nullable=True)

    created_at = db.Column(DateTimeUTC, default=lambda: datetime.now(timezone.utc))

    @property
    def product_models(self):
        if not self.product_model:
            return []
        models = (model.strip() for model in self.product_model.split(','))
        return [model for model in models if model]

    def to_entry(self) -> ContentEntry:
        """Convert to the engine's content entry, carrying display fields along."""
        return ContentEntry(
            id=self.id,
            main_category_id=self.main_category_id,
            sub_category_id=self.sub_category_id,
            brand_type_id=self.brand_type_id,
            date=self.date,
            payload={
                'month': self.month,
                'product_model': self.product_model,
                'product_models': self.product_models,
                'content_type': self.content_type,
                'content_tag': self.content_tag,
                'campaign_name': self.campaign_name,
                'status': self.status,
                'notes': self.notes,
                'asset_link': self.asset_link,
            },
        )

    def __repr__(self):
        return f'<Post {self.date} {self.product_model}>'
