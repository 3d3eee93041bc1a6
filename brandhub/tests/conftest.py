"""
Pytest configuration and fixtures for BrandHub tests.

This module provides shared fixtures for testing:
- Flask application with test configuration
- In-memory SQLite database
- Test client
- A sample Electronics > Audio > Sonos taxonomy with posts
- Engine-only snapshots (no Flask)
"""

import os
import sys

import pytest

# Add project root to path for brandhub package imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from brandhub.app import create_app
from brandhub.models import db, Category, Post
from brandhub.services.taxonomy import CategoryTree, ContentEntry, TaxonomyNode


@pytest.fixture(scope='function')
def app():
    """
    Create a Flask application configured for testing.

    Yields:
        Flask application instance with clean tables
    """
    application = create_app(config_name='testing')
    application.config['TESTING'] = True

    with application.app_context():
        db.create_all()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create a test client for the Flask application."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Provide a database session for testing."""
    with app.app_context():
        yield db.session


@pytest.fixture(scope='function')
def sample_taxonomy(db_session):
    """
    Create the Electronics > Audio > Sonos taxonomy plus a second branch.

    Layout:
        Electronics (main)
            Audio (sub)
                Sonos (brand)
                Bose (brand)
            Video (sub)
        Components (main)
            Graphic Cards (sub)

    Returns:
        Dict of Category instances keyed by lowercase name
    """
    rows = [
        Category(id='electronics', name='Electronics', parent_id=None),
        Category(id='audio', name='Audio', parent_id='electronics'),
        Category(id='sonos', name='Sonos', parent_id='audio'),
        Category(id='bose', name='Bose', parent_id='audio'),
        Category(id='video', name='Video', parent_id='electronics'),
        Category(id='components', name='Components', parent_id=None),
        Category(id='gpu', name='Graphic Cards', parent_id='components'),
    ]
    db_session.add_all(rows)
    db_session.commit()
    return {
        'electronics': rows[0],
        'audio': rows[1],
        'sonos': rows[2],
        'bose': rows[3],
        'video': rows[4],
        'components': rows[5],
        'gpu': rows[6],
    }


@pytest.fixture(scope='function')
def sample_posts(db_session, sample_taxonomy):
    """
    Create posts tagged at different depths.

    - p1: Sonos (brand), 2025-03
    - p2: Sonos (brand), 2025-04
    - p3: Audio (sub, no brand), 2025-03
    - p4: Electronics (main only), 2025-03
    - p5: Graphic Cards (sub), 2025-03
    """
    posts = [
        Post(id='p1', date='2025-03-02', main_category_id='electronics',
             sub_category_id='audio', brand_type_id='sonos', product_model='Era 100'),
        Post(id='p2', date='2025-04-10', main_category_id='electronics',
             sub_category_id='audio', brand_type_id='sonos', product_model='Arc'),
        Post(id='p3', date='2025-03-15', main_category_id='electronics',
             sub_category_id='audio', brand_type_id='', product_model='Speakers'),
        Post(id='p4', date='2025-03-20', main_category_id='electronics',
             sub_category_id='', brand_type_id=None, product_model='Roundup'),
        Post(id='p5', date='2025-03-21', main_category_id='components',
             sub_category_id='gpu', brand_type_id=None, product_model='RTX 4070'),
    ]
    db_session.add_all(posts)
    db_session.commit()
    return posts


@pytest.fixture
def scenario_tree():
    """Engine-only tree: Electronics > Audio > Sonos."""
    return CategoryTree([
        TaxonomyNode(id='electronics', name='Electronics', parent_id=None),
        TaxonomyNode(id='audio', name='Audio', parent_id='electronics'),
        TaxonomyNode(id='sonos', name='Sonos', parent_id='audio'),
    ])


@pytest.fixture
def scenario_entries():
    """One entry tagged at the Sonos brand."""
    return [
        ContentEntry(
            id='e1',
            main_category_id='electronics',
            sub_category_id='audio',
            brand_type_id='sonos',
            date='2025-03-02',
        ),
    ]
