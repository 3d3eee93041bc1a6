"""
BrandHub Routes Package

Blueprint registration for API route modules:
- Categories: Taxonomy management, delete resolution and insights
"""

# Import Categories blueprint from its module
from brandhub.routes.categories import categories_bp


__all__ = [
    'categories_bp',
]
