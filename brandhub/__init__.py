"""BrandHub: marketing-operations dashboard service."""

__version__ = '0.1.0'
