"""BrandHub test suite."""
