"""Root query definitions."""
