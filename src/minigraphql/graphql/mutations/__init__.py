"""Root mutation definitions."""
