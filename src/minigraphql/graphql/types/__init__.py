"""GraphQL object type definitions."""
