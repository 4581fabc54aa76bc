"""Resolver package for the GraphQL schemas.

Every resolver takes ``(parent, args, context)`` where ``context`` is the
request context dict built by the HTTP layer; ``context["store"]`` is the
record store of the service being queried.
"""

# Intentionally empty; functions are defined in sibling modules.
