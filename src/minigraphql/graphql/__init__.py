"""
GraphQL layer: schema definitions, resolvers and HTTP routers
"""
