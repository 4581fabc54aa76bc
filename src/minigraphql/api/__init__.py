"""
HTTP API for the minigraphql services
"""
