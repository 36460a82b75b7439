"""Admin API handlers.

Handler functions for the rate limit control surface.
Routes are registered via ROUTE_REGISTRY in routes/registry.py.
All handlers require the admin role; mutating handlers also require
the double-submit CSRF token.
"""
