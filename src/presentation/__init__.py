"""Presentation layer - FastAPI routers and middleware.

Structure:
- routers/system.py: root, health and config endpoints
- routers/api/v1/: admin API generated from the route registry
- routers/api/middleware/: trace id, auth, CSRF and rate limit enforcement

Routers dispatch commands/queries and map Result values to HTTP responses.
"""
