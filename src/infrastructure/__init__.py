"""Infrastructure layer - adapters behind the domain protocols.

Structure:
- persistence/: SQLAlchemy models and repositories for configs, history,
  usage samples and reference data
- rate_limit/: counter stores (Redis, in-memory), key strategies, the
  effective config resolver and the enforcer
- events/: in-process event bus and logging handler
- logging/: structlog console adapter
- security/: JWT validation for admin endpoints

The domain layer never imports from here.
"""
