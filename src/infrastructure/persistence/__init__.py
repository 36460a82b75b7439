"""Database persistence.

Declarative base, async engine/session management and the repositories
for rate limit configs, change history, usage samples and reference data.
"""

from src.infrastructure.persistence.base import BaseModel
from src.infrastructure.persistence.database import Database

__all__ = [
    "BaseModel",
    "Database",
]
