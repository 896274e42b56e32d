# Models register themselves on Base.metadata when their module is imported;
# alembic/env.py and the routers import them.

from shortages.core.db.base import Base, BaseModel

# Export for easy importing
__all__ = [
    "Base",
    "BaseModel",
]
