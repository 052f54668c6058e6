from .base import Base
from .session import engine, async_session_factory, get_db_session, session_scope
from .models import ParcelModel

__all__ = [
    "Base",
    "engine",
    "async_session_factory",
    "get_db_session",
    "session_scope",
    "ParcelModel",
]
