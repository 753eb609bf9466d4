from serenite.database.async_db import (
    dispose_engine,
    get_async_engine,
    get_session_factory,
)
from serenite.database.base import Base

__all__ = [
    "Base",
    "dispose_engine",
    "get_async_engine",
    "get_session_factory",
]
