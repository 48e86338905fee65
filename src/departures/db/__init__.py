from .base import Base
from .bindings import NotifyChannel, Snowflake

__all__ = [
    'Base',
    'NotifyChannel',
    'Snowflake',
    'create_all',
]


def create_all(engine):
    """Create every table that does not exist yet."""
    Base.metadata.create_all(engine)
