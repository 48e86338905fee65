from sqlalchemy import Column, String
from sqlalchemy.types import TypeDecorator

from .base import Base

SNOWFLAKE_MAX = 2 ** 64 - 1


class Snowflake(TypeDecorator):
    """
    Unsigned 64-bit Discord ID, stored as decimal text.

    ``BigInteger`` is signed on every supported backend,
    which truncates IDs above 2**63 - 1.
    """

    impl = String(20)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None

        value = int(value)
        if not 0 < value <= SNOWFLAKE_MAX:
            raise ValueError(f'{value} is not a valid snowflake.')

        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None

        return int(value)


class NotifyChannel(Base):
    __tablename__ = 'notify_channel'

    guild_id = Column(Snowflake, primary_key=True, autoincrement=False)
    channel_id = Column(Snowflake, nullable=False)

    def __repr__(self):
        return f'<NotifyChannel guild_id={self.guild_id} channel_id={self.channel_id}>'
