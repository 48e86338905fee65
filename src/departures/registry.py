import asyncio
from abc import ABC, abstractmethod
from logging import getLogger

from sqlalchemy.exc import SQLAlchemyError

from .db import NotifyChannel, create_all
from .db.bindings import SNOWFLAKE_MAX
from .errors import BindingNotFound, StorageFailure

logger = getLogger(__name__)


def _check_id(name, value):
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f'{name} must be an int, not {type(value).__name__}.')

    if not 0 < value <= SNOWFLAKE_MAX:
        raise ValueError(f'{name} {value} is out of range.')


class Registry(ABC):
    """
    Authoritative guild -> notification channel mapping.

    Holds at most one channel per guild.
    ``set`` replaces the previous binding atomically,
    so concurrent writers never produce a mixed result.
    """

    async def initialize(self):
        """Prepare the backing store. Must run before any event is served."""

    @abstractmethod
    async def get(self, guild_id: int) -> int:
        """
        Look up the channel bound to a guild.

        Raises:
            departures.errors.BindingNotFound: Guild has no binding.
            departures.errors.StorageFailure: Backing store failed.
        """

    @abstractmethod
    async def set(self, guild_id: int, channel_id: int):
        """
        Bind a guild to a channel, replacing any previous binding.

        Raises:
            departures.errors.StorageFailure: Backing store failed.
        """


class MemoryRegistry(Registry):
    """Volatile registry. Bindings are lost on restart."""

    def __init__(self):
        self._bindings = {}
        self._lock = asyncio.Lock()

    async def get(self, guild_id):
        _check_id('guild_id', guild_id)

        async with self._lock:
            try:
                return self._bindings[guild_id]
            except KeyError:
                raise BindingNotFound(guild_id) from None

    async def set(self, guild_id, channel_id):
        _check_id('guild_id', guild_id)
        _check_id('channel_id', channel_id)

        async with self._lock:
            self._bindings[guild_id] = channel_id


class SqlRegistry(Registry):
    """
    Durable registry on top of a SQLAlchemy engine.

    Blocking database work is pushed to a worker thread
    and bounded by ``timeout`` seconds.
    A write that times out may still commit afterwards,
    later writes are held back until its thread has finished.
    """

    def __init__(self, engine, sessionmaker, timeout=None):
        self._engine = engine
        self._sessionmaker = sessionmaker
        self._timeout = timeout
        self._write_lock = asyncio.Lock()

    async def _wait(self, task):
        # Shielded, a timeout must not orphan the task while its thread keeps running
        try:
            return await asyncio.wait_for(asyncio.shield(task), self._timeout)
        except asyncio.TimeoutError as e:
            raise StorageFailure(f'Database call timed out after {self._timeout} seconds.') from e
        except SQLAlchemyError as e:
            raise StorageFailure(f'Database error: {e}') from e

    async def _run(self, func, *args):
        return await self._wait(asyncio.ensure_future(asyncio.to_thread(func, *args)))

    def _finish_late_write(self, task):
        self._write_lock.release()

        if task.cancelled():
            return

        exc = task.exception()
        if exc:
            logger.error('Timed out write failed in the background.', exc_info=exc)
        else:
            logger.warning('Timed out write committed in the background.')

    async def initialize(self):
        logger.info(f'Creating database schema on {self._engine.url!r} if missing.')
        await self._run(create_all, self._engine)

    def _get(self, guild_id):
        with self._sessionmaker() as session:
            db_channel = session.get(NotifyChannel, guild_id)
            return db_channel.channel_id if db_channel else None

    def _set(self, guild_id, channel_id):
        # Delete and insert share one transaction, the guild is never left unbound
        with self._sessionmaker.begin() as session:
            session.query(NotifyChannel) \
                .filter_by(guild_id=guild_id) \
                .delete(synchronize_session=False)
            session.add(NotifyChannel(guild_id=guild_id, channel_id=channel_id))

    async def get(self, guild_id):
        _check_id('guild_id', guild_id)

        try:
            channel_id = await self._run(self._get, guild_id)
        except ValueError as e:
            raise StorageFailure(f'Corrupt binding stored for guild {guild_id}.') from e

        if channel_id is None:
            raise BindingNotFound(guild_id)

        return channel_id

    async def set(self, guild_id, channel_id):
        _check_id('guild_id', guild_id)
        _check_id('channel_id', channel_id)

        await self._write_lock.acquire()
        task = asyncio.ensure_future(asyncio.to_thread(self._set, guild_id, channel_id))
        try:
            await self._wait(task)
        finally:
            # A timed out write may still commit, the next writer waits for its thread
            if task.done():
                self._write_lock.release()
            else:
                task.add_done_callback(self._finish_late_write)

        logger.debug(f'Bound guild {guild_id} to channel {channel_id}.')
