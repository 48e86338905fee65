from logging import getLogger

from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Selector, Singleton
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker as _sessionmaker

from .bot import Bot
from .cogs import load_cogs
from .gateway import Gateway
from .processor import CommandProcessor
from .registry import MemoryRegistry, SqlRegistry

logger = getLogger(__name__)


def _create_engine_wrapper(connect_string, options):
    return create_engine(connect_string, **options)


class RootContainer(DeclarativeContainer):
    """Application IoC container"""

    config = Configuration("config")

    # Remote services
    engine = Singleton(
        _create_engine_wrapper, config.db.connect_string, config.db.options
    )

    sessionmaker = Singleton(_sessionmaker, bind=engine)

    registry = Selector(
        config.registry,
        sql=Singleton(
            SqlRegistry,
            engine=engine,
            sessionmaker=sessionmaker,
            timeout=config.call_timeout,
        ),
        memory=Singleton(MemoryRegistry),
    )

    bot = Singleton(
        Bot,
        command_prefix=config.cmd_prefix,
        default_game=config.default_game,
    )

    gateway = Singleton(Gateway, client=bot, timeout=config.call_timeout)

    processor = Singleton(
        CommandProcessor,
        registry=registry,
        gateway=gateway,
        prefix=config.cmd_prefix,
    )


async def start(root):
    """
    Prepare storage, load cogs, and connect to Discord.

    Storage is initialized before the bot connects,
    so no event is ever served without a usable registry.

    Raises:
        departures.errors.StorageFailure: Schema could not be created.
    """
    await root.registry().initialize()

    bot = root.bot()
    async with bot:
        logger.info("Loading cogs.")
        await load_cogs(root)
        logger.info("Finished loading cogs.")

        await bot.start(root.config.token())
