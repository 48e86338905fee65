from logging import getLogger

from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import DependenciesContainer, Singleton

from .relay import Relay

logger = getLogger(__name__)
cog_names = (
    "relay",
)


class CogsContainer(DeclarativeContainer):
    root = DependenciesContainer()

    relay = Singleton(Relay, processor=root.processor)


async def load_cogs(root):
    bot = root.bot()
    cogs = CogsContainer(root=root)

    for cog_name in cog_names:
        cog_provider = getattr(cogs, cog_name)
        await bot.add_cog(cog_provider())
        logger.debug(f"Loaded cog {cog_name}.")
