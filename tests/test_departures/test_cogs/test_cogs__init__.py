from dependency_injector.providers import Object
from pytest import mark

from departures.cogs import cog_names, load_cogs
from departures.cogs.relay import Relay
from departures.container import RootContainer


@mark.asyncio
async def test_load_cogs(mocker):
    bot = mocker.Mock()
    bot.add_cog = mocker.AsyncMock()
    processor = mocker.Mock()

    root = RootContainer()
    root.bot.override(Object(bot))
    root.processor.override(Object(processor))

    await load_cogs(root)

    assert bot.add_cog.call_count == len(cog_names)
    (cog,), _ = bot.add_cog.call_args
    assert isinstance(cog, Relay)
    assert cog._processor is processor
