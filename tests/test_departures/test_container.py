from dependency_injector.providers import Object
from pytest import fixture, mark, raises
from sqlalchemy import inspect

from departures.container import RootContainer, _create_engine_wrapper, start
from departures.errors import StorageFailure
from departures.processor import CommandProcessor
from departures.registry import MemoryRegistry, SqlRegistry


def test_create_engine_wrapper(mocker):
    create_engine = mocker.patch("departures.container.create_engine")
    connect_string = "foo"
    opts = {"a": 1, "b": 2}
    ret = _create_engine_wrapper(connect_string, opts)

    assert ret is create_engine.return_value
    create_engine.assert_called_once_with(connect_string, **opts)


@fixture
def bot(mocker):
    bot = mocker.MagicMock()
    bot.start = mocker.AsyncMock()
    bot.add_cog = mocker.AsyncMock()
    return bot


@fixture
def root(bot, request, tmp_path):
    config = {
        "token": "secret",
        "cmd_prefix": "!abs ",
        "registry": "memory",
        "call_timeout": 5.0,
        "default_game": None,
        "db": {"connect_string": f"sqlite:///{tmp_path / 'channels.db'}", "options": {}},
    }
    config.update(getattr(request, "param", {}))

    root = RootContainer()
    root.config.from_dict(config)
    root.bot.override(Object(bot))
    return root


def test_memory_registry(root):
    assert isinstance(root.registry(), MemoryRegistry)
    assert root.registry() is root.registry()


@mark.parametrize(["root"], [[{"registry": "sql"}]], indirect=True)
def test_sql_registry(root):
    registry = root.registry()

    assert isinstance(registry, SqlRegistry)
    assert registry._engine is root.engine()
    assert registry._timeout == 5.0


def test_processor(root, bot):
    processor = root.processor()

    assert isinstance(processor, CommandProcessor)
    assert processor.prefix == "!abs "
    assert processor._registry is root.registry()
    assert processor._gateway._client is bot


@mark.asyncio
class TestStart:
    async def test_start(self, root, bot, mocker):
        load_cogs = mocker.patch("departures.container.load_cogs", new_callable=mocker.AsyncMock)

        await start(root)

        load_cogs.assert_called_once_with(root)
        bot.start.assert_called_once_with("secret")

    @mark.parametrize(["root"], [[{"registry": "sql"}]], indirect=True)
    async def test_creates_schema(self, root, mocker):
        mocker.patch("departures.container.load_cogs", new_callable=mocker.AsyncMock)

        await start(root)

        assert inspect(root.engine()).has_table("notify_channel")

    async def test_storage_failure_aborts(self, root, bot, mocker):
        load_cogs = mocker.patch("departures.container.load_cogs", new_callable=mocker.AsyncMock)
        mocker.patch.object(
            root.registry(), "initialize", side_effect=StorageFailure("read-only file system")
        )

        with raises(StorageFailure):
            await start(root)

        load_cogs.assert_not_called()
        bot.start.assert_not_called()
