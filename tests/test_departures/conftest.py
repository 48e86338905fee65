import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from departures.db import create_all


@pytest.fixture
def engine(tmp_path):
    # File database, in-memory SQLite is per connection and thus per thread
    engine = create_engine(f"sqlite:///{tmp_path / 'channels.db'}")
    create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine)


@pytest.fixture
def gateway(mocker):
    """Stand-in for :class:`departures.gateway.Gateway` with awaitable calls."""
    gateway = mocker.Mock()
    gateway.send = mocker.AsyncMock()
    gateway.reply = mocker.AsyncMock()
    gateway.list_channels = mocker.AsyncMock(return_value=set())

    return gateway
