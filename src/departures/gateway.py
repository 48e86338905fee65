from asyncio import TimeoutError, wait_for
from logging import getLogger

from aiohttp import ClientError
from discord import DiscordException

from .errors import TargetUnreachable, UpstreamFailure

# discord.py passes connection-level errors through unwrapped
TRANSPORT_ERRORS = (DiscordException, ClientError, OSError)

logger = getLogger(__name__)


class Gateway:
    """
    Narrow view of the Discord client used by the command processor.

    Every call is bounded by ``timeout`` seconds.
    Expiry is reported the same way as the corresponding API failure.
    """

    def __init__(self, client, timeout=None):
        self._client = client
        self._timeout = timeout

    async def send(self, channel_id: int, text: str):
        """
        Post a message into a channel, identified by ID only.

        Raises:
            departures.errors.TargetUnreachable: Channel is missing, inaccessible, or the call timed out.
        """
        channel = self._client.get_partial_messageable(channel_id)
        try:
            return await wait_for(channel.send(text), self._timeout)
        except TimeoutError as e:
            raise TargetUnreachable(channel_id, 'timed out') from e
        except TRANSPORT_ERRORS as e:
            raise TargetUnreachable(channel_id, str(e)) from e

    async def reply(self, message, text: str):
        """
        Reply to a message, mentioning its author.

        Raises:
            departures.errors.TargetUnreachable: Reply could not be delivered.
        """
        try:
            return await wait_for(message.reply(text, mention_author=True), self._timeout)
        except TimeoutError as e:
            raise TargetUnreachable(message.channel.id, 'timed out') from e
        except TRANSPORT_ERRORS as e:
            raise TargetUnreachable(message.channel.id, str(e)) from e

    async def _fetch_channels(self, guild_id):
        guild = self._client.get_guild(guild_id)
        if guild is None:
            guild = await self._client.fetch_guild(guild_id)

        return {channel.id for channel in await guild.fetch_channels()}

    async def list_channels(self, guild_id: int):
        """
        Get the IDs of all channels currently present in a guild.

        Raises:
            departures.errors.UpstreamFailure: Discord could not be queried.
        """
        try:
            return await wait_for(self._fetch_channels(guild_id), self._timeout)
        except TimeoutError as e:
            raise UpstreamFailure(f'Listing channels of guild {guild_id} timed out.') from e
        except TRANSPORT_ERRORS as e:
            raise UpstreamFailure(f'Error getting channels for guild {guild_id}: {e}') from e
