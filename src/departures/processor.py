import re
from enum import Enum, auto
from logging import getLogger
from typing import Optional

from .db.bindings import SNOWFLAKE_MAX
from .errors import (
    BindingNotFound, InvalidChannelId, MalformedCommand, StorageFailure,
    TargetUnreachable, UpstreamFailure, UserInputError
)
from .utils import format_message

logger = getLogger(__name__)

SUBCOMMAND = 'notifchan '
CONFIRMATION = 'This is now the channel that will be notified when someone leaves.'
UNREACHABLE = "I can't find or don't have access to that channel"
NO_GUILD = 'Command cannot be used in private message channels.'
INTERNAL_ERROR = 'An error occurred while executing the command.'
ANNOUNCEMENT = '{name} ({id}) has left the server'

# Plain ASCII digits only, no sign, no whitespace
_channel_id_re = re.compile(r'[0-9]+')


class Outcome(Enum):
    # Command path
    IGNORED = auto()
    MALFORMED = auto()
    INVALID_ARGUMENT = auto()
    NO_GUILD = auto()
    PROBE_FAILED = auto()
    STORAGE_FAILED = auto()
    ACCEPTED = auto()

    # Notification path
    NOT_BOUND = auto()
    UPSTREAM_FAILED = auto()
    STALE_CHANNEL = auto()
    DELIVERY_FAILED = auto()
    ANNOUNCED = auto()


def parse_set_channel(content: str, prefix: str) -> Optional[int]:
    """
    Parse a "set notification channel" command.

    Args:
        content (str): Raw message text.
        prefix (str): Command prefix, including any trailing space.

    Returns:
        typing.Optional[int]: Channel ID to bind, or None if the text is not a command at all.

    Raises:
        departures.errors.MalformedCommand: Prefix present, but not followed by the subcommand.
        departures.errors.InvalidChannelId: Argument is not a non-zero unsigned 64-bit integer.
    """
    if not content.startswith(prefix):
        return None

    content = content[len(prefix):]
    if not content.startswith(SUBCOMMAND):
        raise MalformedCommand(prefix)

    literal = content[len(SUBCOMMAND):]
    if not _channel_id_re.fullmatch(literal):
        raise InvalidChannelId(literal)

    channel_id = int(literal)
    if not 0 < channel_id <= SNOWFLAKE_MAX:
        raise InvalidChannelId(literal)

    return channel_id


class CommandProcessor:
    """
    Drives binding changes from chat commands and announces departures.

    Neither handler lets an exception escape,
    every branch ends in an :class:`Outcome`.
    """

    def __init__(self, registry, gateway, prefix):
        self._registry = registry
        self._gateway = gateway
        self.prefix = prefix

    async def _reply(self, message, text):
        try:
            await self._gateway.reply(message, text)
        except TargetUnreachable:
            logger.exception(f"Couldn't reply to message {message.id}.")

    async def handle_message(self, message) -> Outcome:
        if message.author.bot:
            return Outcome.IGNORED

        try:
            channel_id = parse_set_channel(message.content, self.prefix)
        except UserInputError as e:
            logger.info(f'Rejected command: {format_message(message)} ({e})')
            await self._reply(message, str(e))
            return Outcome.MALFORMED if isinstance(e, MalformedCommand) else Outcome.INVALID_ARGUMENT

        if channel_id is None:
            return Outcome.IGNORED

        logger.info(format_message(message))

        if message.guild is None:
            await self._reply(message, NO_GUILD)
            return Outcome.NO_GUILD

        guild_id = message.guild.id

        # A channel of another guild would pass the probe but never receive announcements
        try:
            channel_ids = await self._gateway.list_channels(guild_id)
        except UpstreamFailure:
            logger.warning(f"Couldn't list channels of guild {guild_id}.", exc_info=True)
            await self._reply(message, UNREACHABLE)
            return Outcome.PROBE_FAILED

        if channel_id not in channel_ids:
            logger.warning(f'Channel {channel_id} is not part of guild {guild_id}.')
            await self._reply(message, UNREACHABLE)
            return Outcome.PROBE_FAILED

        # Probe by sending the confirmation, proves the channel is writable
        try:
            await self._gateway.send(channel_id, CONFIRMATION)
        except TargetUnreachable:
            logger.warning(
                f"Couldn't send confirmation to channel {channel_id} for guild {guild_id}.",
                exc_info=True
            )
            await self._reply(message, UNREACHABLE)
            return Outcome.PROBE_FAILED

        try:
            await self._registry.set(guild_id, channel_id)
        except StorageFailure:
            logger.exception(f'Failed to bind guild {guild_id} to channel {channel_id}.')
            await self._reply(message, INTERNAL_ERROR)
            return Outcome.STORAGE_FAILED

        logger.info(f'Guild {guild_id} now notifies channel {channel_id}.')
        return Outcome.ACCEPTED

    async def handle_member_removal(self, guild_id: int, user) -> Outcome:
        logger.debug(f'Member {user.id} removed from guild {guild_id}.')

        try:
            channel_id = await self._registry.get(guild_id)
        except BindingNotFound:
            logger.warning(f'Member removal in guild {guild_id} dropped, no notification channel bound.')
            return Outcome.NOT_BOUND
        except StorageFailure:
            logger.exception(f'Member removal in guild {guild_id} dropped, lookup failed.')
            return Outcome.STORAGE_FAILED

        try:
            channel_ids = await self._gateway.list_channels(guild_id)
        except UpstreamFailure:
            logger.exception(f'Member removal in guild {guild_id} dropped.')
            return Outcome.UPSTREAM_FAILED

        if channel_id not in channel_ids:
            logger.warning(
                f"Member removal in guild {guild_id} dropped, "
                f"guild doesn't have a channel {channel_id} anymore."
            )
            return Outcome.STALE_CHANNEL

        content = ANNOUNCEMENT.format(name=user.display_name, id=user.id)
        try:
            await self._gateway.send(channel_id, content)
        except TargetUnreachable:
            logger.exception(
                f"Couldn't send leave message to channel {channel_id} in guild {guild_id}."
            )
            return Outcome.DELIVERY_FAILED

        logger.debug(f'Leave message sent to guild {guild_id}.')
        return Outcome.ANNOUNCED
