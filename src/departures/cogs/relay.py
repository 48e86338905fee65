from discord import Message, RawMemberRemoveEvent
from discord.ext.commands import Cog


class Relay(Cog):
    """Routes gateway events into the command processor."""

    def __init__(self, processor):
        self._processor = processor

    @Cog.listener()
    async def on_message(self, message: Message):
        await self._processor.handle_message(message)

    # Raw variant fires for members missing from the cache as well
    @Cog.listener()
    async def on_raw_member_remove(self, payload: RawMemberRemoveEvent):
        await self._processor.handle_member_removal(payload.guild_id, payload.user)
