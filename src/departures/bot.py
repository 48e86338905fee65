from logging import getLogger

from discord import Game, Intents
from discord.ext.commands import Bot as BaseBot

logger = getLogger(__name__)
intents = Intents.default()
intents.members = True
intents.message_content = True


class Bot(BaseBot):
    def __init__(self, *args, default_game, **kwargs):
        activity = None
        if default_game:
            activity = Game(name=default_game)

        super().__init__(
            *args,
            **kwargs,
            description='departures',
            activity=activity,
            help_command=None,
            intents=intents
        )

    async def on_ready(self):
        logger.info(f'Logged into Discord as {self.user}')

    async def on_message(self, msg):
        # Commands are parsed by the Relay cog, skip discord.py's own dispatch
        pass

    async def on_error(self, event, *args, **kwargs):
        logger.exception(f'An exception occured while handling event "{event}".')
