def format_message(msg):
    """
    Format a :class:`discord.Message` for convenient output to e.g. loggers.

    Args:
        msg (discord.Message): Message to format.

    Returns:
        str: Input message formatted as a string.
    """
    author = f'{msg.author.name} ({msg.author.id})'

    if msg.guild is None:
        return f'[DM] {author}: {msg.content}'

    # Uncached channels arrive as PartialMessageable, which has no name
    channel_name = getattr(msg.channel, 'name', None) or '?'
    return f'[{msg.guild.name} ({msg.guild.id}) -> #{channel_name} ({msg.channel.id})] ' \
           f'{author}: {msg.content}'
