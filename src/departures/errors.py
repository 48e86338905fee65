class RelayError(Exception):
    pass


class UserInputError(RelayError):
    """Bad command text. The message is sent back to the user verbatim."""


class MalformedCommand(UserInputError):
    def __init__(self, prefix):
        self.prefix = prefix
        super().__init__(f'Bad command format, use: `{prefix}notifchan <channel_id>`')


class InvalidChannelId(UserInputError):
    def __init__(self, literal):
        self.literal = literal
        super().__init__('channel id invalid')


class TargetUnreachable(RelayError):
    def __init__(self, channel_id, reason=None):
        self.channel_id = channel_id
        self.reason = reason
        m = f'Channel {channel_id} is unreachable'
        if reason:
            m += f': {reason}'
        super().__init__(m)


class BindingNotFound(RelayError):
    def __init__(self, guild_id):
        self.guild_id = guild_id
        super().__init__(f'No notification channel bound for guild {guild_id}.')


class UpstreamFailure(RelayError):
    pass


class StorageFailure(RelayError):
    pass


class ConfigError(RelayError):
    pass
