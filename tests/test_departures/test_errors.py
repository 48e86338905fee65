from departures.errors import (
    BindingNotFound, InvalidChannelId, MalformedCommand, RelayError, TargetUnreachable,
    UserInputError
)


def test_malformed_command():
    ex = MalformedCommand("!abs ")
    assert isinstance(ex, UserInputError)
    assert str(ex) == "Bad command format, use: `!abs notifchan <channel_id>`"
    assert ex.prefix == "!abs "


def test_invalid_channel_id():
    ex = InvalidChannelId("abc")
    assert isinstance(ex, UserInputError)
    assert str(ex) == "channel id invalid"
    assert ex.literal == "abc"


def test_target_unreachable():
    ex = TargetUnreachable(123, "Missing Access")
    assert ex.channel_id == 123
    assert str(ex) == "Channel 123 is unreachable: Missing Access"


def test_target_unreachable_no_reason():
    assert str(TargetUnreachable(123)) == "Channel 123 is unreachable"


def test_binding_not_found():
    ex = BindingNotFound(42)
    assert isinstance(ex, RelayError)
    assert ex.guild_id == 42
    assert "42" in str(ex)
