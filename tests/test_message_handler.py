import pytest

from vidscribe.message_handler import MediaMessage, normalize_chat_id


def test_message_immutable():
    msg = MediaMessage(sender="123", file_id="f", timestamp=1)

    with pytest.raises(Exception):
        msg.sender = "999"


def test_record_round_trip():
    msg = MediaMessage(sender="123", file_id="f", timestamp=1, filename="x.mp4", file_size=10)
    assert MediaMessage.from_record(msg.to_record()) == msg


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("123456789", "123456789"),
        (" 123 456 ", "123456"),
        ("-100987", "-100987"),
        ("⁦+972 54-683⁩", "97254683"),
        ("", ""),
    ],
)
def test_normalize_chat_id(raw, expected):
    assert normalize_chat_id(raw) == expected
