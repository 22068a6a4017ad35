import json
from datetime import datetime

import pytest

from vidscribe.constants import MSG_ERR_CANCELLED, MSG_ERR_TIMEOUT, MSG_ERR_UNREACHABLE, MSG_UNEXPECTED_FAILURE
from vidscribe.presentation import (
    describe_error,
    format_timestamp,
    is_empty,
    render_result,
    split_message,
    transcript_body,
    transcript_filename,
)
from vidscribe.transcription.errors import (
    MalformedResponse,
    ServiceRejected,
    ServiceUnreachable,
    TranscriptionCancelled,
    TranscriptionTimeout,
    ValidationError,
)
from vidscribe.transcription.types import (
    JsonTranscript,
    PlainText,
    ResponseFormat,
    Segment,
    VerboseTranscript,
    Word,
)

VERBOSE = VerboseTranscript(
    text=" Hello world.",
    language="english",
    duration=65.5,
    words=(Word("Hello", 0.0, 0.5), Word("world.", 0.5, 1.0)),
    segments=(Segment(id=0, seek_offset=0, start_time=0.0, end_time=1.0, text=" Hello world."),),
)


def test_format_timestamp():
    assert format_timestamp(0) == "00:00.00"
    assert format_timestamp(65.5) == "01:05.50"


def test_render_json_strips_whitespace():
    assert render_result(JsonTranscript(text="  hi  ")) == "hi"


def test_render_verbose_includes_details_and_segment_timeline():
    rendered = render_result(VERBOSE)
    assert rendered.startswith("Hello world.")
    assert "Language: english" in rendered
    assert "Duration: 01:05.50" in rendered
    assert "[00:00.00 → 00:01.00] Hello world." in rendered


def test_render_verbose_falls_back_to_words_without_segments():
    verbose = VerboseTranscript(text="hi", words=(Word("hi", 0.0, 0.4),))
    assert "[00:00.00 → 00:00.40] hi" in render_result(verbose)


@pytest.mark.parametrize(
    "result, empty",
    [
        (JsonTranscript(text="  "), True),
        (JsonTranscript(text="hi"), False),
        (PlainText(text="WEBVTT\n\n", format=ResponseFormat.VTT), True),
        (PlainText(text="WEBVTT\n\n00:00.000 --> 00:01.000\nhi", format=ResponseFormat.VTT), False),
        (VerboseTranscript(text=""), True),
    ],
)
def test_is_empty(result, empty):
    assert is_empty(result) is empty


@pytest.mark.parametrize(
    "exc, expected",
    [
        (ServiceUnreachable("x"), MSG_ERR_UNREACHABLE),
        (TranscriptionTimeout("x"), MSG_ERR_TIMEOUT),
        (TranscriptionCancelled("x"), MSG_ERR_CANCELLED),
        (RuntimeError("boom"), MSG_UNEXPECTED_FAILURE),
    ],
)
def test_describe_error_one_sentence_per_kind(exc, expected):
    assert describe_error(exc) == expected


def test_describe_validation_error_includes_reason():
    message = describe_error(ValidationError("Temperature must be between 0 and 1"))
    assert "Temperature must be between 0 and 1" in message


def test_describe_rejection_includes_status_and_message():
    message = describe_error(ServiceRejected(500, "file too large"))
    assert "500" in message
    assert "file too large" in message


def test_describe_malformed_never_leaks_details():
    message = describe_error(MalformedResponse("Field 'text' must be a string"))
    assert "Field" not in message


def test_split_message_short_text_is_single_chunk():
    assert split_message("hello") == ["hello"]


def test_split_message_prefers_line_breaks():
    text = "a" * 6 + "\n" + "b" * 6
    assert split_message(text, limit=10) == ["a" * 6, "b" * 6]


def test_split_message_hard_cuts_unbroken_text():
    chunks = split_message("x" * 25, limit=10)
    assert chunks == ["x" * 10, "x" * 10, "x" * 5]
    assert all(len(c) <= 10 for c in chunks)


def test_split_message_empty_text():
    assert split_message("   ") == []


def test_transcript_filename_uses_stem_and_timestamp():
    now = datetime(2024, 3, 9, 14, 5, 7)
    assert transcript_filename("holiday.mp4", "json", now) == "holiday_20240309140507.txt"
    assert transcript_filename("holiday.mp4", "srt", now) == "holiday_20240309140507.srt"
    assert transcript_filename(None, "verbose_json", now) == "media_20240309140507.json"


def test_transcript_body_verbose_keeps_wire_layout():
    body = json.loads(transcript_body(VERBOSE))
    assert body["words"][0] == {"word": "Hello", "start": 0.0, "end": 0.5}
    assert body["segments"][0]["seek"] == 0
    assert body["language"] == "english"


def test_transcript_body_plain_text_is_verbatim():
    srt = "1\n00:00:00,000 --> 00:00:01,000\nHi\n"
    assert transcript_body(PlainText(text=srt, format=ResponseFormat.SRT)) == srt
