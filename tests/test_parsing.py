import json

import pytest

from vidscribe.transcription.errors import MalformedResponse
from vidscribe.transcription.parsing import parse_response
from vidscribe.transcription.types import (
    JsonTranscript,
    PlainText,
    ResponseFormat,
    Segment,
    VerboseTranscript,
)

SEGMENT = {
    "id": 0,
    "seek": 0,
    "start": 0.0,
    "end": 2.5,
    "text": " Hello there.",
    "tokens": [50364, 2425, 456, 13],
    "temperature": 0.0,
    "avg_logprob": -0.21,
    "compression_ratio": 0.9,
    "no_speech_prob": 0.01,
}


def test_json_body_becomes_json_transcript():
    assert parse_response(ResponseFormat.JSON, '{"text": "hi"}') == JsonTranscript(text="hi")


def test_json_body_without_text_is_malformed():
    with pytest.raises(MalformedResponse):
        parse_response(ResponseFormat.JSON, '{"result": "hi"}')


def test_json_array_is_malformed():
    with pytest.raises(MalformedResponse):
        parse_response(ResponseFormat.JSON, '["hi"]')


def test_dispatch_follows_requested_format_not_body_shape():
    body = '{"text": "hi"}'
    assert parse_response(ResponseFormat.TEXT, body) == PlainText(text=body, format=ResponseFormat.TEXT)


def test_srt_is_returned_verbatim():
    body = "1\n00:00:00,000 --> 00:00:01,000\nHi\n"
    assert parse_response(ResponseFormat.SRT, body) == PlainText(text=body, format=ResponseFormat.SRT)


def test_vtt_with_bom_and_header_is_accepted():
    body = "\ufeffWEBVTT\n\n00:00.000 --> 00:01.000\nHi\n"
    result = parse_response(ResponseFormat.VTT, body)
    assert result.format is ResponseFormat.VTT


def test_verbose_body_with_segments():
    body = json.dumps({
        "language": "english",
        "duration": 2.5,
        "text": "Hello there.",
        "segments": [SEGMENT],
    })

    result = parse_response(ResponseFormat.VERBOSE_JSON, body)

    assert result == VerboseTranscript(
        text="Hello there.",
        language="english",
        duration=2.5,
        words=(),
        segments=(
            Segment(
                id=0,
                seek_offset=0,
                start_time=0.0,
                end_time=2.5,
                text=" Hello there.",
                token_ids=(50364, 2425, 456, 13),
                temperature=0.0,
                avg_log_prob=-0.21,
                compression_ratio=0.9,
                no_speech_prob=0.01,
            ),
        ),
    )


def test_verbose_segments_keep_wire_order():
    segments = [dict(SEGMENT, id=i, start=float(i), end=float(i) + 0.5) for i in (0, 1, 2)]
    body = json.dumps({"text": "a b c", "segments": segments})

    result = parse_response(ResponseFormat.VERBOSE_JSON, body)

    assert [s.id for s in result.segments] == [0, 1, 2]


def test_verbose_optional_metrics_may_be_missing():
    body = json.dumps({"text": "x", "segments": [{"id": 3, "start": 1, "end": 2, "text": "x"}]})

    (segment,) = parse_response(ResponseFormat.VERBOSE_JSON, body).segments

    assert segment.seek_offset == 0
    assert segment.token_ids == ()
    assert segment.no_speech_prob is None
    assert segment.start_time == 1.0


@pytest.mark.parametrize(
    "body",
    [
        {"text": 3},
        {"text": "x", "duration": "long"},
        {"text": "x", "words": "hi"},
        {"text": "x", "words": [{"word": "hi", "start": "0", "end": 1}]},
        {"text": "x", "words": [["hi", 0, 1]]},
        {"text": "x", "segments": [dict(SEGMENT, tokens=["a"])]},
        {"text": "x", "segments": [dict(SEGMENT, id=True)]},
    ],
)
def test_verbose_mistyped_fields_are_malformed(body):
    with pytest.raises(MalformedResponse):
        parse_response(ResponseFormat.VERBOSE_JSON, json.dumps(body))
