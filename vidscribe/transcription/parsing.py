"""Wire body → TranscriptionResult, dispatched on the requested format."""
import json
from typing import Any, Callable, Optional

from vidscribe.constants import VTT_HEADER
from vidscribe.transcription.errors import MalformedResponse
from vidscribe.transcription.types import (
    JsonTranscript,
    PlainText,
    ResponseFormat,
    Segment,
    TranscriptionResult,
    VerboseTranscript,
    Word,
)


# ── field helpers ─────────────────────────────────────────────────────────────


def _number(obj: dict, key: str, *, required: bool = True) -> Optional[float]:
    match obj.get(key):
        case None if not required:
            return None
        case bool():
            raise MalformedResponse(f"Field {key!r} must be a number")
        case int() | float() as value:
            return float(value)
        case _:
            raise MalformedResponse(f"Field {key!r} must be a number")


def _integer(obj: dict, key: str, default: Optional[int] = None) -> int:
    match obj.get(key, default):
        case bool():
            raise MalformedResponse(f"Field {key!r} must be an integer")
        case int() as value:
            return value
        case _:
            raise MalformedResponse(f"Field {key!r} must be an integer")


def _string(obj: dict, key: str, *, required: bool = True) -> Optional[str]:
    match obj.get(key):
        case None if not required:
            return None
        case str() as value:
            return value
        case _:
            raise MalformedResponse(f"Field {key!r} must be a string")


def _object(body: str) -> dict:
    try:
        data = json.loads(body)
    except json.JSONDecodeError as exc:
        raise MalformedResponse(f"Body is not JSON: {exc.msg}") from exc
    match data:
        case dict():
            return data
        case _:
            raise MalformedResponse("Body is not a JSON object")


def _sequence(data: dict, key: str, parse_item: Callable[[Any], Any]) -> tuple:
    match data.get(key):
        case None:
            return ()
        case list() as items:
            return tuple(map(parse_item, items))
        case _:
            raise MalformedResponse(f"Field {key!r} must be a list")


def _word(item: Any) -> Word:
    match item:
        case dict():
            return Word(
                text=_string(item, "word"),
                start_time=_number(item, "start"),
                end_time=_number(item, "end"),
            )
        case _:
            raise MalformedResponse("Word entry must be an object")


def _token_ids(item: dict) -> tuple[int, ...]:
    match item.get("tokens"):
        case None:
            return ()
        case list() as tokens if all(isinstance(t, int) and not isinstance(t, bool) for t in tokens):
            return tuple(tokens)
        case _:
            raise MalformedResponse("Field 'tokens' must be a list of integers")


def _segment(item: Any) -> Segment:
    match item:
        case dict():
            return Segment(
                id=_integer(item, "id"),
                seek_offset=_integer(item, "seek", default=0),
                start_time=_number(item, "start"),
                end_time=_number(item, "end"),
                text=_string(item, "text"),
                token_ids=_token_ids(item),
                temperature=_number(item, "temperature", required=False),
                avg_log_prob=_number(item, "avg_logprob", required=False),
                compression_ratio=_number(item, "compression_ratio", required=False),
                no_speech_prob=_number(item, "no_speech_prob", required=False),
            )
        case _:
            raise MalformedResponse("Segment entry must be an object")


# ── per-format parsers ────────────────────────────────────────────────────────


def _parse_plain(fmt: ResponseFormat, body: str) -> PlainText:
    match fmt:
        case ResponseFormat.VTT if not body.lstrip("\ufeff").startswith(VTT_HEADER):
            raise MalformedResponse("VTT body is missing the WEBVTT header")
        case _:
            return PlainText(text=body, format=fmt)


def _parse_json(body: str) -> JsonTranscript:
    return JsonTranscript(text=_string(_object(body), "text"))


def _parse_verbose(body: str) -> VerboseTranscript:
    data = _object(body)
    return VerboseTranscript(
        text=_string(data, "text"),
        language=_string(data, "language", required=False),
        duration=_number(data, "duration", required=False),
        words=_sequence(data, "words", _word),
        segments=_sequence(data, "segments", _segment),
    )


def parse_response(fmt: ResponseFormat, body: str) -> TranscriptionResult:
    """Parse a success body. Raises MalformedResponse."""
    match fmt:
        case ResponseFormat.TEXT | ResponseFormat.SRT | ResponseFormat.VTT:
            return _parse_plain(fmt, body)
        case ResponseFormat.JSON:
            return _parse_json(body)
        case ResponseFormat.VERBOSE_JSON:
            return _parse_verbose(body)
