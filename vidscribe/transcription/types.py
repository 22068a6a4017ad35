"""Request and result types for the transcription client."""
import math
import os
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO, Optional, Union

from vidscribe.transcription.errors import ValidationError


class ResponseFormat(str, Enum):
    TEXT = "text"
    JSON = "json"
    SRT = "srt"
    VTT = "vtt"
    VERBOSE_JSON = "verbose_json"


class TimestampGranularity(str, Enum):
    WORD = "word"
    SEGMENT = "segment"


MediaSource = Union[bytes, bytearray, memoryview, str, os.PathLike, BinaryIO]


@dataclass(frozen=True)
class TranscriptionRequest:
    media: MediaSource
    filename: Optional[str] = None
    language: Optional[str] = None
    prompt: Optional[str] = None
    response_format: ResponseFormat = ResponseFormat.JSON
    temperature: Optional[float] = None
    timestamp_granularities: frozenset[TimestampGranularity] = frozenset()

    def validate(self) -> ResponseFormat:
        """Check every field that can be checked without touching the media.

        Returns the response format coerced to ``ResponseFormat`` so callers
        can pass plain strings. Raises ``ValidationError`` on the first problem.
        """
        try:
            fmt = ResponseFormat(self.response_format)
        except ValueError:
            raise ValidationError(f"Unknown response format: {self.response_format!r}") from None

        match self.temperature:
            case None:
                pass
            case bool():
                raise ValidationError("Temperature must be a number")
            case int() | float() as t if not math.isnan(t) and 0 <= t <= 1:
                pass
            case _:
                raise ValidationError("Temperature must be between 0 and 1")

        match self.language:
            case None:
                pass
            case str() as code if len(code) == 2 and code.isascii() and code.isalpha():
                pass
            case _:
                raise ValidationError("Language must be a two-letter code such as 'en'")

        match self.prompt:
            case None | str():
                pass
            case _:
                raise ValidationError("Prompt must be text")

        try:
            granularities = {TimestampGranularity(g) for g in self.timestamp_granularities or ()}
        except (TypeError, ValueError):
            raise ValidationError("Timestamp granularities must be 'word' or 'segment'") from None

        match (bool(granularities), fmt):
            case (True, requested) if requested is not ResponseFormat.VERBOSE_JSON:
                raise ValidationError("Word/segment timestamps require the verbose_json format")
            case _:
                pass

        return fmt

    def granularity_values(self) -> list[str]:
        """Wire values in a stable order."""
        return sorted(TimestampGranularity(g).value for g in self.timestamp_granularities or ())


# ── results ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Word:
    text: str
    start_time: float
    end_time: float


@dataclass(frozen=True)
class Segment:
    id: int
    seek_offset: int
    start_time: float
    end_time: float
    text: str
    token_ids: tuple[int, ...] = ()
    temperature: Optional[float] = None
    avg_log_prob: Optional[float] = None
    compression_ratio: Optional[float] = None
    no_speech_prob: Optional[float] = None


@dataclass(frozen=True)
class PlainText:
    """Payload of the text, srt and vtt formats, returned as sent."""

    text: str
    format: ResponseFormat = ResponseFormat.TEXT


@dataclass(frozen=True)
class JsonTranscript:
    text: str


@dataclass(frozen=True)
class VerboseTranscript:
    text: str
    language: Optional[str] = None
    duration: Optional[float] = None
    words: tuple[Word, ...] = ()
    segments: tuple[Segment, ...] = ()


TranscriptionResult = Union[PlainText, JsonTranscript, VerboseTranscript]
