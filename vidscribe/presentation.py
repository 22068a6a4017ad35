"""Turning results and errors into what the user reads or saves."""
import json
from datetime import datetime
from pathlib import Path

from vidscribe.constants import (
    DEFAULT_MEDIA_STEM,
    MSG_ERR_CANCELLED,
    MSG_ERR_INVALID,
    MSG_ERR_MALFORMED,
    MSG_ERR_REJECTED,
    MSG_ERR_TIMEOUT,
    MSG_ERR_UNREACHABLE,
    MSG_UNEXPECTED_FAILURE,
    TELEGRAM_MESSAGE_LIMIT,
    TRANSCRIPT_EXTENSIONS,
    TRANSCRIPT_TIMESTAMP_FORMAT,
    VTT_HEADER,
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
    TranscriptionResult,
    VerboseTranscript,
)


def format_timestamp(seconds: float) -> str:
    minutes, rest = divmod(max(seconds, 0.0), 60)
    return f"{int(minutes):02d}:{rest:05.2f}"


def transcript_text(result: TranscriptionResult) -> str:
    """The recognised text, without any subtitle header."""
    match result:
        case PlainText(text=text, format=ResponseFormat.VTT):
            return text.lstrip("\ufeff").removeprefix(VTT_HEADER).strip()
        case PlainText(text=text) | JsonTranscript(text=text) | VerboseTranscript(text=text):
            return text.strip()


def is_empty(result: TranscriptionResult) -> bool:
    """True when the service found no speech."""
    return transcript_text(result) == ""


def _timeline(result: VerboseTranscript) -> list[str]:
    match (result.segments, result.words):
        case ((), ()):
            return []
        case ((), words):
            return [
                f"[{format_timestamp(w.start_time)} → {format_timestamp(w.end_time)}] {w.text.strip()}"
                for w in words
            ]
        case (segments, _):
            return [
                f"[{format_timestamp(s.start_time)} → {format_timestamp(s.end_time)}] {s.text.strip()}"
                for s in segments
            ]


def render_result(result: TranscriptionResult) -> str:
    match result:
        case VerboseTranscript() as verbose:
            details = " · ".join(filter(None, [
                f"Language: {verbose.language}" if verbose.language else "",
                f"Duration: {format_timestamp(verbose.duration)}" if verbose.duration is not None else "",
            ]))
            parts = [verbose.text.strip(), details, "\n".join(_timeline(verbose))]
            return "\n\n".join(filter(None, parts))
        case PlainText(text=text) | JsonTranscript(text=text):
            return text.strip()


def describe_error(exc: Exception) -> str:
    """One short sentence per error kind."""
    match exc:
        case ValidationError():
            return MSG_ERR_INVALID % str(exc).rstrip(".")
        case ServiceUnreachable():
            return MSG_ERR_UNREACHABLE
        case TranscriptionTimeout():
            return MSG_ERR_TIMEOUT
        case TranscriptionCancelled():
            return MSG_ERR_CANCELLED
        case ServiceRejected(status_code=code, service_message=message):
            return MSG_ERR_REJECTED % (code, message[:200])
        case MalformedResponse():
            return MSG_ERR_MALFORMED
        case _:
            return MSG_UNEXPECTED_FAILURE


def split_message(text: str, limit: int = TELEGRAM_MESSAGE_LIMIT) -> list[str]:
    """Split ``text`` into chunks of at most ``limit`` chars, preferring line then word breaks."""
    chunks: list[str] = []
    rest = text.strip()
    while len(rest) > limit:
        window = rest[:limit]
        cut = window.rfind("\n")
        cut = cut if cut > 0 else window.rfind(" ")
        cut = cut if cut > 0 else limit
        chunks.append(rest[:cut].rstrip())
        rest = rest[cut:].lstrip()
    return chunks + ([rest] if rest else [])


def transcript_filename(source_name: str | None, response_format: str, now: datetime) -> str:
    stem = Path(source_name).stem if source_name else DEFAULT_MEDIA_STEM
    extension = TRANSCRIPT_EXTENSIONS.get(response_format, "txt")
    return f"{stem or DEFAULT_MEDIA_STEM}_{now.strftime(TRANSCRIPT_TIMESTAMP_FORMAT)}.{extension}"


def transcript_body(result: TranscriptionResult) -> str:
    """File contents for /save; verbose results keep the wire layout."""
    match result:
        case VerboseTranscript() as verbose:
            return json.dumps(
                {
                    "language": verbose.language,
                    "duration": verbose.duration,
                    "text": verbose.text,
                    "words": [
                        {"word": w.text, "start": w.start_time, "end": w.end_time}
                        for w in verbose.words
                    ],
                    "segments": [
                        {
                            "id": s.id,
                            "seek": s.seek_offset,
                            "start": s.start_time,
                            "end": s.end_time,
                            "text": s.text,
                            "tokens": list(s.token_ids),
                            "temperature": s.temperature,
                            "avg_logprob": s.avg_log_prob,
                            "compression_ratio": s.compression_ratio,
                            "no_speech_prob": s.no_speech_prob,
                        }
                        for s in verbose.segments
                    ],
                },
                indent=2,
                ensure_ascii=False,
            )
        case PlainText(text=text):
            return text
        case JsonTranscript(text=text):
            return text.strip()
