"""TranscriptionSession — per-chat transcription flow, transport-agnostic."""
import asyncio
import logging
from datetime import datetime
from pathlib import Path
from typing import Awaitable, Callable, Optional

from vidscribe.chat_store import (
    ChatPreferences,
    MediaStore,
    PreferenceStore,
    SavedTranscript,
    TranscriptStore,
)
from vidscribe.config import Config
from vidscribe.constants import (
    ARG_AUTO,
    ARG_DEFAULT,
    ARG_OFF,
    MSG_CANCELLING,
    MSG_DOWNLOAD_FAILED,
    MSG_FILE_TOO_LARGE,
    MSG_FORMAT_SET,
    MSG_FORMAT_USAGE,
    MSG_LANGUAGE_SET,
    MSG_LANGUAGE_USAGE,
    MSG_NO_SPEECH,
    MSG_NOTHING_TO_CANCEL,
    MSG_NOTHING_TO_RETRY,
    MSG_NOTHING_TO_SAVE,
    MSG_SAVE_FAILED,
    MSG_SAVED,
    MSG_STATUS,
    MSG_TEMPERATURE_SET,
    MSG_TEMPERATURE_USAGE,
    MSG_TIMESTAMPS_SET,
    MSG_TIMESTAMPS_NEED_VERBOSE,
    MSG_TIMESTAMPS_USAGE,
    TELEGRAM_DOWNLOAD_LIMIT_BYTES,
)
from vidscribe.message_handler import MediaMessage, normalize_chat_id
from vidscribe.presentation import (
    describe_error,
    is_empty,
    render_result,
    transcript_body,
    transcript_filename,
)
from vidscribe.saver import FileSaver
from vidscribe.transcription.client import TranscriptionClient
from vidscribe.transcription.errors import TranscriptionError
from vidscribe.transcription.types import (
    ResponseFormat,
    TimestampGranularity,
    TranscriptionRequest,
)

logger = logging.getLogger(__name__)

# fetch signature: (file_id) -> media bytes
Fetch = Callable[[str], Awaitable[bytes]]


# ── pure helpers (module-level so tests can import them directly) ──────────────


def parse_format_arg(args: str) -> Optional[str]:
    value = args.strip().lower()
    match value in tuple(f.value for f in ResponseFormat):
        case True:
            return value
        case False:
            return None


def parse_temperature_arg(args: str) -> Optional[float]:
    try:
        value = float(args.strip())
    except ValueError:
        return None
    return value if 0 <= value <= 1 else None


def parse_granularities_arg(args: str) -> Optional[tuple[str, ...]]:
    tokens = args.lower().replace(",", " ").split()
    allowed = tuple(g.value for g in TimestampGranularity)
    match tokens:
        case []:
            return None
        case _ if all(t in allowed for t in tokens):
            return tuple(sorted(set(tokens)))
        case _:
            return None


# ── session ───────────────────────────────────────────────────────────────────


class TranscriptionSession:
    """Turns incoming media and commands into replies.

    Remembers the last media and transcript per chat so /retry and /save work,
    and tracks in-flight calls so /cancel can stop them.
    """

    def __init__(
        self,
        config: Config,
        transcriber: TranscriptionClient,
        saver: FileSaver,
        *,
        media_store: Optional[MediaStore] = None,
        preference_store: Optional[PreferenceStore] = None,
        transcript_store: Optional[TranscriptStore] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._transcriber = transcriber
        self._saver = saver
        self._media_store = media_store or MediaStore()
        self._preference_store = preference_store or PreferenceStore(
            ChatPreferences(
                response_format=config.default_response_format,
                language=config.default_language,
            )
        )
        self._transcript_store = transcript_store or TranscriptStore()
        self._clock = clock
        self._in_flight: dict[str, set[asyncio.Event]] = {}

    # ── media ─────────────────────────────────────────────────────────────────

    async def handle_media(self, message: MediaMessage, fetch: Fetch) -> str:
        self._media_store.remember(message)
        return await self._transcribe(message, fetch)

    async def handle_retry_command(self, sender: str, fetch: Fetch) -> str:
        match self._media_store.last(sender):
            case None:
                return MSG_NOTHING_TO_RETRY
            case message:
                return await self._transcribe(message, fetch)

    def in_flight(self, sender: str) -> int:
        return len(self._in_flight.get(normalize_chat_id(sender), set()))

    def handle_cancel_command(self, sender: str) -> str:
        events = self._in_flight.get(normalize_chat_id(sender), set())
        match len(events):
            case 0:
                return MSG_NOTHING_TO_CANCEL
            case n:
                list(map(lambda event: event.set(), events))
                return MSG_CANCELLING % n

    def _build_request(self, message: MediaMessage, content: bytes) -> TranscriptionRequest:
        prefs = self._preference_store.preferences(message.sender)
        return TranscriptionRequest(
            media=content,
            filename=message.filename,
            language=prefs.language,
            prompt=message.caption or None,
            response_format=prefs.response_format,
            temperature=prefs.temperature,
            timestamp_granularities=frozenset(prefs.timestamp_granularities),
        )

    async def _transcribe(self, message: MediaMessage, fetch: Fetch) -> str:
        match message.file_size:
            case int() as size if size > TELEGRAM_DOWNLOAD_LIMIT_BYTES:
                return MSG_FILE_TOO_LARGE % (size / 1024 / 1024)
            case _:
                pass

        try:
            content = await fetch(message.file_id)
        except Exception:
            logger.exception("Media download failed")
            return MSG_DOWNLOAD_FAILED

        request = self._build_request(message, content)
        key = normalize_chat_id(message.sender)
        cancel = asyncio.Event()
        self._in_flight.setdefault(key, set()).add(cancel)
        try:
            result = await self._transcriber.transcribe(request, cancel=cancel)
        except TranscriptionError as exc:
            return describe_error(exc)
        finally:
            self._release(key, cancel)

        match is_empty(result):
            case True:
                return MSG_NO_SPEECH
            case False:
                self._transcript_store.remember(
                    message.sender,
                    SavedTranscript(
                        source_name=message.filename or "",
                        response_format=ResponseFormat(request.response_format).value,
                        body=transcript_body(result),
                    ),
                )
                return render_result(result)

    def _release(self, key: str, cancel: asyncio.Event) -> None:
        events = self._in_flight.get(key, set())
        events.discard(cancel)
        match len(events):
            case 0:
                self._in_flight.pop(key, None)
            case _:
                pass

    # ── preferences ───────────────────────────────────────────────────────────

    def handle_format_command(self, sender: str, args: str) -> str:
        match parse_format_arg(args):
            case None:
                return MSG_FORMAT_USAGE
            case fmt:
                self._preference_store.update(sender, response_format=fmt)
                return MSG_FORMAT_SET % fmt

    def handle_language_command(self, sender: str, args: str) -> str:
        value = args.strip().lower()
        match value:
            case "":
                return MSG_LANGUAGE_USAGE
            case v if v == ARG_AUTO:
                self._preference_store.update(sender, language=None)
                return MSG_LANGUAGE_SET % ARG_AUTO
            case code if len(code) == 2 and code.isascii() and code.isalpha():
                self._preference_store.update(sender, language=code)
                return MSG_LANGUAGE_SET % code
            case _:
                return MSG_LANGUAGE_USAGE

    def handle_temperature_command(self, sender: str, args: str) -> str:
        match args.strip().lower():
            case v if v == ARG_DEFAULT:
                self._preference_store.update(sender, temperature=None)
                return MSG_TEMPERATURE_SET % ARG_DEFAULT
            case raw:
                match parse_temperature_arg(raw):
                    case None:
                        return MSG_TEMPERATURE_USAGE
                    case temperature:
                        self._preference_store.update(sender, temperature=temperature)
                        return MSG_TEMPERATURE_SET % temperature

    def handle_timestamps_command(self, sender: str, args: str) -> str:
        match args.strip().lower():
            case v if v == ARG_OFF:
                self._preference_store.update(sender, timestamp_granularities=())
                return MSG_TIMESTAMPS_SET % ARG_OFF
            case raw:
                match parse_granularities_arg(raw):
                    case None:
                        return MSG_TIMESTAMPS_USAGE
                    case granularities:
                        prefs = self._preference_store.update(sender, timestamp_granularities=granularities)
                        reply = MSG_TIMESTAMPS_SET % ", ".join(granularities)
                        match prefs.response_format:
                            case ResponseFormat.VERBOSE_JSON.value:
                                return reply
                            case current:
                                return f"{reply}\n{MSG_TIMESTAMPS_NEED_VERBOSE % current}"

    def handle_status_command(self, sender: str) -> str:
        prefs = self._preference_store.preferences(sender)
        return MSG_STATUS % (
            self._transcriber.endpoint_url,
            prefs.response_format,
            prefs.language or ARG_AUTO,
            ARG_DEFAULT if prefs.temperature is None else prefs.temperature,
            ", ".join(prefs.timestamp_granularities) or ARG_OFF,
            self.in_flight(sender),
        )

    # ── save ──────────────────────────────────────────────────────────────────

    def handle_save_command(self, sender: str) -> tuple[str, Optional[Path]]:
        match self._transcript_store.last(sender):
            case None:
                return MSG_NOTHING_TO_SAVE, None
            case saved:
                filename = transcript_filename(
                    saved.source_name or None, saved.response_format, self._clock()
                )
                try:
                    path = self._saver.save(filename, saved.body)
                except OSError:
                    logger.exception("Saving transcript failed")
                    return MSG_SAVE_FAILED, None
                return MSG_SAVED % path.name, path
