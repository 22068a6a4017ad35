"""WhisperTranscriptionClient — OpenAI-compatible /audio/transcriptions backend."""
import asyncio
import json
import logging
import time
from typing import Any, Awaitable, Optional

import httpx
from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI

from vidscribe.constants import (
    ANONYMOUS_API_KEY,
    DEFAULT_ENDPOINT_URL,
    DEFAULT_TIMEOUT_SECONDS,
    MSG_TRANSCRIBE_FAIL,
    MSG_TRANSCRIBED,
    MSG_TRANSCRIBING,
    TRANSCRIPTIONS_PATH,
    WHISPER_MODEL,
)
from vidscribe.transcription.client import TranscriptionClient
from vidscribe.transcription.errors import (
    ServiceRejected,
    ServiceUnreachable,
    TranscriptionCancelled,
    TranscriptionError,
    TranscriptionTimeout,
)
from vidscribe.transcription.media import MediaPayload, load_media
from vidscribe.transcription.parsing import parse_response
from vidscribe.transcription.types import (
    ResponseFormat,
    TranscriptionRequest,
    TranscriptionResult,
)

logger = logging.getLogger(__name__)


# ── pure helpers (module-level so tests can import them directly) ──────────────


def normalize_endpoint(url: str) -> str:
    """Validate an absolute http(s) URL and drop any trailing slash."""
    try:
        parsed = httpx.URL(url.strip())
    except (httpx.InvalidURL, TypeError) as exc:
        raise ValueError(f"Invalid endpoint URL: {url!r}") from exc
    match (parsed.scheme, parsed.host):
        case ("http" | "https", str() as host) if host:
            return str(parsed).rstrip("/")
        case _:
            raise ValueError(f"Endpoint must be an absolute http(s) URL: {url!r}")


def form_fields(request: TranscriptionRequest, fmt: ResponseFormat) -> dict[str, Any]:
    """Optional multipart fields, only those present on the request."""
    fields: dict[str, Any] = {"response_format": fmt.value}
    match request.language:
        case str() as language:
            fields["language"] = language.lower()
        case None:
            pass
    match request.prompt:
        case str() as prompt if prompt.strip():
            fields["prompt"] = prompt
        case _:
            pass
    match request.temperature:
        case None:
            pass
        case temperature:
            fields["temperature"] = float(temperature)
    match request.granularity_values():
        case []:
            pass
        case values:
            fields["timestamp_granularities"] = values
    return fields


def service_message(response: httpx.Response) -> str:
    """Best-effort human-readable message from an error body."""
    raw = response.text.strip()
    try:
        data = json.loads(raw) if raw else None
    except json.JSONDecodeError:
        data = None
    match data:
        case {"error": str() as message}:
            return message
        case {"error": {"message": str() as message}}:
            return message
        case {"message": str() as message}:
            return message
        case {"detail": str() as message}:
            return message
        case _:
            return raw or response.reason_phrase


async def _discard(task: Optional[asyncio.Future]) -> None:
    match task:
        case None:
            return
        case t if t.done():
            return
        case t:
            t.cancel()
            try:
                await t
            except asyncio.CancelledError:
                pass


# ── client ────────────────────────────────────────────────────────────────────


class WhisperTranscriptionClient(TranscriptionClient):
    """Sends one multipart POST per call to ``<endpoint>/audio/transcriptions``.

    Each call opens its own ``AsyncOpenAI`` client, so concurrent calls share
    nothing but the endpoint string read when the call starts.
    """

    def __init__(
        self,
        endpoint_url: str = DEFAULT_ENDPOINT_URL,
        api_key: Optional[str] = None,
        model: str = WHISPER_MODEL,
        timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._endpoint_url = normalize_endpoint(endpoint_url)
        self._api_key = api_key or ANONYMOUS_API_KEY
        self._model = model
        self._timeout = timeout
        self._transport = transport

    @property
    def endpoint_url(self) -> str:
        return self._endpoint_url

    @property
    def request_url(self) -> str:
        return f"{self._endpoint_url}/{TRANSCRIPTIONS_PATH}"

    def configure(self, endpoint_url: str) -> None:
        self._endpoint_url = normalize_endpoint(endpoint_url)

    async def transcribe(
        self,
        request: TranscriptionRequest,
        *,
        timeout: Optional[float] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> TranscriptionResult:
        fmt = request.validate()
        payload = await asyncio.to_thread(load_media, request.media, request.filename)
        match cancel:
            case asyncio.Event() as event if event.is_set():
                raise TranscriptionCancelled("Cancelled before the request was sent")
            case _:
                pass

        endpoint = self._endpoint_url
        limit = self._timeout if timeout is None else timeout
        logger.info(MSG_TRANSCRIBING, payload.filename, payload.mime_type, payload.size_mb, endpoint)

        start = time.time()
        try:
            body = await self._bounded(self._post(endpoint, payload, request, fmt, limit), limit, cancel)
            result = parse_response(fmt, body)
        except TranscriptionError as exc:
            logger.warning(MSG_TRANSCRIBE_FAIL, time.time() - start, exc)
            raise
        logger.info(MSG_TRANSCRIBED, payload.filename, time.time() - start)
        return result

    async def _bounded(
        self,
        call: Awaitable[str],
        timeout: Optional[float],
        cancel: Optional[asyncio.Event],
    ) -> str:
        """Await ``call`` until it finishes, ``timeout`` elapses or ``cancel`` is set."""
        task = asyncio.ensure_future(call)
        cancel_wait = asyncio.ensure_future(cancel.wait()) if cancel is not None else None
        watched = {task} | ({cancel_wait} if cancel_wait is not None else set())
        try:
            done, _ = await asyncio.wait(watched, timeout=timeout, return_when=asyncio.FIRST_COMPLETED)
        finally:
            await _discard(cancel_wait)
            await _discard(task)

        match (task in done, cancel is not None and cancel.is_set()):
            case (True, _):
                return task.result()
            case (False, True):
                raise TranscriptionCancelled("Cancelled while waiting for the transcription server")
            case _:
                raise TranscriptionTimeout(f"No reply within {timeout}s")

    async def _post(
        self,
        endpoint: str,
        payload: MediaPayload,
        request: TranscriptionRequest,
        fmt: ResponseFormat,
        timeout: Optional[float],
    ) -> str:
        http_client = (
            httpx.AsyncClient(transport=self._transport)
            if self._transport is not None
            else None
        )
        async with AsyncOpenAI(
            api_key=self._api_key,
            base_url=endpoint,
            max_retries=0,
            timeout=httpx.Timeout(timeout) if timeout is not None else None,
            http_client=http_client,
        ) as client:
            try:
                raw = await client.audio.transcriptions.with_raw_response.create(
                    file=(payload.filename, payload.content, payload.mime_type),
                    model=self._model,
                    **form_fields(request, fmt),
                )
            except APITimeoutError as exc:
                raise TranscriptionTimeout("The transcription server timed out") from exc
            except APIConnectionError as exc:
                raise ServiceUnreachable(f"Cannot reach {endpoint}: {exc}") from exc
            except APIStatusError as exc:
                raise ServiceRejected(exc.status_code, service_message(exc.response)) from exc
            return raw.http_response.text
