from dataclasses import dataclass
from typing import Optional
import os
from dotenv import load_dotenv

from vidscribe.constants import (
    ARG_AUTO,
    DEFAULT_ENDPOINT_URL,
    DEFAULT_RESPONSE_FORMAT,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_TRANSCRIPT_DIR,
    WHISPER_MODEL,
)
from vidscribe.transcription.types import ResponseFormat


@dataclass(frozen=True)
class Config:
    telegram_bot_token: str
    allowed_chat_id: str
    log_level: str
    transcription_endpoint: str
    transcription_api_key: Optional[str]
    transcription_model: str
    transcription_timeout: float
    default_response_format: str
    default_language: Optional[str]
    transcript_dir: str

    @classmethod
    def from_env(cls) -> "Config":
        load_dotenv()

        token = os.getenv("TELEGRAM_BOT_TOKEN")
        chat_id = os.getenv("ALLOWED_CHAT_ID")
        log_level = os.getenv("LOG_LEVEL", "INFO")
        endpoint = os.getenv("TRANSCRIPTION_ENDPOINT", DEFAULT_ENDPOINT_URL)
        api_key = os.getenv("TRANSCRIPTION_API_KEY") or os.getenv("OPENAI_API_KEY") or None
        model = os.getenv("TRANSCRIPTION_MODEL", WHISPER_MODEL)
        raw_timeout = os.getenv("TRANSCRIPTION_TIMEOUT", str(DEFAULT_TIMEOUT_SECONDS))
        response_format = os.getenv("DEFAULT_RESPONSE_FORMAT", DEFAULT_RESPONSE_FORMAT)
        raw_language = os.getenv("DEFAULT_LANGUAGE", ARG_AUTO).strip().lower()
        transcript_dir = os.getenv("TRANSCRIPT_DIR", DEFAULT_TRANSCRIPT_DIR)

        try:
            timeout = float(raw_timeout)
        except ValueError:
            raise ValueError(f"TRANSCRIPTION_TIMEOUT must be a number, got {raw_timeout!r}") from None

        return cls._validate(
            telegram_bot_token=token,
            allowed_chat_id=chat_id,
            log_level=log_level,
            transcription_endpoint=endpoint,
            transcription_api_key=api_key,
            transcription_model=model,
            transcription_timeout=timeout,
            default_response_format=response_format.strip().lower(),
            default_language=None if raw_language in ("", ARG_AUTO) else raw_language,
            transcript_dir=transcript_dir,
        )

    @staticmethod
    def _validate(
        telegram_bot_token: Optional[str],
        allowed_chat_id: Optional[str],
        log_level: str,
        transcription_endpoint: str,
        transcription_api_key: Optional[str],
        transcription_model: str,
        transcription_timeout: float,
        default_response_format: str,
        default_language: Optional[str],
        transcript_dir: str,
    ) -> "Config":
        match telegram_bot_token:
            case None | "":
                raise ValueError("TELEGRAM_BOT_TOKEN must be set in .env")
            case _:
                pass

        match allowed_chat_id:
            case None | "":
                raise ValueError("ALLOWED_CHAT_ID must be set in .env")
            case _:
                pass

        match transcription_timeout:
            case t if t > 0:
                pass
            case _:
                raise ValueError("TRANSCRIPTION_TIMEOUT must be greater than zero")

        valid_formats = tuple(f.value for f in ResponseFormat)
        match default_response_format:
            case f if f in valid_formats:
                pass
            case _:
                raise ValueError(f"DEFAULT_RESPONSE_FORMAT must be one of {', '.join(valid_formats)}")

        match default_language:
            case None:
                pass
            case code if len(code) == 2 and code.isalpha():
                pass
            case _:
                raise ValueError("DEFAULT_LANGUAGE must be a two-letter code or 'auto'")

        return Config(
            telegram_bot_token=telegram_bot_token,
            allowed_chat_id=allowed_chat_id,
            log_level=log_level,
            transcription_endpoint=transcription_endpoint,
            transcription_api_key=transcription_api_key,
            transcription_model=transcription_model,
            transcription_timeout=transcription_timeout,
            default_response_format=default_response_format,
            default_language=default_language,
            transcript_dir=transcript_dir,
        )
