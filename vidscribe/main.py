"""Entry point — wires Config → WhisperTranscriptionClient → TranscriptionSession → TelegramClient."""
import logging

from rich.logging import RichHandler

from vidscribe.config import Config
from vidscribe.constants import MSG_BOT_STARTING
from vidscribe.saver import DirectoryFileSaver
from vidscribe.session import TranscriptionSession
from vidscribe.telegram.client import TelegramClient
from vidscribe.transcription.whisper import WhisperTranscriptionClient


def _setup_logging(level: str) -> None:
    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    list(map(root.removeHandler, root.handlers[:]))
    root.addHandler(RichHandler(rich_tracebacks=True))
    # httpx logs every request at INFO; the client already logs each call.
    logging.getLogger("httpx").setLevel(logging.WARNING)


def main() -> None:
    config = Config.from_env()
    _setup_logging(config.log_level)

    logger = logging.getLogger(__name__)
    logger.info(MSG_BOT_STARTING)

    transcriber = WhisperTranscriptionClient(
        endpoint_url=config.transcription_endpoint,
        api_key=config.transcription_api_key,
        model=config.transcription_model,
        timeout=config.transcription_timeout,
    )
    session = TranscriptionSession(
        config,
        transcriber,
        DirectoryFileSaver(config.transcript_dir),
    )
    client = TelegramClient(config, session)
    client.run()


if __name__ == "__main__":
    main()
