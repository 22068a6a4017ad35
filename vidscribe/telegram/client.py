"""TelegramClient — event-driven transport via python-telegram-bot."""
import logging
import time
from pathlib import Path
from typing import Awaitable, Callable, Optional

from telegram import Bot, Update
from telegram.ext import Application, CommandHandler, ContextTypes
from telegram.ext import MessageHandler as TGMessageHandler
from telegram.ext import filters

from vidscribe.bot_client import BotClient
from vidscribe.config import Config
from vidscribe.constants import (
    CMD_CANCEL,
    CMD_FORMAT,
    CMD_HELP,
    CMD_LANGUAGE,
    CMD_RETRY,
    CMD_SAVE,
    CMD_STATUS,
    CMD_TEMPERATURE,
    CMD_TIMESTAMPS,
    MSG_BLOCKED_CHAT,
    MSG_HELP,
    MSG_SEND_FAIL,
    MSG_SEND_MEDIA,
    MSG_UNEXPECTED_FAILURE,
)
from vidscribe.message_handler import MediaMessage, normalize_chat_id
from vidscribe.presentation import split_message
from vidscribe.session import Fetch, TranscriptionSession
from vidscribe.telegram.typing import TelegramBusyIndicator

logger = logging.getLogger(__name__)

MEDIA_FILTER = (
    filters.VIDEO
    | filters.VIDEO_NOTE
    | filters.VOICE
    | filters.AUDIO
    | filters.Document.VIDEO
    | filters.Document.AUDIO
)


def make_fetch(bot: Bot) -> Fetch:
    async def _fetch(file_id: str) -> bytes:
        tg_file = await bot.get_file(file_id)
        return bytes(await tg_file.download_as_bytearray())

    return _fetch


class TelegramClient(BotClient):

    def __init__(self, config: Config, session: TranscriptionSession) -> None:
        self._token = config.telegram_bot_token
        self._allowed_chat_id = config.allowed_chat_id
        self._session = session
        self._app: Optional[Application] = None

    # ── BotClient interface ───────────────────────────────────────────────────

    def run(self) -> None:
        # Concurrent updates let /cancel through while a transcription is running.
        self._app = Application.builder().token(self._token).concurrent_updates(True).build()
        session = self._session
        self._app.add_handler(CommandHandler(CMD_HELP, self._make_help_handler()))
        self._app.add_handler(
            CommandHandler(CMD_STATUS, self._make_sender_handler(session.handle_status_command))
        )
        self._app.add_handler(
            CommandHandler(CMD_CANCEL, self._make_sender_handler(session.handle_cancel_command))
        )
        self._app.add_handler(
            CommandHandler(CMD_FORMAT, self._make_args_handler(session.handle_format_command))
        )
        self._app.add_handler(
            CommandHandler(CMD_LANGUAGE, self._make_args_handler(session.handle_language_command))
        )
        self._app.add_handler(
            CommandHandler(CMD_TEMPERATURE, self._make_args_handler(session.handle_temperature_command))
        )
        self._app.add_handler(
            CommandHandler(CMD_TIMESTAMPS, self._make_args_handler(session.handle_timestamps_command))
        )
        self._app.add_handler(CommandHandler(CMD_RETRY, self._make_retry_handler()))
        self._app.add_handler(CommandHandler(CMD_SAVE, self._make_save_handler()))
        self._app.add_handler(TGMessageHandler(MEDIA_FILTER, self._make_media_handler()))
        self._app.add_handler(
            TGMessageHandler(filters.TEXT & ~filters.COMMAND, self._make_text_handler())
        )
        self._app.run_polling()

    async def send_message(self, to: str, text: str) -> bool:
        match self._app:
            case None:
                logger.error("send_message called before run()")
                return False
            case app:
                try:
                    _ = [
                        await app.bot.send_message(chat_id=int(to), text=chunk)
                        for chunk in split_message(text)
                    ]
                    return True
                except Exception as exc:
                    logger.error(MSG_SEND_FAIL, exc)
                    return False

    async def send_document(self, to: str, path: Path, caption: str | None = None) -> bool:
        match self._app:
            case None:
                logger.error("send_document called before run()")
                return False
            case app:
                try:
                    await app.bot.send_document(
                        chat_id=int(to), document=path, filename=path.name, caption=caption
                    )
                    return True
                except Exception as exc:
                    logger.error(MSG_SEND_FAIL, exc)
                    return False

    # ── helpers (also used in tests) ─────────────────────────────────────────

    def _is_allowed(self, update: Update) -> bool:
        if update.effective_chat is None:
            return False
        incoming = normalize_chat_id(str(update.effective_chat.id))
        allowed = normalize_chat_id(self._allowed_chat_id)
        return incoming == allowed

    def _allowed_sender(self, update: Update) -> Optional[str]:
        match self._is_allowed(update):
            case False:
                chat_id = update.effective_chat.id if update.effective_chat else "?"
                logger.warning(MSG_BLOCKED_CHAT, chat_id)
                return None
            case True:
                return str(update.effective_chat.id)

    @staticmethod
    def _command_args(context: ContextTypes.DEFAULT_TYPE) -> str:
        return " ".join(context.args or [])

    def _update_to_media(self, update: Update) -> Optional[MediaMessage]:
        if update.message is None or update.effective_chat is None:
            return None
        msg, chat = update.message, update.effective_chat
        attachment = next(
            (
                a
                for a in (msg.video, msg.video_note, msg.voice, msg.audio, msg.document)
                if a is not None
            ),
            None,
        )
        match attachment:
            case None:
                return None
            case media:
                return MediaMessage(
                    sender=str(chat.id),
                    file_id=media.file_id,
                    timestamp=int(msg.date.timestamp()),
                    filename=getattr(media, "file_name", None),
                    mime_type=getattr(media, "mime_type", None),
                    file_size=media.file_size,
                    caption=(msg.caption or "").strip() or None,
                )

    # ── internal handler factory ──────────────────────────────────────────────

    def _make_help_handler(self) -> Callable:
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            match self._allowed_sender(update):
                case None:
                    return
                case sender:
                    await self.send_message(sender, MSG_HELP)

        return _handler

    def _make_sender_handler(self, callback: Callable[[str], str]) -> Callable:
        """Handler for commands that only need the sender ID."""
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            match self._allowed_sender(update):
                case None:
                    return
                case sender:
                    await self.send_message(sender, callback(sender))

        return _handler

    def _make_args_handler(self, callback: Callable[[str, str], str]) -> Callable:
        """Handler for commands that pass (sender, args) to the callback."""
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            match self._allowed_sender(update):
                case None:
                    return
                case sender:
                    await self.send_message(sender, callback(sender, self._command_args(context)))

        return _handler

    def _make_text_handler(self) -> Callable:
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            match self._allowed_sender(update):
                case None:
                    return
                case sender:
                    await self.send_message(sender, MSG_SEND_MEDIA)

        return _handler

    def _make_media_handler(self) -> Callable:
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            match self._allowed_sender(update):
                case None:
                    return
                case _:
                    pass

            match self._update_to_media(update):
                case None:
                    return
                case message:
                    fetch = make_fetch(context.bot)
                    await self._process(
                        message.sender,
                        context.bot,
                        lambda: self._session.handle_media(message, fetch),
                    )

        return _handler

    def _make_retry_handler(self) -> Callable:
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            match self._allowed_sender(update):
                case None:
                    return
                case sender:
                    fetch = make_fetch(context.bot)
                    await self._process(
                        sender,
                        context.bot,
                        lambda: self._session.handle_retry_command(sender, fetch),
                    )

        return _handler

    def _make_save_handler(self) -> Callable:
        async def _handler(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
            match self._allowed_sender(update):
                case None:
                    return
                case sender:
                    pass

            match self._session.handle_save_command(sender):
                case (reply, None):
                    await self.send_message(sender, reply)
                case (reply, path):
                    await self.send_document(sender, path, caption=reply)

        return _handler

    async def _process(
        self,
        sender: str,
        bot: Bot,
        work: Callable[[], Awaitable[str]],
    ) -> None:
        """Run ``work`` with the busy indicator on; always ends in exactly one reply."""
        start = time.time()
        busy = TelegramBusyIndicator(bot)
        await busy.start(sender)
        try:
            reply = await work()
        except Exception:
            logger.exception("Handling media failed")
            reply = MSG_UNEXPECTED_FAILURE
        finally:
            await busy.stop(sender)

        logger.debug("Replied to %s after %.1fs", sender, time.time() - start)
        await self.send_message(sender, reply)
