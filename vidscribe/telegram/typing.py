"""Telegram busy indicator — repeats a chat action every N seconds until stopped."""
import asyncio
import logging

from telegram import Bot
from telegram.constants import ChatAction

from vidscribe.bot_client import BusyIndicator
from vidscribe.constants import TELEGRAM_BUSY_INTERVAL

logger = logging.getLogger(__name__)


async def _keep_busy(bot: Bot, chat_id: str, action: ChatAction, stop: asyncio.Event) -> None:
    while not stop.is_set():
        try:
            await bot.send_chat_action(chat_id=int(chat_id), action=action)
        except Exception as exc:
            logger.debug("Chat action failed: %s", exc)
        try:
            await asyncio.wait_for(stop.wait(), timeout=TELEGRAM_BUSY_INTERVAL)
        except asyncio.TimeoutError:
            pass


class TelegramBusyIndicator(BusyIndicator):
    """One indicator per in-flight call; ``start`` restarts it if already running."""

    def __init__(self, bot: Bot, action: ChatAction = ChatAction.TYPING) -> None:
        self._bot = bot
        self._action = action
        self._stop_event: asyncio.Event | None = None
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None

    async def start(self, to: str) -> None:
        await self.stop(to)
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(
            _keep_busy(self._bot, to, self._action, self._stop_event)
        )

    async def stop(self, to: str) -> None:
        match self._stop_event:
            case None:
                pass
            case event:
                event.set()

        match self._task:
            case None:
                pass
            case task:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
                self._task = None

        self._stop_event = None
