import json
import logging
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any, NamedTuple, Optional

from vidscribe.message_handler import MediaMessage, normalize_chat_id

logger = logging.getLogger(__name__)

MEDIA_STORE_PATH = Path(".last_media.json")
PREFERENCE_STORE_PATH = Path(".chat_preferences.json")
TRANSCRIPT_STORE_PATH = Path(".last_transcripts.json")


class ChatStore:
    """JSON file of chat id → JSON value, rewritten on every change."""

    def __init__(self, path: Path):
        self._path = path
        self._store: dict[str, Any] = {}
        self._load()

    def _key(self, sender: str) -> str:
        return normalize_chat_id(sender) or sender

    def _load(self) -> None:
        match self._path.exists():
            case True:
                try:
                    with open(self._path) as f:
                        raw = json.load(f)
                    self._store = dict(raw)
                except Exception as e:
                    logger.warning("Store load failed (%s): %s, starting fresh", self._path.name, e)
            case False:
                pass

    def _save(self) -> None:
        try:
            with open(self._path, "w") as f:
                json.dump(self._store, f, indent=2)
        except Exception as e:
            logger.warning("Store save failed (%s): %s", self._path.name, e)

    def get(self, sender: str) -> Any:
        return self._store.get(self._key(sender))

    def set(self, sender: str, value: Any) -> None:
        self._store[self._key(sender)] = value
        self._save()

    def delete(self, sender: str) -> None:
        match self._store.pop(self._key(sender), None):
            case None:
                pass
            case _:
                self._save()


class MediaStore(ChatStore):
    """Last media received per chat, for /retry."""

    def __init__(self, path: Path = MEDIA_STORE_PATH):
        super().__init__(path)

    def remember(self, message: MediaMessage) -> None:
        self.set(message.sender, message.to_record())

    def last(self, sender: str) -> Optional[MediaMessage]:
        match self.get(sender):
            case dict() as record:
                try:
                    return MediaMessage.from_record(record)
                except TypeError as e:
                    logger.warning("Dropping unreadable media record for %s: %s", sender, e)
                    return None
            case _:
                return None


@dataclass(frozen=True)
class ChatPreferences:
    response_format: str
    language: Optional[str] = None
    temperature: Optional[float] = None
    timestamp_granularities: tuple[str, ...] = ()


class PreferenceStore(ChatStore):
    """Per-chat transcription options; unset chats get the configured defaults."""

    def __init__(self, defaults: ChatPreferences, path: Path = PREFERENCE_STORE_PATH):
        self._defaults = defaults
        super().__init__(path)

    def preferences(self, sender: str) -> ChatPreferences:
        match self.get(sender):
            case dict() as record:
                merged = {**asdict(self._defaults), **record}
                merged["timestamp_granularities"] = tuple(merged["timestamp_granularities"] or ())
                try:
                    return ChatPreferences(**merged)
                except TypeError as e:
                    logger.warning("Ignoring unreadable preferences for %s: %s", sender, e)
                    return self._defaults
            case _:
                return self._defaults

    def update(self, sender: str, **changes: Any) -> ChatPreferences:
        prefs = replace(self.preferences(sender), **changes)
        record = asdict(prefs)
        record["timestamp_granularities"] = list(prefs.timestamp_granularities)
        self.set(sender, record)
        return prefs


class SavedTranscript(NamedTuple):
    source_name: str
    response_format: str
    body: str


class TranscriptStore(ChatStore):
    """Last successful transcript per chat, for /save."""

    def __init__(self, path: Path = TRANSCRIPT_STORE_PATH):
        super().__init__(path)

    def remember(self, sender: str, transcript: SavedTranscript) -> None:
        self.set(sender, transcript._asdict())

    def last(self, sender: str) -> Optional[SavedTranscript]:
        match self.get(sender):
            case dict() as record:
                try:
                    return SavedTranscript(**record)
                except TypeError as e:
                    logger.warning("Dropping unreadable transcript for %s: %s", sender, e)
                    return None
            case _:
                return None
