from dataclasses import asdict, dataclass
from typing import Optional


@dataclass(frozen=True)
class MediaMessage:
    sender: str
    file_id: str
    timestamp: int
    filename: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
    caption: Optional[str] = None

    def to_record(self) -> dict:
        return asdict(self)

    @classmethod
    def from_record(cls, record: dict) -> "MediaMessage":
        return cls(**record)


def normalize_chat_id(s: str) -> str:
    """Digits only, keeping the leading minus of group chat ids."""
    digits = "".join(c for c in s if c.isdigit())
    match (s.strip().startswith("-"), digits):
        case (True, d) if d:
            return "-" + d
        case _:
            return digits
