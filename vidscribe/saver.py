"""FileSaver — where saved transcripts end up."""
import logging
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)


class FileSaver(ABC):
    @abstractmethod
    def save(self, filename: str, text: str) -> Path:
        """Persist ``text`` under ``filename`` and return its location. Raises OSError."""
        ...


class DirectoryFileSaver(FileSaver):

    def __init__(self, root: Path | str) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def save(self, filename: str, text: str) -> Path:
        self._root.mkdir(parents=True, exist_ok=True)
        target = self._root / Path(filename).name
        target.write_text(text, encoding="utf-8")
        logger.info("Saved transcript to %s", target)
        return target
