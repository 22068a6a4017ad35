"""Abstract interfaces for transport-agnostic bot clients."""
from abc import ABC, abstractmethod
from pathlib import Path


class BusyIndicator(ABC):
    @abstractmethod
    async def start(self, to: str) -> None: ...

    @abstractmethod
    async def stop(self, to: str) -> None: ...


class BotClient(ABC):
    @abstractmethod
    def run(self) -> None: ...

    @abstractmethod
    async def send_message(self, to: str, text: str) -> bool: ...

    @abstractmethod
    async def send_document(self, to: str, path: Path, caption: str | None = None) -> bool: ...
