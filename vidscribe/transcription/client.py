"""TranscriptionClient — abstract base for speech-to-text backends."""
import asyncio
from abc import ABC, abstractmethod
from typing import Optional

from vidscribe.transcription.types import TranscriptionRequest, TranscriptionResult


class TranscriptionClient(ABC):

    @property
    @abstractmethod
    def endpoint_url(self) -> str: ...

    @abstractmethod
    def configure(self, endpoint_url: str) -> None:
        """Point subsequent calls at ``endpoint_url``. No network effect."""
        ...

    @abstractmethod
    async def transcribe(
        self,
        request: TranscriptionRequest,
        *,
        timeout: Optional[float] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> TranscriptionResult:
        """Transcribe one media payload. Raises TranscriptionError on failure."""
        ...
