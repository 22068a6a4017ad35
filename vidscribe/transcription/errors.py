"""Transcription error taxonomy — every failure of a transcribe call is one of these."""


class TranscriptionError(Exception):
    """Base for all transcription failures."""


class ValidationError(TranscriptionError):
    """Request rejected locally, before any network I/O."""


class ServiceUnreachable(TranscriptionError):
    """No response received from the endpoint."""


class TranscriptionTimeout(TranscriptionError):
    """The exchange did not finish within the allowed time."""


class TranscriptionCancelled(TranscriptionError):
    """The caller cancelled the exchange."""


class ServiceRejected(TranscriptionError):

    def __init__(self, status_code: int, service_message: str) -> None:
        super().__init__(f"HTTP {status_code}: {service_message}")
        self.status_code = status_code
        self.service_message = service_message


class MalformedResponse(TranscriptionError):
    """Success status, but the body does not match the requested format."""
