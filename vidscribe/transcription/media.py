"""Media loading and container sniffing.

The client never acquires media itself: callers hand over bytes, a path or an
open binary stream, and this module turns that into a named payload with a
MIME type, refusing anything that does not look like an audio/video container.
"""
import os
from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple, Optional

from vidscribe.constants import DEFAULT_MEDIA_STEM, SNIFF_BYTES
from vidscribe.transcription.errors import ValidationError
from vidscribe.transcription.types import MediaSource


class Container(NamedTuple):
    mime_type: str
    extension: str


MP4 = Container("video/mp4", "mp4")
M4A = Container("audio/mp4", "m4a")
MOV = Container("video/quicktime", "mov")
THREE_GP = Container("video/3gpp", "3gp")
WEBM = Container("video/webm", "webm")
MKV = Container("video/x-matroska", "mkv")
OGG = Container("audio/ogg", "ogg")
WAV = Container("audio/wav", "wav")
AVI = Container("video/x-msvideo", "avi")
FLAC = Container("audio/flac", "flac")
MP3 = Container("audio/mpeg", "mp3")
AAC = Container("audio/aac", "aac")
AMR = Container("audio/amr", "amr")
MPEG = Container("video/mpeg", "mpg")
MPEG_TS = Container("video/mp2t", "ts")

_MPEG_TS_PACKET = 188

# ISO base media brands that carry audio or video; image brands (heic, avif, mif1) are absent.
_MP4_BRANDS = frozenset({
    b"isom", b"iso2", b"iso3", b"iso4", b"iso5", b"iso6",
    b"mp41", b"mp42", b"avc1", b"dash", b"M4V ", b"M4VP", b"MSNV", b"f4v ",
})


@dataclass(frozen=True)
class MediaPayload:
    filename: str
    content: bytes
    mime_type: str

    @property
    def size_mb(self) -> float:
        return len(self.content) / 1024 / 1024


def _sniff_iso_bmff(data: bytes) -> Optional[Container]:
    brand = data[8:12]
    match brand:
        case b"M4A " | b"M4B ":
            return M4A
        case b"qt  ":
            return MOV
        case _ if brand.startswith(b"3g"):
            return THREE_GP
        case _ if brand in _MP4_BRANDS:
            return MP4
        case _:
            return None


def sniff_container(data: bytes) -> Optional[Container]:
    """Identify the container from its leading magic bytes, or None."""
    head = data[:SNIFF_BYTES]
    match head:
        case _ if head[4:8] == b"ftyp":
            return _sniff_iso_bmff(head)
        case _ if head.startswith(b"\x1a\x45\xdf\xa3"):
            return WEBM if b"webm" in head else MKV
        case _ if head.startswith(b"OggS"):
            return OGG
        case _ if head.startswith(b"RIFF") and head[8:12] == b"WAVE":
            return WAV
        case _ if head.startswith(b"RIFF") and head[8:12] == b"AVI ":
            return AVI
        case _ if head.startswith(b"fLaC"):
            return FLAC
        case _ if head.startswith(b"ID3"):
            return MP3
        case _ if head.startswith(b"#!AMR"):
            return AMR
        case _ if head.startswith(b"\x00\x00\x01\xba"):
            return MPEG
        case _ if head[:1] == b"\x47" and data[_MPEG_TS_PACKET:_MPEG_TS_PACKET + 1] == b"\x47":
            return MPEG_TS
        case _ if len(head) >= 2 and head[0] == 0xFF and head[1] & 0xF6 == 0xF0:
            return AAC
        case _ if len(head) >= 2 and head[0] == 0xFF and head[1] & 0xE0 == 0xE0:
            return MP3
        case _:
            return None


def _read_source(source: MediaSource) -> tuple[bytes, Optional[str]]:
    match source:
        case bytes() | bytearray() | memoryview():
            return bytes(source), None
        case str() | os.PathLike():
            path = Path(source)
            try:
                return path.read_bytes(), path.name
            except OSError as exc:
                raise ValidationError(f"Cannot read media file {path}: {exc.strerror}") from exc
        case _ if hasattr(source, "read"):
            data = source.read()
            match data:
                case bytes() | bytearray():
                    name = getattr(source, "name", None)
                    return bytes(data), os.path.basename(name) if isinstance(name, str) else None
                case _:
                    raise ValidationError("Media stream must be opened in binary mode")
        case _:
            raise ValidationError(f"Unsupported media handle: {type(source).__name__}")


def load_media(source: MediaSource, filename: Optional[str] = None) -> MediaPayload:
    """Read ``source`` into a MediaPayload. Raises ValidationError."""
    content, source_name = _read_source(source)
    match content:
        case b"":
            raise ValidationError("Media is empty")
        case _:
            pass

    container = sniff_container(content)
    match container:
        case None:
            raise ValidationError("Media is not a supported audio or video container")
        case _:
            pass

    name = filename or source_name or DEFAULT_MEDIA_STEM
    match Path(name).suffix:
        case "":
            name = f"{name}.{container.extension}"
        case _:
            pass
    return MediaPayload(filename=name, content=content, mime_type=container.mime_type)
