import io

import pytest

from vidscribe.transcription.errors import ValidationError
from vidscribe.transcription.media import (
    AAC,
    AMR,
    AVI,
    FLAC,
    M4A,
    MKV,
    MOV,
    MP3,
    MP4,
    MPEG,
    MPEG_TS,
    OGG,
    THREE_GP,
    WAV,
    WEBM,
    load_media,
    sniff_container,
)

PAD = b"\x00" * 48
TS_PACKET = b"\x47\x40\x00\x10" + b"\xff" * 184


@pytest.mark.parametrize(
    "head, expected",
    [
        (b"\x00\x00\x00\x18ftypisom" + PAD, MP4),
        (b"\x00\x00\x00\x20ftypM4A " + PAD, M4A),
        (b"\x00\x00\x00\x14ftypqt  " + PAD, MOV),
        (b"\x1a\x45\xdf\xa3\x9f\x42\x86\x81\x01webm" + PAD, WEBM),
        (b"\x1a\x45\xdf\xa3\x9f\x42\x86\x81\x01matroska" + PAD, MKV),
        (b"OggS\x00\x02" + PAD, OGG),
        (b"RIFF\x24\x08\x00\x00WAVEfmt " + PAD, WAV),
        (b"RIFF\x24\x08\x00\x00AVI LIST" + PAD, AVI),
        (b"fLaC\x00\x00\x00\x22" + PAD, FLAC),
        (b"ID3\x04\x00" + PAD, MP3),
        (b"\xff\xfb\x90\x64" + PAD, MP3),
        (b"\xff\xf1\x50\x80" + PAD, AAC),
        (b"\x00\x00\x00\x18ftypmp42" + PAD, MP4),
        (b"\x00\x00\x00\x18ftypdash" + PAD, MP4),
        (b"\x00\x00\x00\x20ftypM4B " + PAD, M4A),
        (b"\x00\x00\x00\x14ftyp3gp4" + PAD, THREE_GP),
        (b"\x00\x00\x00\x14ftyp3g2a" + PAD, THREE_GP),
        (b"#!AMR\n" + PAD, AMR),
        (b"\x00\x00\x01\xba\x44\x00\x04" + PAD, MPEG),
        (TS_PACKET * 2, MPEG_TS),
    ],
)
def test_sniff_known_containers(head, expected):
    assert sniff_container(head) == expected


def test_sniff_rejects_text_and_images():
    assert sniff_container(b"hello, this is not media") is None
    assert sniff_container(b"\x89PNG\r\n\x1a\n" + PAD) is None


@pytest.mark.parametrize("brand", [b"heic", b"heix", b"mif1", b"msf1", b"avif", b"avis", b"jp2 "])
def test_still_image_brands_are_not_media(brand):
    data = b"\x00\x00\x00\x18ftyp" + brand + PAD
    assert sniff_container(data) is None
    with pytest.raises(ValidationError):
        load_media(data)


@pytest.mark.parametrize(
    "data",
    [
        b"\x47" + PAD,
        b"\x47" + b"\x00" * 300,
        TS_PACKET,
    ],
)
def test_lone_sync_byte_is_not_mpeg_ts(data):
    assert sniff_container(data) is None


def test_load_bytes_gets_default_name_with_extension():
    payload = load_media(b"OggS\x00\x02" + PAD)
    assert payload.filename == "media.ogg"
    assert payload.mime_type == "audio/ogg"


def test_load_keeps_explicit_filename():
    payload = load_media(b"\x00\x00\x00\x18ftypisom" + PAD, filename="talk.mp4")
    assert payload.filename == "talk.mp4"


def test_load_adds_extension_to_bare_filename():
    payload = load_media(b"\x00\x00\x00\x18ftypisom" + PAD, filename="talk")
    assert payload.filename == "talk.mp4"


def test_load_from_path(tmp_path):
    path = tmp_path / "voice.wav"
    path.write_bytes(b"RIFF\x24\x08\x00\x00WAVEfmt " + PAD)
    payload = load_media(str(path))
    assert payload.filename == "voice.wav"
    assert payload.mime_type == "audio/wav"


def test_load_from_stream_does_not_close_it():
    stream = io.BytesIO(b"fLaC\x00\x00\x00\x22" + PAD)
    payload = load_media(stream)
    assert payload.mime_type == "audio/flac"
    assert not stream.closed


def test_load_missing_file_is_validation_error(tmp_path):
    with pytest.raises(ValidationError, match="Cannot read"):
        load_media(tmp_path / "missing.mp4")


def test_load_text_stream_is_rejected():
    with pytest.raises(ValidationError, match="binary"):
        load_media(io.StringIO("text"))


def test_load_empty_is_rejected():
    with pytest.raises(ValidationError, match="empty"):
        load_media(b"")


def test_load_unknown_container_is_rejected():
    with pytest.raises(ValidationError, match="not a supported"):
        load_media(b"plain text document")


def test_payload_size_in_megabytes():
    payload = load_media(b"ID3" + b"\x00" * (1024 * 1024 - 3))
    assert payload.size_mb == pytest.approx(1.0)
