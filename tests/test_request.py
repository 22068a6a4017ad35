import pytest

from vidscribe.transcription.errors import ValidationError
from vidscribe.transcription.types import (
    ResponseFormat,
    TimestampGranularity,
    TranscriptionRequest,
)


def make_request(**kwargs) -> TranscriptionRequest:
    return TranscriptionRequest(media=b"media", **kwargs)


def test_defaults_to_json_format():
    assert make_request().validate() is ResponseFormat.JSON


def test_string_format_is_coerced():
    assert make_request(response_format="srt").validate() is ResponseFormat.SRT


def test_unknown_format_is_rejected():
    with pytest.raises(ValidationError, match="format"):
        make_request(response_format="docx").validate()


@pytest.mark.parametrize("temperature", [0, 0.5, 1])
def test_temperature_bounds_are_inclusive(temperature):
    make_request(temperature=temperature).validate()


@pytest.mark.parametrize("temperature", [-0.01, 1.01, True, "0.5"])
def test_bad_temperature_is_rejected(temperature):
    with pytest.raises(ValidationError):
        make_request(temperature=temperature).validate()


@pytest.mark.parametrize("language", ["eng", "e", "e1", ""])
def test_language_must_be_two_letters(language):
    with pytest.raises(ValidationError, match="two-letter"):
        make_request(language=language).validate()


def test_granularities_require_verbose_json():
    request = make_request(
        response_format=ResponseFormat.JSON,
        timestamp_granularities=frozenset({TimestampGranularity.SEGMENT}),
    )
    with pytest.raises(ValidationError, match="verbose_json"):
        request.validate()


def test_granularities_with_verbose_json_are_accepted():
    request = make_request(
        response_format=ResponseFormat.VERBOSE_JSON,
        timestamp_granularities=frozenset({"segment", "word"}),
    )
    assert request.validate() is ResponseFormat.VERBOSE_JSON
    assert request.granularity_values() == ["segment", "word"]


def test_unknown_granularity_is_rejected():
    request = make_request(
        response_format=ResponseFormat.VERBOSE_JSON,
        timestamp_granularities=frozenset({"sentence"}),
    )
    with pytest.raises(ValidationError):
        request.validate()


def test_request_is_immutable():
    request = make_request()
    with pytest.raises(Exception):
        request.language = "en"


def test_missing_granularities_mean_none_requested():
    request = make_request(timestamp_granularities=None)
    assert request.validate() is ResponseFormat.JSON
    assert request.granularity_values() == []


def test_non_iterable_granularities_are_rejected():
    request = make_request(response_format=ResponseFormat.VERBOSE_JSON, timestamp_granularities=5)
    with pytest.raises(ValidationError):
        request.validate()


@pytest.mark.parametrize("prompt", [42, b"bytes prompt", ["a", "b"]])
def test_non_text_prompt_is_rejected(prompt):
    with pytest.raises(ValidationError, match="Prompt"):
        make_request(prompt=prompt).validate()


def test_text_prompt_is_accepted():
    assert make_request(prompt="Names: Ada, Grace").validate() is ResponseFormat.JSON
