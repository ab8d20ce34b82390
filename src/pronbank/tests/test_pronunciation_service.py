"""Tests for pronunciation data generation."""
from unittest.mock import Mock

import pytest
from gtts.tts import gTTSError

from pronbank.config import AudioSettings
from pronbank.services.pronunciation_service import (
    SPEECH_SYNTHESIS,
    PronunciationGenerator,
    ipa_to_english,
)


@pytest.fixture
def generator(tmp_path):
    return PronunciationGenerator(audio_dir=tmp_path, audio=AudioSettings(language="en", tld="co.uk", timeout=2))


@pytest.fixture
def mock_convert(mocker):
    return mocker.patch("pronbank.services.pronunciation_service.ipa.convert")


@pytest.fixture
def mock_gtts(mocker):
    return mocker.patch("pronbank.services.pronunciation_service.gTTS")


def test_generate_phonetic(mock_convert):
    mock_convert.return_value = "təˈmeɪtoʊ"
    assert PronunciationGenerator.generate_phonetic("tomato") == "/təˈmeɪtoʊ/"
    mock_convert.assert_called_once_with("tomato")


def test_generate_phonetic_unknown_word(mock_convert):
    mock_convert.return_value = "blorptastic*"
    assert PronunciationGenerator.generate_phonetic("blorptastic") == ""


def test_generate_phonetic_error(mock_convert):
    mock_convert.side_effect = RuntimeError("dictionary unavailable")
    assert PronunciationGenerator.generate_phonetic("tomato") == ""


@pytest.mark.parametrize(
    "word, phonetic, expected",
    [
        ("about", "/əˈbaʊt/", "uh-BOWT"),
        ("water", "/ˈwɔtər/", "WAWTER"),
        ("understand", "/ˌʌndərˈstænd/", "uhnder-STAND"),
    ],
)
def test_generate_stress_pattern(word, phonetic, expected):
    assert PronunciationGenerator.generate_stress_pattern(word, phonetic) == expected


def test_stress_pattern_falls_back_to_spelling():
    assert PronunciationGenerator.generate_stress_pattern("cat", "") == "CAT"
    assert PronunciationGenerator.generate_stress_pattern("cat", "/cat/") == "CAT"
    assert PronunciationGenerator.generate_stress_pattern("cat", "/kæt/") == "CAT"


def test_ipa_to_english_maps_each_sound_once():
    # "ɛ" becomes "eh" and must not be re-read as "e" -> "ay"
    assert ipa_to_english("bɛd") == "behd"
    assert ipa_to_english("ʃip") == "sheep"


def test_generate_audio(generator, mock_gtts, tmp_path):
    path = generator.generate_audio("Hello World")

    assert path == str(tmp_path / "hello_world.mp3")
    mock_gtts.assert_called_once_with(text="Hello World", lang="en", tld="co.uk", timeout=2)
    mock_gtts.return_value.save.assert_called_once_with(path)


def test_generate_audio_failure_uses_speech_synthesis(generator, mock_gtts):
    mock_gtts.return_value.save.side_effect = gTTSError("429 Too Many Requests")
    assert generator.generate_audio("tomato") == SPEECH_SYNTHESIS


def test_resolve_audio_reuses_existing_file(generator, mock_gtts, tmp_path):
    existing = tmp_path / "tomato.mp3"
    existing.write_bytes(b"ID3")

    assert generator.resolve_audio("tomato") == str(existing)
    mock_gtts.assert_not_called()


def test_generate_pronunciation_data(generator, mock_convert, mock_gtts):
    mock_convert.return_value = "əˈbaʊt"

    data = generator.generate_pronunciation_data("about")

    assert data.phonetic == "/əˈbaʊt/"
    assert data.stress_pattern == "uh-BOWT"
    assert data.readable_form == data.stress_pattern
    assert data.audio_reference.endswith("about.mp3")


def test_generate_pronunciation_data_without_dictionary_entry(generator, mock_convert, mocker):
    mock_convert.return_value = "zyx*"
    mocker.patch.object(generator, "resolve_audio", Mock(return_value=SPEECH_SYNTHESIS))

    data = generator.generate_pronunciation_data("zyx")

    assert data.phonetic == "/zyx/"
    assert data.stress_pattern == "ZYX"
    assert data.audio_reference == ""
