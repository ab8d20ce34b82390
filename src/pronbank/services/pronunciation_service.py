"""Pronunciation data for words: IPA, stress pattern, readable form and audio."""
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Protocol

import eng_to_ipa as ipa
from gtts import gTTS
from gtts.tts import gTTSError

from pronbank.config import AudioSettings, settings

logger = logging.getLogger(__name__)

# Audio reference meaning "no file, let the device speak the word"
SPEECH_SYNTHESIS = ""


class AudioResolver(Protocol):
    """Anything that can produce playable audio for a word."""

    def __call__(self, word: str) -> str:
        ...


@dataclass
class PronunciationData:
    """Presentation strings and audio for a newly added word."""
    phonetic: str
    stress_pattern: str
    readable_form: str
    audio_reference: str


IPA_TO_ENGLISH = {
    "ɑːr": "ar", "ɑː": "ah", "æ": "a", "eɪ": "ay", "aɪ": "eye",
    "aʊ": "ow", "ɔː": "aw", "ɔɪ": "oy", "oʊ": "oh", "əʊ": "oh",
    "ɪə": "eer", "eə": "air", "ʊə": "oor", "juː": "yoo", "uː": "oo",
    "iː": "ee", "ɜːr": "ur", "ɜː": "ur", "ɝ": "ur", "ər": "er",
    "əl": "ul", "ən": "un", "əm": "um", "ə": "uh", "ɚ": "er",
    "ɪ": "ih", "i": "ee", "ɛ": "eh", "e": "ay", "ʌ": "uh",
    "ʊ": "uu", "u": "oo", "ɒ": "ah", "ɔ": "aw", "ɑ": "ah",
    "θ": "th", "ð": "th", "tʃ": "ch", "dʒ": "j", "ʃ": "sh",
    "ʒ": "zh", "ŋ": "ng", "j": "y", "ɡ": "g", "x": "k",
    "ː": "", "ˑ": "", "ʔ": "",
}

# Longest sounds first so digraphs win over their parts; one pass, so output is never re-mapped
IPA_SOUND = re.compile("|".join(re.escape(s) for s in sorted(IPA_TO_ENGLISH, key=len, reverse=True)))


SIMPLIFICATIONS = [
    (re.compile(r"uhuh"), "uh"),
    (re.compile(r"erer"), "er"),
    (re.compile(r"ihih"), "ih"),
    (re.compile(r"([aeiou])\1{2,}"), r"\1\1"),
    (re.compile(r"uhbul$"), "ble"),
    (re.compile(r"tuh$"), "t"),
    (re.compile(r"duh$"), "d"),
]

SPELLING_SYLLABLE = re.compile(r"[^aeiou]*[aeiou]+(?:[^aeiou]*$|[^aeiou](?=[aeiou]))?", re.IGNORECASE)


def ipa_to_english(text: str) -> str:
    """Approximate an IPA fragment with plain English letters."""
    text = IPA_SOUND.sub(lambda m: IPA_TO_ENGLISH[m.group(0)], text)
    text = re.sub(r"[^a-z-]", "", text, flags=re.IGNORECASE)
    for pattern, replacement in SIMPLIFICATIONS:
        text = pattern.sub(replacement, text)
    return text


def _spelling_pattern(word: str) -> str:
    syllables = SPELLING_SYLLABLE.findall(word) or [word]
    if len(syllables) == 1:
        return word.upper()
    return "-".join([syllables[0].upper()] + [s.lower() for s in syllables[1:]])


class PronunciationGenerator:
    """Generates pronunciation data for words."""

    def __init__(self, audio_dir: Optional[Path] = None, audio: Optional[AudioSettings] = None):
        self.audio_dir = Path(audio_dir or settings.paths.pronunciations_dir)
        self.audio = audio or settings.audio

    @staticmethod
    def generate_phonetic(word: str) -> str:
        """IPA transcription of a word, empty when it is not in the dictionary."""
        try:
            transcription = ipa.convert(word)
        except Exception as e:
            logger.error(f"Error generating transcription for word: {word}, error: {e}")
            return ""
        # eng_to_ipa marks words it could not find with a trailing asterisk
        if not transcription or "*" in transcription:
            logger.info(f"No transcription found for word: {word}")
            return ""
        logger.info(f"Transcription generated for word: {word}, transcription: {transcription}")
        return f"/{transcription}/"

    @staticmethod
    def generate_stress_pattern(word: str, phonetic: str) -> str:
        """Readable syllables with the primary-stressed syllable in capitals, e.g. "pruh-nun-see-AY-shun"."""
        if not phonetic or phonetic == f"/{word}/":
            return _spelling_pattern(word)

        clean = re.sub(r"\(.*?\)", "", phonetic.strip().strip("/"))
        parts = re.split(r"([ˈˌ])", clean)
        if len(parts) <= 1:
            return _spelling_pattern(word)

        syllables: List[str] = []
        primary = False
        for part in parts:
            if part == "ˈ":
                primary = True
            elif part == "ˌ":
                primary = False
            elif part.strip():
                syllable = ipa_to_english(part)
                if syllable:
                    syllables.append(syllable.upper() if primary else syllable.lower())
                    primary = False

        if not syllables:
            return _spelling_pattern(word)
        return "-".join(syllables)

    def audio_path(self, word: str) -> Path:
        return self.audio_dir / f"{self._sanitize_filename(word)}.mp3"

    def generate_audio(self, word: str) -> str:
        """Synthesize an mp3 for the word; the speech synthesis marker on failure."""
        path = self.audio_path(word)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tts = gTTS(text=word, lang=self.audio.language, tld=self.audio.tld, timeout=self.audio.timeout)
            tts.save(str(path))
        except (gTTSError, OSError, ValueError) as e:
            logger.warning(f"Error generating pronunciation for word: {word}, error: {e}")
            return SPEECH_SYNTHESIS
        logger.info(f"Pronunciation generated for word: {word}, file: {path}")
        return str(path)

    def resolve_audio(self, word: str) -> str:
        """Existing audio file for the word, generating it when missing."""
        path = self.audio_path(word)
        if path.exists():
            return str(path)
        return self.generate_audio(word)

    def generate_pronunciation_data(self, word: str) -> PronunciationData:
        """Generate all pronunciation data for a word."""
        phonetic = self.generate_phonetic(word)
        pattern = self.generate_stress_pattern(word, phonetic)
        return PronunciationData(
            phonetic=phonetic or f"/{word}/",
            stress_pattern=pattern,
            readable_form=pattern,
            audio_reference=self.resolve_audio(word),
        )

    @staticmethod
    def _sanitize_filename(word: str) -> str:
        """Sanitize word for use in filename."""
        return re.sub(r"[^a-zA-Z0-9]", "_", word.lower())
