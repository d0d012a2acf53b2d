"""Query/render pipeline: lookup-or-fetch, word of the day, and speak-on-demand.

All mutable front-end state lives on a `Session`; the pipeline only changes it
through `state.transition`, so every step can be driven from tests without a
browser or an audio device.
"""
import base64
from typing import Callable, Optional

from log import get_logger

logger = get_logger("hakeena.pipeline")

from audio import AudioOutput, PlaybackSlot
from cache import LookupCache
from client import ProxyClient
from models import (
    DEFAULT_LANGUAGE, RECOGNITION_LOCALES, SUPPORTED_LANGUAGES, WORD_OF_THE_DAY,
    DictionaryEntry, translate,
)
from llm import lookup_prompt, parse_json_object
from state import (
    ViewState, View, ExampleRow, render, transition,
    Submit, Loaded, Failed, SpeechFailed, SpeechPlayed, Back, SwitchLanguage,
    WordOfTheDayRequested, WordOfTheDayLoaded, WordOfTheDayFailed,
)
from wav import SAMPLE_RATE, wrap_pcm


class SpeechUnavailable(Exception):
    """The speech proxy answered without audio."""


def _check_language(lang: str) -> str:
    if lang not in SUPPORTED_LANGUAGES:
        raise ValueError(f"Unsupported language: {lang}")
    return lang


def recognition_locale(lang: str) -> str:
    return RECOGNITION_LOCALES.get(lang, RECOGNITION_LOCALES[DEFAULT_LANGUAGE])


class Session:
    """Per-user front-end context: language, cache, view state, and the playback slot."""

    def __init__(self, language: str = DEFAULT_LANGUAGE):
        self.cache = LookupCache()
        self.state = ViewState(language=language)
        self.playback = PlaybackSlot()
        self.alerts: list = []

    @property
    def language(self) -> str:
        return self.state.language


class SpeakControl:
    """A speak button. Shows a busy indicator while its clip is being fetched."""

    BUSY_LABEL = "…"

    def __init__(self, label: str = "🔊"):
        self.label = label
        self.busy = False

    def begin(self) -> str:
        original = self.label
        self.label = self.BUSY_LABEL
        self.busy = True
        return original

    def restore(self, original: str):
        self.label = original
        self.busy = False

    @property
    def disabled(self) -> bool:
        return self.busy


class Pipeline:
    def __init__(self, api: ProxyClient, output: AudioOutput, session: Optional[Session] = None,
                 on_change: Optional[Callable[[View], None]] = None):
        self.api = api
        self.output = output
        self.session = session or Session()
        self.on_change = on_change

    @property
    def view(self) -> View:
        return render(self.session.state)

    def dispatch(self, event):
        self.session.state = transition(self.session.state, event)
        if self.on_change is not None:
            self.on_change(self.view)

    def _message(self, key: str, lang: Optional[str] = None) -> str:
        return translate(lang or self.session.language, key)

    def alert(self, key: str):
        message = self._message(key)
        self.session.alerts.append(message)
        logger.info("Alert shown", extra={"component": "pipeline", "detail": key})

    async def _fetch_entry(self, word: str, lang: str) -> DictionaryEntry:
        cached = self.session.cache.get(word, lang)
        if cached is not None:
            logger.info("Lookup cache hit", extra={"component": "cache", "word": word, "lang": lang})
            return cached

        text = await self.api.generate_text(lookup_prompt(word, lang))
        data = parse_json_object(text)
        if data is None:
            raise ValueError("Reply is not a JSON object")
        entry = DictionaryEntry.model_validate(data)
        self.session.cache.put(word, lang, entry)
        return entry

    async def lookup(self, word: str, language: Optional[str] = None) -> Optional[DictionaryEntry]:
        word = (word or "").strip()
        if not word:
            self.alert("error_no_word")
            return None
        lang = _check_language(language or self.session.language)

        self.dispatch(Submit(word=word, language=lang))
        try:
            entry = await self._fetch_entry(word, lang)
        except Exception:
            logger.exception("Lookup failed", extra={"component": "pipeline", "word": word, "lang": lang})
            self.dispatch(Failed(message=self._message("error_generic", lang)))
            return None
        self.dispatch(Loaded(entry=entry))
        return entry

    async def fetch_word_of_the_day(self, language: Optional[str] = None) -> Optional[DictionaryEntry]:
        lang = _check_language(language or self.session.language)
        word = WORD_OF_THE_DAY[lang]
        self.dispatch(WordOfTheDayRequested())
        try:
            entry = await self._fetch_entry(word, lang)
        except Exception:
            logger.exception("Word of the day failed", extra={"component": "pipeline", "word": word, "lang": lang})
            self.dispatch(WordOfTheDayFailed(message=self._message("error_generic", lang)))
            return None
        self.dispatch(WordOfTheDayLoaded(entry=entry))
        return entry

    async def speak(self, text: str, language: str, trigger: Optional[SpeakControl] = None) -> bool:
        original = trigger.begin() if trigger is not None else None
        self.session.playback.release()
        try:
            audio_b64 = await self.api.generate_speech(text, language)
            if not audio_b64:
                raise SpeechUnavailable("No audio data in server response")
            pcm = base64.b64decode(audio_b64, validate=True)
            decoded = self.output.decode(wrap_pcm(pcm, SAMPLE_RATE))
            self.session.playback.acquire(self.output.play(decoded))
        except Exception:
            logger.exception("Speech failed", extra={"component": "pipeline", "lang": language})
            self.dispatch(SpeechFailed(message=self._message("error_tts_unavailable")))
            return False
        finally:
            if trigger is not None:
                trigger.restore(original)
        self.dispatch(SpeechPlayed())
        return True

    async def speak_example(self, row: ExampleRow, trigger: Optional[SpeakControl] = None) -> bool:
        if row.speak.hidden:
            return False
        return await self.speak(row.speak.text, row.speak.lang, trigger)

    def back(self):
        self.dispatch(Back())

    async def set_language(self, lang: str) -> Optional[DictionaryEntry]:
        _check_language(lang)
        self.dispatch(SwitchLanguage(language=lang))
        return await self.fetch_word_of_the_day(lang)

    async def submit_transcript(self, transcript: str) -> Optional[DictionaryEntry]:
        """Run a lookup for what speech recognition heard."""
        return await self.lookup(transcript)

    def report_no_speech(self):
        self.alert("error_no_speech")
