"""View state machine and render step for the dictionary front-end.

`transition(state, event)` is pure: it returns a new ViewState and never
touches the network or any output device. `render(state)` turns a state into a
plain view model that a terminal or HTML front-end can draw.
"""
import re as _re
from enum import Enum
from typing import Optional, List, Union

from pydantic import BaseModel, ConfigDict

from models import DEFAULT_LANGUAGE, DictionaryEntry, translate


class Screen(str, Enum):
    HOME = "home"
    RESULTS = "results"


class Status(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"
    LOADED = "loaded"


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class WordOfTheDayState(_Frozen):
    loading: bool = False
    entry: Optional[DictionaryEntry] = None
    error: Optional[str] = None


class ViewState(_Frozen):
    screen: Screen = Screen.HOME
    status: Status = Status.IDLE
    language: str = DEFAULT_LANGUAGE
    query: str = ""
    entry: Optional[DictionaryEntry] = None
    # Language the entry on screen was looked up in; the UI language can change under it
    entry_language: str = DEFAULT_LANGUAGE
    error: Optional[str] = None
    word_of_the_day: WordOfTheDayState = WordOfTheDayState()


# --- Events ---

class Submit(_Frozen):
    word: str
    # Defaults to the UI language
    language: Optional[str] = None


class Loaded(_Frozen):
    entry: DictionaryEntry


class Failed(_Frozen):
    message: str


class SpeechFailed(_Frozen):
    message: str


class SpeechPlayed(_Frozen):
    pass


class Back(_Frozen):
    pass


class SwitchLanguage(_Frozen):
    language: str


class WordOfTheDayRequested(_Frozen):
    pass


class WordOfTheDayLoaded(_Frozen):
    entry: DictionaryEntry


class WordOfTheDayFailed(_Frozen):
    message: str


Event = Union[
    Submit, Loaded, Failed, SpeechFailed, SpeechPlayed, Back, SwitchLanguage,
    WordOfTheDayRequested, WordOfTheDayLoaded, WordOfTheDayFailed,
]


def transition(state: ViewState, event: Event) -> ViewState:
    if isinstance(event, Submit):
        return state.model_copy(update={
            "screen": Screen.RESULTS, "status": Status.LOADING,
            "query": event.word, "entry": None, "entry_language": event.language or state.language, "error": None,
        })
    if isinstance(event, Loaded):
        return state.model_copy(update={"status": Status.LOADED, "entry": event.entry, "error": None})
    if isinstance(event, Failed):
        return state.model_copy(update={
            "screen": Screen.RESULTS, "status": Status.ERROR, "entry": None, "error": event.message,
        })
    if isinstance(event, SpeechFailed):
        # Shown next to whatever is on screen; the lookup status is kept
        return state.model_copy(update={"error": event.message})
    if isinstance(event, SpeechPlayed):
        if state.status == Status.ERROR:
            return state
        return state.model_copy(update={"error": None})
    if isinstance(event, Back):
        return state.model_copy(update={"screen": Screen.HOME, "status": Status.IDLE, "query": "", "error": None})
    if isinstance(event, SwitchLanguage):
        return state.model_copy(update={"language": event.language})
    if isinstance(event, WordOfTheDayRequested):
        return state.model_copy(update={"word_of_the_day": WordOfTheDayState(loading=True)})
    if isinstance(event, WordOfTheDayLoaded):
        return state.model_copy(update={"word_of_the_day": WordOfTheDayState(entry=event.entry)})
    if isinstance(event, WordOfTheDayFailed):
        return state.model_copy(update={"word_of_the_day": WordOfTheDayState(error=event.message)})
    raise TypeError(f"Unknown event: {event!r}")


# --- Render ---

_PARENTHESIZED = _re.compile(r"\(([^)]+)\)")


def speakable_text(example: str, lang: str) -> Optional[str]:
    """Part of an example line to send to speech, or None when it has nothing speakable.

    Arabic examples are spoken up to the first parenthesis. English examples are
    romanized Lebanese followed by a translation in parentheses; the translation
    is what gets spoken.
    """
    if lang == "ar":
        return example.split("(")[0].strip() or None
    match = _PARENTHESIZED.search(example)
    if match and match.group(1):
        return match.group(1)
    return None


class SpeakTarget(_Frozen):
    text: Optional[str]
    lang: str

    @property
    def hidden(self) -> bool:
        return self.text is None


class ExampleRow(_Frozen):
    text: str
    speak: SpeakTarget


class ResultsView(_Frozen):
    word: str
    word_speak: SpeakTarget
    meaning: str
    explanation: str
    examples: List[ExampleRow]


class WordOfTheDayView(_Frozen):
    loading: bool
    word: Optional[str] = None
    explanation: Optional[str] = None
    error: Optional[str] = None


class View(_Frozen):
    screen: Screen
    status: Status
    language: str
    direction: str
    labels: dict
    query: str
    loading: bool
    error: Optional[str]
    results: Optional[ResultsView]
    word_of_the_day: WordOfTheDayView


_LABEL_KEYS = (
    "app_title", "header_title", "header_subtitle", "search_placeholder", "mic_tooltip",
    "search_button_text", "word_of_the_day_title", "back_button", "quick_meaning_title",
    "explanation_title", "examples_title", "language_switch",
)


def render_entry(entry: DictionaryEntry, lang: str) -> ResultsView:
    rows = []
    for example in entry.examples:
        rows.append(ExampleRow(text=f"- {example}", speak=SpeakTarget(text=speakable_text(example, lang), lang=lang)))
    return ResultsView(
        word=entry.word,
        # The headword itself is always spoken with the Arabic voice
        word_speak=SpeakTarget(text=entry.word, lang="ar"),
        meaning=entry.meaning,
        explanation=entry.explanation,
        examples=rows,
    )


def render(state: ViewState) -> View:
    lang = state.language
    wod = state.word_of_the_day
    show_results = state.screen == Screen.RESULTS and state.status == Status.LOADED and state.entry is not None
    return View(
        screen=state.screen,
        status=state.status,
        language=lang,
        direction="rtl" if lang == "ar" else "ltr",
        labels={key: translate(lang, key) for key in _LABEL_KEYS},
        query=state.query,
        loading=state.status == Status.LOADING,
        error=state.error,
        results=render_entry(state.entry, state.entry_language) if show_results else None,
        word_of_the_day=WordOfTheDayView(
            loading=wod.loading,
            word=wod.entry.word if wod.entry else None,
            explanation=wod.entry.explanation if wod.entry else None,
            error=wod.error,
        ),
    )
