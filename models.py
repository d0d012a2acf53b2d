"""Pydantic schemas, constants, and static data for Hakeena."""
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field

# --- Constants ---
SUPPORTED_LANGUAGES = {
    "ar": "Arabic",
    "en": "English",
}
DEFAULT_LANGUAGE = "ar"

WORD_OF_THE_DAY = {
    "ar": "كزدورة",
    "en": "Kazdoura",
}

RECOGNITION_LOCALES = {
    "ar": "ar-LB",
    "en": "en-US",
}

EXAMPLES_PER_ENTRY = 3

# --- Pydantic Models ---

class GenerateTextRequest(BaseModel):
    prompt: Optional[str] = None


class GenerateTextResponse(BaseModel):
    text: str


class GenerateSpeechRequest(BaseModel):
    text: Optional[str] = None
    lang: Optional[str] = None


class GenerateSpeechResponse(BaseModel):
    audioDataB64: Optional[str] = None


class DictionaryEntry(BaseModel):
    """One explained word, as returned by the lookup prompt."""
    model_config = ConfigDict(frozen=True)

    word: str
    meaning: str
    explanation: str
    examples: List[str] = Field(min_length=EXAMPLES_PER_ENTRY, max_length=EXAMPLES_PER_ENTRY)


# --- Static Data ---

TRANSLATIONS = {
    "ar": {
        "app_title": "حكينا - قاموس اللهجة اللبنانية الذكي",
        "header_title": "حكينا",
        "header_subtitle": "قاموس اللهجة اللبنانية الذكي",
        "search_placeholder": "اكتب أو الفظ كلمة...",
        "mic_tooltip": "البحث بالصوت",
        "search_button_text": "ابحث عن الكلمة",
        "word_of_the_day_title": "كلمة اليوم",
        "back_button": "رجوع",
        "quick_meaning_title": "المعنى السريع",
        "explanation_title": "الشرح",
        "examples_title": "أمثلة",
        "language_switch": "English",
        "error_generic": "حدث خطأ ما. الرجاء المحاولة مرة أخرى.",
        "error_no_speech": "عذراً، متصفحك لا يدعم البحث الصوتي.",
        "error_no_word": "الرجاء إدخال كلمة للبحث.",
        "error_tts_unavailable": "عذراً، ميزة النطق الصوتي غير متاحة حالياً.",
    },
    "en": {
        "app_title": "Hakeena - The Smart Lebanese Dialect Dictionary",
        "header_title": "Hakeena",
        "header_subtitle": "The Smart Lebanese Dialect Dictionary",
        "search_placeholder": "Type or say a word...",
        "mic_tooltip": "Search by voice",
        "search_button_text": "Search Word",
        "word_of_the_day_title": "Word of the Day",
        "back_button": "Back",
        "quick_meaning_title": "Quick Meaning",
        "explanation_title": "Explanation",
        "examples_title": "Examples",
        "language_switch": "العربية",
        "error_generic": "An error occurred. Please try again.",
        "error_no_speech": "Sorry, your browser doesn't support voice search.",
        "error_no_word": "Please enter a word to search.",
        "error_tts_unavailable": "Sorry, text-to-speech is currently unavailable.",
    },
}


def translate(lang: str, key: str) -> str:
    table = TRANSLATIONS.get(lang, TRANSLATIONS[DEFAULT_LANGUAGE])
    return table[key]
