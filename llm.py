"""Prompt building for lookups and speech, and post-processing of model replies."""
import json
import re as _re
from typing import Optional

ARABIC_VOICE = "Kore"
DEFAULT_VOICE = "Puck"


def lookup_prompt(word: str, lang: str) -> str:
    """Ask for a strict-JSON explanation of a Lebanese word, written in `lang`."""
    shape = f'{{"word": "{word}", "meaning": "...", "explanation": "...", "examples": ["...", "...", "..."]}}'
    if lang == "ar":
        return (
            f'أنت خبير باللهجة اللبنانية. لكلمة "{word}", قدم شرحاً بسيطاً, ومعنى سريعاً من كلمة أو كلمتين, '
            f"وثلاثة أمثلة واقعية من الحياة اليومية في لبنان. "
            f"يجب أن يكون الرد بصيغة JSON فقط بدون أي نص إضافي, بالشكل التالي: {shape}"
        )
    return (
        f'You are an expert in the Lebanese Arabic dialect. For the word "{word}", provide a simple '
        f"explanation, a quick meaning (1-2 words), and three realistic examples from daily life in Lebanon. "
        f"The examples should be in romanized Lebanese (transliteration) followed by the English translation "
        f"in parentheses. Your response must be in JSON format only, with no extra text, like this: {shape}"
    )


def speech_prompt(text: str, lang: str) -> str:
    if lang == "ar":
        return f"Say in a warm, natural Lebanese accent: {text}"
    return text


def voice_for(lang: str) -> str:
    return ARABIC_VOICE if lang == "ar" else DEFAULT_VOICE


def parse_json_object(text: str) -> Optional[dict]:
    """Parse a JSON object, falling back to the outermost {...} when the model adds extra text."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        match = _re.search(r'\{.*\}', text, _re.DOTALL)
        if not match:
            return None
        try:
            data = json.loads(match.group())
        except json.JSONDecodeError:
            return None
    return data if isinstance(data, dict) else None
