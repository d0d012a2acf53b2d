"""In-memory lookup cache for dictionary entries.

Entries live for the lifetime of the session: no TTL, no size bound, and a
key, once stored, keeps its first value.
"""
from typing import Optional

from log import get_logger
from models import DictionaryEntry

logger = get_logger("hakeena.cache")


def cache_key(word: str, lang: str) -> str:
    return f"{word}_{lang}"


class LookupCache:
    def __init__(self):
        self._entries: dict = {}

    def get(self, word: str, lang: str) -> Optional[DictionaryEntry]:
        return self._entries.get(cache_key(word, lang))

    def put(self, word: str, lang: str, entry: DictionaryEntry):
        key = cache_key(word, lang)
        if key in self._entries:
            return
        self._entries[key] = entry
        logger.debug("Cached entry", extra={"component": "cache", "word": word, "lang": lang})

    def __contains__(self, key) -> bool:
        word, lang = key
        return cache_key(word, lang) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def stats(self) -> dict:
        by_lang: dict = {}
        for key in self._entries:
            lang = key.rsplit("_", 1)[-1]
            by_lang[lang] = by_lang.get(lang, 0) + 1
        return {"entries": len(self._entries), "by_language": by_lang}
