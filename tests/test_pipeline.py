"""End-to-end tests: pipeline -> proxy client -> FastAPI app -> mocked Gemini."""
import base64
import json

import httpx
import pytest

from client import ProxyClient
from models import TRANSLATIONS
from pipeline import Pipeline, Session, SpeakControl, recognition_locale
from state import Screen, Status

KAZDOURA = {
    "word": "كزدورة",
    "meaning": "تمشية",
    "explanation": "...",
    "examples": ["a", "b", "c"],
}

KAZDOURA_EN = {
    "word": "Kazdoura",
    "meaning": "Stroll",
    "explanation": "A short leisurely outing.",
    "examples": [
        "Yalla na3mel kazdoura (Let's go for a stroll)",
        "Let's go for a kazdoura",
        "Kazdoura 3al baher (A stroll by the sea)",
    ],
}

PCM = b"\x00\x01\xff\x7f" * 600


@pytest.fixture()
def pipeline(upstream, api_key, audio_output):
    from backend import app
    api = ProxyClient(base_url="http://testserver", transport=httpx.ASGITransport(app=app))
    return Pipeline(api, audio_output)


def _prompt_of(request):
    return json.loads(request.content)["contents"][0]["parts"][0]["text"]


@pytest.mark.asyncio
async def test_lookup_renders_entry(pipeline, upstream):
    upstream.reply_json(KAZDOURA)
    entry = await pipeline.lookup("كزدورة", "ar")
    assert entry.word == "كزدورة"

    view = pipeline.view
    assert (view.screen, view.status) == (Screen.RESULTS, Status.LOADED)
    assert view.results.word == "كزدورة"
    assert view.results.meaning == "تمشية"
    assert view.results.explanation == "..."
    assert [row.speak.text for row in view.results.examples] == ["a", "b", "c"]
    assert all(row.speak.lang == "ar" for row in view.results.examples)

    # Arabic prompt asking for strict JSON
    prompt = _prompt_of(upstream.requests[0])
    assert "كزدورة" in prompt and "JSON" in prompt


@pytest.mark.asyncio
async def test_example_speak_controls_work(pipeline, upstream, audio_output):
    upstream.reply_json(KAZDOURA)
    await pipeline.lookup("كزدورة")
    rows = pipeline.view.results.examples

    upstream.reply_audio(base64.b64encode(PCM).decode())
    for row in rows:
        assert await pipeline.speak_example(row) is True
    assert len(audio_output.sources) == 3
    spoken = [json.loads(r.content)["contents"][0]["parts"][0]["text"] for r in upstream.requests[1:]]
    assert spoken == ["Say in a warm, natural Lebanese accent: " + t for t in ("a", "b", "c")]


@pytest.mark.asyncio
async def test_second_lookup_is_a_cache_hit(pipeline, upstream):
    upstream.reply_json(KAZDOURA)
    first = await pipeline.lookup("كزدورة", "ar")
    pipeline.back()
    second = await pipeline.lookup("كزدورة", "ar")
    assert len(upstream.requests) == 1
    assert second is first
    assert pipeline.view.status == Status.LOADED


@pytest.mark.asyncio
async def test_upstream_503_shows_generic_error_and_skips_cache(pipeline, upstream):
    upstream.fail(503, "unavailable")
    entry = await pipeline.lookup("كزدورة", "ar")
    assert entry is None
    state = pipeline.session.state
    assert (state.screen, state.status) == (Screen.RESULTS, Status.ERROR)
    assert state.error == TRANSLATIONS["ar"]["error_generic"]
    assert pipeline.session.cache.get("كزدورة", "ar") is None
    assert len(pipeline.session.cache) == 0


@pytest.mark.asyncio
async def test_malformed_reply_is_a_generic_error(pipeline, upstream):
    upstream.reply_json({"word": "كزدورة", "meaning": "تمشية", "explanation": "...", "examples": ["only one"]})
    assert await pipeline.lookup("كزدورة") is None
    assert pipeline.view.status == Status.ERROR
    assert len(pipeline.session.cache) == 0

    upstream.reply_text("sorry, I can't help with that")
    assert await pipeline.lookup("كزدورة") is None
    assert pipeline.view.error == TRANSLATIONS["ar"]["error_generic"]


@pytest.mark.asyncio
async def test_reply_wrapped_in_extra_text_still_parses(pipeline, upstream):
    upstream.reply_text("Here you go:\n" + json.dumps(KAZDOURA, ensure_ascii=False) + "\nEnjoy!")
    entry = await pipeline.lookup("كزدورة")
    assert entry is not None and entry.meaning == "تمشية"


@pytest.mark.asyncio
@pytest.mark.parametrize("word", ["", "   ", None])
async def test_empty_word_alerts_without_network(pipeline, upstream, word):
    assert await pipeline.lookup(word) is None
    assert pipeline.session.alerts == [TRANSLATIONS["ar"]["error_no_word"]]
    assert upstream.requests == []
    assert pipeline.view.screen == Screen.HOME


@pytest.mark.asyncio
async def test_english_lookup_hides_unspeakable_example(pipeline, upstream):
    await pipeline.set_language("en")
    upstream.reply_json(KAZDOURA_EN)
    await pipeline.lookup("Kazdoura")
    rows = pipeline.view.results.examples
    assert rows[1].speak.hidden is True
    assert await pipeline.speak_example(rows[1]) is False
    assert "romanized Lebanese" in _prompt_of(upstream.requests[-1])


@pytest.mark.asyncio
async def test_speak_plays_wav_and_preempts_previous(pipeline, upstream, audio_output):
    upstream.reply_audio(base64.b64encode(PCM).decode())
    assert await pipeline.speak("كزدورة", "ar") is True
    assert await pipeline.speak("كزدورة", "ar") is True

    first, second = audio_output.sources
    assert first.stopped is True
    assert second.stopped is False
    assert pipeline.session.playback.current is second
    assert second.audio.sample_rate == 24000
    assert second.audio.channels == 1
    assert second.audio.frames == PCM


@pytest.mark.asyncio
async def test_speak_shows_busy_trigger_then_restores_it(pipeline, upstream, monkeypatch):
    import gemini

    trigger = SpeakControl(label="speak")
    seen = []

    def reply(request):
        seen.append((trigger.label, trigger.disabled))
        return upstream(request)

    monkeypatch.setattr(gemini, "UPSTREAM_TRANSPORT", httpx.MockTransport(reply))
    upstream.reply_audio(base64.b64encode(PCM).decode())
    assert await pipeline.speak("كزدورة", "ar", trigger) is True
    assert seen == [(SpeakControl.BUSY_LABEL, True)]
    assert trigger.label == "speak" and trigger.disabled is False


@pytest.mark.asyncio
async def test_speak_without_audio_reports_unavailable(pipeline, upstream):
    upstream.reply_text("no audio here")
    trigger = SpeakControl(label="speak")
    assert await pipeline.speak("hello", "en", trigger) is False
    assert pipeline.session.state.error == TRANSLATIONS["ar"]["error_tts_unavailable"]
    assert trigger.label == "speak" and trigger.busy is False


@pytest.mark.asyncio
async def test_speak_bad_base64_reports_unavailable(pipeline, upstream, audio_output):
    upstream.reply_audio("%%%not-base64%%%")
    assert await pipeline.speak("hello", "en") is False
    assert audio_output.sources == []
    assert pipeline.session.state.error == TRANSLATIONS["ar"]["error_tts_unavailable"]


@pytest.mark.asyncio
async def test_speak_proxy_failure_reports_unavailable(pipeline, upstream, monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY")
    assert await pipeline.speak("hello", "en") is False
    assert pipeline.session.state.error == TRANSLATIONS["ar"]["error_tts_unavailable"]


@pytest.mark.asyncio
async def test_word_of_the_day(pipeline, upstream):
    upstream.reply_json(KAZDOURA)
    entry = await pipeline.fetch_word_of_the_day()
    assert entry.word == "كزدورة"
    wod = pipeline.view.word_of_the_day
    assert (wod.word, wod.explanation, wod.error) == ("كزدورة", "...", None)
    # Same cache as a regular search
    await pipeline.lookup("كزدورة")
    assert len(upstream.requests) == 1


@pytest.mark.asyncio
async def test_word_of_the_day_failure_stays_in_panel(pipeline, upstream):
    upstream.fail(500, "boom")
    assert await pipeline.fetch_word_of_the_day() is None
    view = pipeline.view
    assert view.word_of_the_day.error == TRANSLATIONS["ar"]["error_generic"]
    assert (view.screen, view.status, view.error) == (Screen.HOME, Status.IDLE, None)


@pytest.mark.asyncio
async def test_set_language_fetches_english_word_of_the_day(pipeline, upstream):
    upstream.reply_json(KAZDOURA_EN)
    await pipeline.set_language("en")
    assert pipeline.view.direction == "ltr"
    assert pipeline.view.word_of_the_day.word == "Kazdoura"
    assert '"Kazdoura"' in _prompt_of(upstream.requests[0])
    assert pipeline.session.cache.get("Kazdoura", "en") is not None

    with pytest.raises(ValueError):
        await pipeline.set_language("fr")


@pytest.mark.asyncio
async def test_voice_search(pipeline, upstream):
    upstream.reply_json(KAZDOURA)
    entry = await pipeline.submit_transcript("كزدورة")
    assert entry is not None
    assert pipeline.view.query == "كزدورة"

    pipeline.report_no_speech()
    assert pipeline.session.alerts == [TRANSLATIONS["ar"]["error_no_speech"]]
    assert recognition_locale("ar") == "ar-LB"
    assert recognition_locale("en") == "en-US"


@pytest.mark.asyncio
async def test_on_change_receives_each_view(upstream, api_key, audio_output):
    from backend import app
    views = []
    api = ProxyClient(base_url="http://testserver", transport=httpx.ASGITransport(app=app))
    pipeline = Pipeline(api, audio_output, Session(language="ar"), on_change=views.append)
    upstream.reply_json(KAZDOURA)
    await pipeline.lookup("كزدورة")
    assert [v.status for v in views] == [Status.LOADING, Status.LOADED]


@pytest.mark.asyncio
async def test_lookup_language_overrides_session_language(pipeline, upstream):
    assert pipeline.session.language == "ar"
    upstream.reply_json(KAZDOURA_EN)
    await pipeline.lookup("Kazdoura", "en")
    rows = pipeline.view.results.examples
    assert rows[0].speak.text == "Let's go for a stroll" and rows[0].speak.lang == "en"
    assert rows[1].speak.hidden is True
    assert pipeline.session.cache.get("Kazdoura", "en") is not None

    upstream.fail(503, "unavailable")
    assert await pipeline.lookup("yalla", "en") is None
    assert pipeline.view.error == TRANSLATIONS["en"]["error_generic"]


@pytest.mark.asyncio
async def test_word_of_the_day_error_uses_requested_language(pipeline, upstream):
    upstream.fail(503, "unavailable")
    await pipeline.fetch_word_of_the_day("en")
    assert pipeline.view.word_of_the_day.error == TRANSLATIONS["en"]["error_generic"]
    assert '"Kazdoura"' in _prompt_of(upstream.requests[0])


@pytest.mark.asyncio
async def test_unsupported_language_is_rejected_before_any_request(pipeline, upstream):
    with pytest.raises(ValueError):
        await pipeline.fetch_word_of_the_day("fr")
    with pytest.raises(ValueError):
        await pipeline.lookup("Kazdoura", "fr")
    assert upstream.requests == []
    assert pipeline.view.word_of_the_day.loading is False


@pytest.mark.asyncio
async def test_switching_language_keeps_rules_of_entry_on_screen(pipeline, upstream):
    upstream.reply_json(KAZDOURA)
    await pipeline.lookup("كزدورة")
    await pipeline.set_language("en")

    view = pipeline.view
    assert view.language == "en" and view.direction == "ltr"
    assert view.status == Status.LOADED
    rows = view.results.examples
    assert [row.speak.text for row in rows] == ["a", "b", "c"]
    assert all(row.speak.lang == "ar" for row in rows)


@pytest.mark.asyncio
async def test_successful_speak_clears_earlier_speech_error(pipeline, upstream):
    upstream.reply_json(KAZDOURA)
    await pipeline.lookup("كزدورة")

    upstream.reply_text("no audio here")
    assert await pipeline.speak("كزدورة", "ar") is False
    assert pipeline.view.error == TRANSLATIONS["ar"]["error_tts_unavailable"]

    upstream.reply_audio(base64.b64encode(PCM).decode())
    assert await pipeline.speak("كزدورة", "ar") is True
    assert pipeline.view.error is None
    assert pipeline.view.status == Status.LOADED
