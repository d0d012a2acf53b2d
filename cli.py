"""Terminal front-end for Hakeena: serve the proxies, look up words, play speech."""
import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional, TextIO

from audio import SoundDeviceOutput, WavFileOutput
from client import HAKEENA_API_URL, ProxyClient
from models import DEFAULT_LANGUAGE, SUPPORTED_LANGUAGES
from pipeline import Pipeline, Session
from state import View


def format_view(view: View) -> str:
    """Plain-text rendering of the results screen or the word-of-the-day panel."""
    labels = view.labels
    lines = []
    if view.error:
        lines.append(view.error)
    if view.results is not None:
        r = view.results
        lines.append(r.word)
        lines.append(f"{labels['quick_meaning_title']}: {r.meaning}")
        lines.append(f"{labels['explanation_title']}: {r.explanation}")
        lines.append(f"{labels['examples_title']}:")
        for row in r.examples:
            marker = "  " if row.speak.hidden else "🔊"
            lines.append(f" {marker} {row.text}")
    wod = view.word_of_the_day
    if view.results is None and (wod.word or wod.error):
        lines.append(f"{labels['word_of_the_day_title']}:")
        lines.append(wod.error or f"{wod.word} - {wod.explanation}")
    return "\n".join(lines)


def _build_pipeline(args: argparse.Namespace) -> Pipeline:
    output = WavFileOutput(Path(args.out)) if getattr(args, "out", None) else SoundDeviceOutput()
    return Pipeline(ProxyClient(args.api_url), output, Session(language=args.lang))


async def _run(args: argparse.Namespace, out: TextIO) -> int:
    pipeline = _build_pipeline(args)
    if args.command == "lookup":
        entry = await pipeline.lookup(args.word)
        if pipeline.session.alerts:
            print("\n".join(pipeline.session.alerts), file=out)
            return 2
        print(format_view(pipeline.view), file=out)
        return 0 if entry is not None else 1
    if args.command == "wod":
        entry = await pipeline.fetch_word_of_the_day()
        print(format_view(pipeline.view), file=out)
        return 0 if entry is not None else 1
    if args.command == "speak":
        ok = await pipeline.speak(args.text, args.lang)
        if not ok:
            print(pipeline.view.error, file=out)
            return 1
        if isinstance(pipeline.output, SoundDeviceOutput):
            import sounddevice as sd
            sd.wait()
        return 0
    raise ValueError(f"Unknown command: {args.command}")


def _parse_args(argv=None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Hakeena - the smart Lebanese dialect dictionary")
    p.add_argument("--api-url", default=HAKEENA_API_URL, help="Base URL of the proxy server")
    p.add_argument("--lang", choices=sorted(SUPPORTED_LANGUAGES), default=DEFAULT_LANGUAGE)
    sub = p.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the proxy server")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    lookup = sub.add_parser("lookup", help="Explain a word")
    lookup.add_argument("word")

    sub.add_parser("wod", help="Show the word of the day")

    speak = sub.add_parser("speak", help="Speak a word or example")
    speak.add_argument("text")
    speak.add_argument("--out", default="", help="Write clips to this directory instead of playing them")
    return p.parse_args(argv)


def main(argv=None, out: Optional[TextIO] = None) -> int:
    args = _parse_args(argv)
    if args.command == "serve":
        import uvicorn
        uvicorn.run("backend:app", host=args.host, port=args.port)
        return 0
    return asyncio.run(_run(args, out or sys.stdout))


if __name__ == "__main__":
    sys.exit(main())
