#!/usr/bin/env python3
"""
Viewer Narrator — CLI entry point.

Points a headless viewer at a PDF (URL or local path), extracts its text
through the direct / download / proxy fallback chain, then runs one
viewer command and speaks the result.

Usage::

    python screenread.py https://example.org/brochure.pdf
    python screenread.py brochure.pdf describe --no-audio
    python screenread.py https://example.org/a.pdf extract --max-pages 10
    python screenread.py report.pdf read --voice en_GB-alan-medium --rate 1.2
    python screenread.py --list-voices

Verbosity levels::

    -v 0   Quiet — warnings and errors only.
    -v 1   Normal — strategy and extraction summaries (default).
    -v 2   Debug — per-page detail, registry and loader decisions.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from reader.assistant import ScreenReader
from reader.config import DEFAULT_PROXY_TEMPLATE, ReaderConfig
from reader.speech.base_engine import BaseSpeechEngine
from reader.speech.console_engine import ConsoleSpeechEngine
from reader.storage import JsonFileStore
from reader.viewer.models import StaticViewer

logger = logging.getLogger("reader")

# Mapping from --verbose integer to logging level
_VERBOSITY_MAP = {
    0: logging.WARNING,
    1: logging.INFO,
    2: logging.DEBUG,
}

# CLI command → viewer key
_COMMAND_KEYS = {
    "read": "r",
    "extract": "e",
    "describe": "d",
}


# ------------------------------------------------------------------
# Argument parsing
# ------------------------------------------------------------------


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Expected an integer, got '{value}'")
    if number < 1:
        raise argparse.ArgumentTypeError(f"Expected a value >= 1, got {number}")
    return number


def _build_parser() -> argparse.ArgumentParser:
    """Construct the argument parser."""
    p = argparse.ArgumentParser(
        description="Extract and narrate the text of a PDF viewer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "examples:\n"
            "  python screenread.py https://example.org/brochure.pdf\n"
            "  python screenread.py brochure.pdf describe --no-audio\n"
            "  python screenread.py --list-voices\n"
        ),
    )

    # -- Positional --------------------------------------------------------
    p.add_argument("source", nargs="?", help="PDF URL or local path")
    p.add_argument(
        "command",
        nargs="?",
        default="read",
        choices=sorted(_COMMAND_KEYS),
        help="Viewer command to run once the text is loaded (default: read)",
    )

    # -- Voice -------------------------------------------------------------
    voice = p.add_argument_group("voice")
    voice.add_argument(
        "--voice",
        default=None,
        help="Voice name (see --list-voices). Default: saved voice or English.",
    )
    voice.add_argument(
        "--rate",
        type=float,
        default=None,
        metavar="FLOAT",
        help="Speech rate multiplier; saved for later runs",
    )
    voice.add_argument(
        "--voice-dir",
        type=Path,
        default=None,
        metavar="DIR",
        help="Directory for downloaded Piper voices",
    )
    voice.add_argument(
        "--list-voices",
        action="store_true",
        help="List available voices, then exit",
    )
    voice.add_argument(
        "--no-audio",
        action="store_true",
        help="Print narration instead of speaking it",
    )

    # -- Extraction --------------------------------------------------------
    extraction = p.add_argument_group("extraction")
    extraction.add_argument(
        "--max-pages",
        type=_positive_int,
        default=50,
        metavar="N",
        help="Page cap per document (default: 50)",
    )
    extraction.add_argument(
        "--proxy",
        default=DEFAULT_PROXY_TEMPLATE,
        metavar="TEMPLATE",
        help="Relay URL template with a {url} field for the last-resort download",
    )
    extraction.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        metavar="SECONDS",
        help="Download timeout (default: 30)",
    )

    # -- Settings / output control -----------------------------------------
    misc = p.add_argument_group("settings & output")
    misc.add_argument(
        "--settings",
        type=Path,
        default=None,
        metavar="PATH",
        help="Settings file (default: ~/.local/share/ViewerNarrator/settings.json)",
    )
    misc.add_argument(
        "-v",
        "--verbose",
        type=int,
        choices=[0, 1, 2],
        default=1,
        help="Verbosity: 0=quiet, 1=normal (default), 2=debug",
    )
    misc.add_argument(
        "--progress",
        action="store_true",
        help="Show progress bars for page extraction and voice downloads",
    )

    return p


# ------------------------------------------------------------------
# Logging setup
# ------------------------------------------------------------------


def _configure_logging(verbosity: int) -> None:
    """
    Set up the ``reader`` and ``core`` loggers.

    At verbosity 0 (WARNING), uses a minimal format. At 1+ (INFO /
    DEBUG), includes the module name for traceability.
    """
    level = _VERBOSITY_MAP.get(verbosity, logging.INFO)

    if level <= logging.DEBUG:
        fmt = "%(asctime)s %(name)s %(levelname)s: %(message)s"
        datefmt = "%H:%M:%S"
    elif level <= logging.INFO:
        fmt = "%(message)s"
        datefmt = None
    else:
        fmt = "%(levelname)s: %(message)s"
        datefmt = None

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    for name in ("reader", "core"):
        root = logging.getLogger(name)
        root.setLevel(level)
        root.handlers.clear()
        root.addHandler(handler)

    # Suppress noisy third-party loggers regardless of verbosity
    for name in ("httpx", "httpcore", "piper"):
        logging.getLogger(name).setLevel(logging.WARNING)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _build_engine(args: argparse.Namespace) -> BaseSpeechEngine:
    if args.no_audio:
        return ConsoleSpeechEngine()

    from reader.speech.piper_engine import PiperSpeechEngine

    return PiperSpeechEngine(voice_dir=args.voice_dir, disable_progress=not args.progress)


def _print_display(title: str, text: str) -> None:
    print(f"{'=' * 60}\n{title}\n{'=' * 60}\n{text}", flush=True)


def _cmd_list_voices(engine: BaseSpeechEngine) -> None:
    """Print the engine's voices with their indices."""
    logger.info("Available voices (%s):", engine.engine_name)
    for index, voice in enumerate(engine.list_voices()):
        logger.info("  %2d  %-28s %s", index, voice.name, voice.lang)


async def _run(args: argparse.Namespace, config: ReaderConfig, engine: BaseSpeechEngine) -> int:
    assistant = ScreenReader(
        engine,
        config=config,
        store=JsonFileStore(args.settings),
        renderer=_print_display,
    )
    session = assistant.session

    if args.voice:
        names = [v.name for v in session.voices]
        if args.voice not in names:
            logger.error("Unknown voice '%s'. Use --list-voices.", args.voice)
            return 2
        session.set_voice(names.index(args.voice))
    if args.rate is not None:
        session.set_rate(args.rate)

    if not assistant.enabled:
        assistant.toggle()

    viewer = StaticViewer(args.source)
    handle = assistant.watcher.watch(viewer)
    await assistant.loader.wait_idle()

    await assistant.dispatcher.handle_key(handle, _COMMAND_KEYS[args.command])
    await assistant.loader.wait_idle()
    engine.wait()

    state = assistant.registry.get(handle)
    if state is None or not state.is_loaded:
        logger.warning("No text was extracted from %s", args.source)
        return 1
    return 0


# ------------------------------------------------------------------
# Entry point
# ------------------------------------------------------------------


def main():
    """Parse arguments, configure logging, and run one command."""
    parser = _build_parser()
    args = parser.parse_args()

    # Logging must be configured before any logger calls
    _configure_logging(args.verbose)

    engine = _build_engine(args)

    # --list-voices exits early
    if args.list_voices:
        _cmd_list_voices(engine)
        return

    if not args.source:
        parser.error("A PDF URL or path is required.")
    if "{url}" not in args.proxy:
        parser.error("--proxy must contain a {url} field.")

    config = ReaderConfig(
        max_pages=args.max_pages,
        settle_delay=0.0,
        proxy_template=args.proxy,
        fetch_timeout=args.timeout,
        auto_display=False,
        disable_tqdm=not args.progress,
    )
    if not config.is_document_source(args.source):
        parser.error(f"Not a document source: {args.source}")

    logger.info("Viewer Narrator")
    logger.info("  Source:  %s", args.source)
    logger.info("  Command: %s", args.command)

    sys.exit(asyncio.run(_run(args, config, engine)))


if __name__ == "__main__":
    main()
