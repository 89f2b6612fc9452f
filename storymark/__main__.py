"""Storymark CLI entry point.

Allows running via `python -m storymark` and provides the console script
defined in `pyproject.toml`.

Usage:
    storymark [FILE]          Edit FILE (created on first save)
    storymark --show FILE     Print FILE with its formatting and exit
    storymark --version       Print version information
    storymark --debug ...     Log to storymark.log in the working directory
"""

from __future__ import annotations

import logging
import sys

from .version import get_version_string


def show_file(filename: str) -> int:
    from .codec import CorruptDocument
    from .constants import EditorConstants
    from .document import Document
    from .terminal import TerminalRenderer

    try:
        document = Document.read(filename)
    except (CorruptDocument, OSError) as e:
        print(f"{EditorConstants.FILE_NOT_OPENED_MESSAGE}: {filename} ({e})", file=sys.stderr)
        return 1
    TerminalRenderer().print_document(document)
    return 0


def main() -> None:
    # Very small arg parsing: version, show mode, debug logging and optional filename
    args = sys.argv[1:]
    if args and args[0] in ("--version", "-V"):
        print(get_version_string())
        return
    if args and args[0] == "--debug":
        logging.basicConfig(filename="storymark.log", level=logging.DEBUG)
        args = args[1:]
    if args and args[0] == "--show":
        if len(args) < 2:
            print("usage: storymark --show FILE", file=sys.stderr)
            sys.exit(2)
        sys.exit(show_file(args[1]))

    # Lazy import to avoid importing UI deps for --version and --show
    from .completion import OpenAICompletionClient
    from .settings_persistence import get_persistence
    from .textual_app import StorymarkApp

    persistence = get_persistence()
    settings = persistence.load_settings()
    filename = args[0] if args else None
    app = StorymarkApp(
        filename=filename,
        completion_client=OpenAICompletionClient.from_settings(settings),
        welcome=settings["welcome_on_new"],
    )
    app.run()
    if filename:
        persistence.save_settings({"last_document": filename})


if __name__ == "__main__":  # pragma: no cover
    main()
