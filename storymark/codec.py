"""Reading and writing storymark documents.

Documents are saved as pretty-printed UTF-8 JSON listing each run's text
and attributes. Reading falls back to plain UTF-8 text when the bytes are
not a storymark document, so foreign files open unstyled instead of not at
all.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from .attributes import AttributeKey, Color, Font
from .constants import EditorConstants
from .model import AttributedText

logger = logging.getLogger(__name__)


class CorruptDocument(ValueError):
    """Bytes are neither a storymark document nor valid UTF-8 text."""


def _encode_value(key: AttributeKey, value: Any) -> Any:
    if key is AttributeKey.FONT:
        return {"style": value.style, "bold": value.bold}
    if key is AttributeKey.FOREGROUND_COLOR:
        return value.value
    return value


def _decode_value(key: AttributeKey, raw: Any) -> Any:
    if key is AttributeKey.FONT:
        if not isinstance(raw, dict):
            raise ValueError(f"font must be an object, got {raw!r}")
        style = raw.get("style", "body")
        bold = raw.get("bold", False)
        if not isinstance(style, str) or not isinstance(bold, bool):
            raise ValueError(f"invalid font {raw!r}")
        return Font(style=style, bold=bold)
    if key is AttributeKey.FOREGROUND_COLOR:
        return Color(raw)
    if not isinstance(raw, bool):
        raise ValueError(f"concept must be a boolean, got {raw!r}")
    return raw


def encode(text: AttributedText) -> bytes:
    """Serialize text and all run attributes to deterministic JSON bytes."""
    runs = []
    for run in text.runs():
        attributes = {
            key.value: _encode_value(key, value)
            for key, value in run.attributes.items()
        }
        runs.append({"text": text.text[run.start:run.end], "attributes": attributes})
    payload = json.dumps(
        {"runs": runs},
        indent=EditorConstants.JSON_INDENT,
        sort_keys=True,
        ensure_ascii=False,
    )
    return payload.encode("utf-8")


def _decode_structured(data: bytes) -> AttributedText:
    document = json.loads(data.decode("utf-8"))
    if not isinstance(document, dict) or not isinstance(document.get("runs"), list):
        raise ValueError("not a storymark document")
    pairs = []
    for entry in document["runs"]:
        if not isinstance(entry, dict):
            raise ValueError(f"run must be an object, got {entry!r}")
        text = entry.get("text")
        raw_attributes = entry.get("attributes", {})
        if not isinstance(text, str) or not isinstance(raw_attributes, dict):
            raise ValueError(f"invalid run {entry!r}")
        attributes = {}
        for name, raw in raw_attributes.items():
            try:
                key = AttributeKey(name)
            except ValueError:
                logger.warning(f"Ignoring unknown attribute {name!r}")
                continue
            attributes[key] = _decode_value(key, raw)
        pairs.append((text, attributes))
    return AttributedText.from_runs(pairs)


def decode(data: bytes) -> AttributedText:
    """Deserialize bytes written by ``encode``, or plain UTF-8 text.

    Raises:
        CorruptDocument: if the bytes are not valid UTF-8 either.
    """
    try:
        return _decode_structured(data)
    except (ValueError, TypeError) as e:
        # JSONDecodeError and UnicodeDecodeError are both ValueErrors
        logger.warning(f"Not a storymark document, reading as plain text: {e}")
    try:
        plain = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise CorruptDocument("file is neither a storymark document nor UTF-8 text") from e
    return AttributedText(plain)
