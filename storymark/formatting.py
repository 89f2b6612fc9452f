"""Presentation rules and toggle commands for attributed text.

Rendering never writes into the model: ``render_override`` looks at a
run's stored attributes and returns what should be drawn instead.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Mapping, Optional

from .attributes import HIGHLIGHT_COLOR, AttributeKey, Color, Font, is_active
from .model import AttributedText, Selection


@dataclass(frozen=True)
class RenderOverride:
    color: Optional[Color] = None
    font: Optional[Font] = None


def render_override(attributes: Mapping[AttributeKey, Any]) -> RenderOverride:
    """Return presentation overrides for a run's attributes.

    Concept spans are drawn in the highlight color whatever their stored
    foreground color is.
    """
    if attributes.get(AttributeKey.CONCEPT) is True:
        return RenderOverride(color=HIGHLIGHT_COLOR)
    return RenderOverride()


def effective_attributes(attributes: Mapping[AttributeKey, Any]) -> dict[AttributeKey, Any]:
    """Return a new mapping with render overrides applied on top of attributes."""
    effective = dict(attributes)
    override = render_override(attributes)
    if override.color is not None:
        effective[AttributeKey.FOREGROUND_COLOR] = override.color
    if override.font is not None:
        effective[AttributeKey.FONT] = override.font
    return effective


def styled_segments(text: AttributedText) -> Iterator[tuple[str, dict[AttributeKey, Any]]]:
    """Yield ``(characters, effective attributes)`` for each run of text."""
    for run in text.runs():
        yield text.text[run.start:run.end], effective_attributes(run.attributes)


def toggle_attribute(
    text: AttributedText,
    selection: Selection,
    key: AttributeKey,
    value: Any,
) -> Selection:
    """Flip ``key`` over the selection based on the first run it covers.

    If the first run intersecting the selection has the attribute active,
    the attribute is cleared across the whole selection; otherwise ``value``
    is set across the whole selection. A caret selection covers no runs and
    changes nothing.

    Returns:
        The selection, clamped to the text.
    """
    selection = selection.clamped(text.character_count())
    first_run = next(text.runs(selection.start, selection.end), None)
    if first_run is None:
        return selection
    if is_active(key, first_run.get(key)):
        text.set_attributes(selection.start, selection.end, key, None)
    else:
        text.set_attributes(selection.start, selection.end, key, value)
    return selection


def toggle_bold(text: AttributedText, selection: Selection) -> Selection:
    return toggle_attribute(text, selection, AttributeKey.FONT, Font.BODY_BOLD)


def toggle_concept(text: AttributedText, selection: Selection) -> Selection:
    return toggle_attribute(text, selection, AttributeKey.CONCEPT, True)


def toggle_color(text: AttributedText, selection: Selection, color: Color) -> Selection:
    return toggle_attribute(text, selection, AttributeKey.FOREGROUND_COLOR, color)
