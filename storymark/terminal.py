"""Printing documents to the terminal with Blessed."""

import sys
from typing import Optional, TextIO

import blessed

from .attributes import AttributeKey
from .document import Document
from .formatting import styled_segments
from .model import AttributedText


class TerminalRenderer:
    """Renders attributed text as terminal escape sequences.

    Colors and boldness come from the effective attributes, so concept
    spans show in the highlight color. When the output is not a terminal
    Blessed yields empty sequences and only the characters remain.
    """

    def __init__(self, terminal: Optional[blessed.Terminal] = None):
        self.term = terminal or blessed.Terminal()

    def style_for(self, attributes: dict) -> str:
        """Return the escape sequence that starts a run with these attributes."""
        sequence = ''
        font = attributes.get(AttributeKey.FONT)
        if font is not None and font.is_bold:
            sequence += self.term.bold
        color = attributes.get(AttributeKey.FOREGROUND_COLOR)
        if color is not None:
            sequence += self.term.color_rgb(*color.rgb)
        return sequence

    def render(self, text: AttributedText) -> str:
        out = []
        for characters, attributes in styled_segments(text):
            style = self.style_for(attributes)
            if style:
                out.append(style + characters + self.term.normal)
            else:
                out.append(characters)
        return ''.join(out)

    def print_document(self, document: Document, stream: Optional[TextIO] = None) -> None:
        stream = stream or sys.stdout
        print(self.render(document.content), file=stream)
