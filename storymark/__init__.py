"""Storymark - a rich-text writing app with sentence completion."""

from .attributes import AttributeKey, Color, Font
from .codec import CorruptDocument, decode, encode
from .document import Document
from .formatting import render_override, toggle_attribute, toggle_bold, toggle_concept
from .model import AttributedText, RangeError, Run, Selection

__all__ = [
    'AttributeKey',
    'AttributedText',
    'Color',
    'CorruptDocument',
    'Document',
    'Font',
    'RangeError',
    'Run',
    'Selection',
    'decode',
    'encode',
    'render_override',
    'toggle_attribute',
    'toggle_bold',
    'toggle_concept',
]
