"""The closed set of attributes a run of text can carry.

Three keys exist: the font (bold is the bold variant of the body font), the
foreground color, and the ``concept`` tag. Each key has an ``AttributeSpec`` recording
its value type, whether newly typed text inherits it, and which edits
invalidate it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional


class AttributeKey(str, Enum):
    """Attribute names, as they appear in saved documents."""

    FONT = "font"
    FOREGROUND_COLOR = "foregroundColor"
    CONCEPT = "concept"


class InvalidationCondition(Enum):
    TEXT_CHANGED = "textChanged"


@dataclass(frozen=True)
class Font:
    """Opaque font value. Only equality and boldness matter to the model."""

    style: str = "body"
    bold: bool = False

    @property
    def is_bold(self) -> bool:
        return self.bold


Font.BODY = Font()
Font.BODY_BOLD = Font(bold=True)


class Color(str, Enum):
    """Foreground colors available to documents."""

    BLACK = "black"
    RED = "red"
    ORANGE = "orange"
    GREEN = "green"
    BLUE = "blue"
    PURPLE = "purple"
    DARK_BLUE = "dark blue"
    LIGHT_BLUE = "light blue"

    @property
    def rgb(self) -> tuple[int, int, int]:
        return _RGB[self]

    @property
    def hex(self) -> str:
        r, g, b = self.rgb
        return f"#{r:02x}{g:02x}{b:02x}"


_RGB = {
    Color.BLACK: (0, 0, 0),
    Color.RED: (255, 59, 48),
    Color.ORANGE: (255, 149, 0),
    Color.GREEN: (52, 199, 89),
    Color.BLUE: (0, 122, 255),
    Color.PURPLE: (175, 82, 222),
    Color.DARK_BLUE: (28, 47, 102),
    Color.LIGHT_BLUE: (125, 180, 230),
}

# Concept spans are drawn in this color regardless of their stored color
HIGHLIGHT_COLOR = Color.ORANGE


@dataclass(frozen=True)
class AttributeSpec:
    key: AttributeKey
    value_type: type
    inherited_by_added_text: bool
    invalidation_conditions: frozenset[InvalidationCondition] = frozenset()

    def validate(self, value: Any) -> None:
        """Raise TypeError if value does not belong to this attribute."""
        if not isinstance(value, self.value_type):
            raise TypeError(
                f"{self.key.value} expects {self.value_type.__name__}, "
                f"got {type(value).__name__}"
            )


SCHEMA: dict[AttributeKey, AttributeSpec] = {
    AttributeKey.FONT: AttributeSpec(
        AttributeKey.FONT, Font, inherited_by_added_text=True
    ),
    AttributeKey.FOREGROUND_COLOR: AttributeSpec(
        AttributeKey.FOREGROUND_COLOR, Color, inherited_by_added_text=True
    ),
    AttributeKey.CONCEPT: AttributeSpec(
        AttributeKey.CONCEPT,
        bool,
        inherited_by_added_text=False,
        invalidation_conditions=frozenset({InvalidationCondition.TEXT_CHANGED}),
    ),
}


def inherited_attributes(attributes: dict[AttributeKey, Any]) -> dict[AttributeKey, Any]:
    """Return the subset of attributes that text typed next to them picks up."""
    return {
        key: value
        for key, value in attributes.items()
        if SCHEMA[key].inherited_by_added_text
    }


def keys_invalidated_by(condition: InvalidationCondition) -> list[AttributeKey]:
    return [
        key for key, spec in SCHEMA.items()
        if condition in spec.invalidation_conditions
    ]


def is_active(key: AttributeKey, value: Optional[Any]) -> bool:
    """Whether a stored value counts as "on" for toggling purposes."""
    if value is None:
        return False
    if key is AttributeKey.FONT:
        return value.is_bold
    if key is AttributeKey.CONCEPT:
        return value is True
    return True
