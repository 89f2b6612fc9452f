"""Tests for render overrides and toggle commands."""

import unittest

from storymark.attributes import HIGHLIGHT_COLOR, AttributeKey, Color, Font
from storymark.formatting import (
    RenderOverride,
    effective_attributes,
    render_override,
    styled_segments,
    toggle_attribute,
    toggle_bold,
    toggle_color,
    toggle_concept,
)
from storymark.model import AttributedText, Selection


class TestRenderOverride(unittest.TestCase):
    """Test the presentation rules."""

    def test_concept_is_highlighted(self):
        override = render_override({AttributeKey.CONCEPT: True})
        self.assertEqual(override.color, Color.ORANGE)
        self.assertEqual(HIGHLIGHT_COLOR, Color.ORANGE)

    def test_concept_beats_stored_color(self):
        attributes = {AttributeKey.CONCEPT: True, AttributeKey.FOREGROUND_COLOR: Color.BLUE}
        self.assertEqual(render_override(attributes).color, HIGHLIGHT_COLOR)
        self.assertEqual(
            effective_attributes(attributes)[AttributeKey.FOREGROUND_COLOR], HIGHLIGHT_COLOR
        )

    def test_no_override_without_concept(self):
        self.assertEqual(render_override({AttributeKey.FOREGROUND_COLOR: Color.BLUE}), RenderOverride())
        self.assertEqual(render_override({AttributeKey.CONCEPT: False}), RenderOverride())
        self.assertEqual(render_override({}), RenderOverride())

    def test_effective_attributes_returns_new_mapping(self):
        attributes = {AttributeKey.CONCEPT: True, AttributeKey.FOREGROUND_COLOR: Color.BLUE}
        effective_attributes(attributes)
        self.assertEqual(attributes[AttributeKey.FOREGROUND_COLOR], Color.BLUE)

    def test_rendering_never_changes_stored_values(self):
        """Rendering any number of times leaves the model as it was."""
        text = AttributedText("Hello world")
        text.set_attributes(0, 11, AttributeKey.FOREGROUND_COLOR, Color.DARK_BLUE)
        text.set_attributes(0, 5, AttributeKey.CONCEPT, True)
        before = text.copy()
        for _ in range(50):
            for run in text.runs():
                render_override(run.attributes)
                effective_attributes(run.attributes)
            list(styled_segments(text))
        self.assertEqual(text, before)
        self.assertEqual(text.get_attribute(0, AttributeKey.FOREGROUND_COLOR), Color.DARK_BLUE)
        self.assertIs(text.get_attribute(0, AttributeKey.CONCEPT), True)

    def test_styled_segments(self):
        text = AttributedText("Hello world")
        text.set_attributes(0, 5, AttributeKey.CONCEPT, True)
        self.assertEqual(list(styled_segments(text)), [
            ("Hello", {AttributeKey.CONCEPT: True, AttributeKey.FOREGROUND_COLOR: HIGHLIGHT_COLOR}),
            (" world", {}),
        ])


class TestToggle(unittest.TestCase):
    """Test the first-run toggle policy."""

    def setUp(self):
        self.text = AttributedText("Hello world")

    def test_hello_world_concept_scenario(self):
        """Toggle concept on, check highlight, toggle off, check color restored."""
        self.text.set_attributes(0, 11, AttributeKey.FOREGROUND_COLOR, Color.LIGHT_BLUE)
        selection = Selection(0, 5)

        toggle_concept(self.text, selection)
        first = next(self.text.runs())
        self.assertEqual(first.range, (0, 5))
        self.assertIs(first.get(AttributeKey.CONCEPT), True)
        self.assertEqual(render_override(first.attributes).color, HIGHLIGHT_COLOR)

        toggle_concept(self.text, selection)
        first = next(self.text.runs())
        self.assertIsNone(first.get(AttributeKey.CONCEPT))
        self.assertEqual(first.get(AttributeKey.FOREGROUND_COLOR), Color.LIGHT_BLUE)
        self.assertEqual(render_override(first.attributes), RenderOverride())
        self.assertEqual(len(list(self.text.runs())), 1)

    def test_toggle_twice_restores_state(self):
        for selection in (Selection(0, 5), Selection(2, 9), Selection(0, 11)):
            before = self.text.copy()
            toggle_concept(self.text, selection)
            toggle_concept(self.text, selection)
            self.assertEqual(self.text, before)

    def test_toggle_twice_restores_concept(self):
        self.text.set_attributes(0, 11, AttributeKey.CONCEPT, True)
        before = self.text.copy()
        toggle_concept(self.text, Selection(3, 7))
        self.assertIsNone(self.text.get_attribute(4, AttributeKey.CONCEPT))
        toggle_concept(self.text, Selection(3, 7))
        self.assertEqual(self.text, before)

    def test_mixed_selection_follows_first_run(self):
        """A selection starting in a concept run clears concept everywhere in it."""
        self.text.set_attributes(0, 5, AttributeKey.CONCEPT, True)
        toggle_concept(self.text, Selection(3, 11))
        self.assertEqual(
            [(run.range, run.attributes) for run in self.text.runs()],
            [((0, 3), {AttributeKey.CONCEPT: True}), ((3, 11), {})],
        )

    def test_mixed_selection_starting_plain_sets_everywhere(self):
        self.text.set_attributes(6, 11, AttributeKey.CONCEPT, True)
        toggle_concept(self.text, Selection(0, 8))
        self.assertEqual(
            [(run.range, run.attributes) for run in self.text.runs()],
            [((0, 11), {AttributeKey.CONCEPT: True})],
        )

    def test_caret_selection_is_noop(self):
        before = self.text.copy()
        toggle_concept(self.text, Selection.caret(3))
        toggle_bold(self.text, Selection.caret(0))
        self.assertEqual(self.text, before)

    def test_toggle_bold(self):
        toggle_bold(self.text, Selection(0, 5))
        self.assertEqual(self.text.get_attribute(0, AttributeKey.FONT), Font.BODY_BOLD)
        toggle_bold(self.text, Selection(0, 5))
        self.assertIsNone(self.text.get_attribute(0, AttributeKey.FONT))

    def test_non_bold_font_counts_as_off(self):
        self.text.set_attributes(0, 11, AttributeKey.FONT, Font.BODY)
        toggle_bold(self.text, Selection(0, 5))
        self.assertTrue(self.text.get_attribute(0, AttributeKey.FONT).is_bold)

    def test_toggle_color(self):
        toggle_color(self.text, Selection(6, 11), Color.RED)
        self.assertEqual(self.text.get_attribute(6, AttributeKey.FOREGROUND_COLOR), Color.RED)
        toggle_color(self.text, Selection(6, 11), Color.BLUE)
        self.assertIsNone(self.text.get_attribute(6, AttributeKey.FOREGROUND_COLOR))

    def test_toggle_returns_selection(self):
        selection = toggle_attribute(self.text, Selection(2, 4), AttributeKey.CONCEPT, True)
        self.assertEqual(selection, Selection(2, 4))

    def test_toggle_clamps_selection(self):
        selection = toggle_concept(self.text, Selection(6, 99))
        self.assertEqual(selection, Selection(6, 11))
        self.assertIs(self.text.get_attribute(10, AttributeKey.CONCEPT), True)
