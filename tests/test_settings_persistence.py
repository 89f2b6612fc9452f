"""Unit tests for settings persistence."""

import json
import os
import shutil
import tempfile
import unittest
from pathlib import Path

from storymark.constants import EditorConstants
from storymark.settings_persistence import DEFAULT_SETTINGS, SettingsPersistence, get_persistence


class TestSettingsPersistence(unittest.TestCase):
    """Test settings persistence functionality."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.persistence = SettingsPersistence(config_dir=Path(self.temp_dir))

    def tearDown(self):
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def _write_raw(self, content: str):
        with open(self.persistence.settings_file, 'w', encoding='utf-8') as f:
            f.write(content)

    def test_defaults_without_file(self):
        """No settings file means default settings."""
        self.assertEqual(self.persistence.load_settings(), DEFAULT_SETTINGS)
        self.assertEqual(
            self.persistence.get("completion_model"), EditorConstants.DEFAULT_COMPLETION_MODEL
        )

    def test_save_and_load_settings(self):
        success = self.persistence.save_settings({
            "completion_model": "gpt-4o-mini",
            "welcome_on_new": False,
        })
        self.assertTrue(success)

        # A fresh instance reads the same file
        reloaded = SettingsPersistence(config_dir=Path(self.temp_dir))
        settings = reloaded.load_settings()
        self.assertEqual(settings["completion_model"], "gpt-4o-mini")
        self.assertFalse(settings["welcome_on_new"])
        self.assertEqual(settings["system_prompt"], EditorConstants.DEFAULT_SYSTEM_PROMPT)

    def test_save_merges_with_stored(self):
        self.persistence.save_settings({"completion_model": "gpt-4o-mini"})
        self.persistence.save_settings({"last_document": "/tmp/story.story"})
        settings = self.persistence.load_settings()
        self.assertEqual(settings["completion_model"], "gpt-4o-mini")
        self.assertEqual(settings["last_document"], "/tmp/story.story")

    def test_invalid_value_is_not_saved(self):
        self.assertFalse(self.persistence.save_settings({"welcome_on_new": "yes"}))
        self.assertFalse(self.persistence.settings_file.exists())

    def test_corrupted_settings_file(self):
        """Malformed JSON falls back to defaults."""
        self._write_raw("{ invalid json }")
        self.assertEqual(self.persistence.load_settings(), DEFAULT_SETTINGS)

    def test_non_dict_settings_file(self):
        self._write_raw("[1, 2, 3]")
        self.assertEqual(self.persistence.load_settings(), DEFAULT_SETTINGS)

    def test_invalid_stored_value_ignored(self):
        self._write_raw(json.dumps({"welcome_on_new": "yes", "completion_model": ""}))
        settings = self.persistence.load_settings()
        self.assertTrue(settings["welcome_on_new"])
        self.assertEqual(settings["completion_model"], EditorConstants.DEFAULT_COMPLETION_MODEL)

    def test_unknown_settings_kept(self):
        """Unknown keys pass validation for forward compatibility."""
        self.assertTrue(self.persistence.save_settings({"theme": "dark"}))
        self.persistence.clear_cache()
        self.assertEqual(self.persistence.load_settings()["theme"], "dark")

    def test_validate_setting(self):
        self.assertTrue(self.persistence.validate_setting("completion_model", "gpt-4o"))
        self.assertFalse(self.persistence.validate_setting("completion_model", 4))
        self.assertFalse(self.persistence.validate_setting("system_prompt", "   "))
        self.assertTrue(self.persistence.validate_setting("last_document", None))
        self.assertFalse(self.persistence.validate_setting("last_document", 7))

    def test_atomic_save_leaves_no_temp_file(self):
        self.persistence.save_settings({"completion_model": "gpt-4o-mini"})
        self.assertEqual(os.listdir(self.temp_dir), ["settings.json"])

    def test_cache_cleared(self):
        self.persistence.load_settings()
        self._write_raw(json.dumps({"completion_model": "other-model"}))
        # Cached value until cleared
        self.assertEqual(
            self.persistence.get("completion_model"), EditorConstants.DEFAULT_COMPLETION_MODEL
        )
        self.persistence.clear_cache()
        self.assertEqual(self.persistence.get("completion_model"), "other-model")

    def test_get_persistence_is_shared(self):
        self.assertIs(get_persistence(), get_persistence())


if __name__ == '__main__':
    unittest.main()
