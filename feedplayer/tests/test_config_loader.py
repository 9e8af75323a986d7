import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from feedplayer.config_loader import load_presets
from feedplayer.models import FeedSpec

PRESETS = """
players:
  demo:
    spec: "nasa=https://api.nasa.gov/planetary/apod?api_key=${NASA_API_KEY}"
    feed_type: mixed
    fields: title
  civic:
    feeds:
      issues:
        - https://seeclickfix.com/api/v2/issues?page=1
        - https://seeclickfix.com/api/v2/issues?page=2
    require_media: true
    civic_limit: "5"
  broken: just-a-string
"""


class LoadPresetsTests(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = Path(self.tmpdir.name) / "feedplayer.yaml"
        self.path.write_text(PRESETS, encoding="utf-8")

    def tearDown(self):
        self.tmpdir.cleanup()

    @patch.dict(os.environ, {"NASA_API_KEY": "abc123"})
    def test_spec_string_preset_expands_env(self):
        presets = load_presets(self.path)

        self.assertEqual(set(presets), {"demo", "civic"})
        demo = presets["demo"]
        self.assertEqual(demo["spec"], "nasa=https://api.nasa.gov/planetary/apod?api_key=abc123")
        self.assertEqual(demo["fields"], ["title"])
        self.assertEqual(demo["feed_type"], "mixed")

    def test_feed_mapping_preset(self):
        civic = load_presets(self.path)["civic"]

        self.assertIsInstance(civic["spec"], FeedSpec)
        self.assertEqual(len(civic["spec"]["issues"]), 2)
        self.assertTrue(civic["require_media"])
        self.assertEqual(civic["civic_limit"], 5)

    def test_missing_file_gives_no_presets(self):
        self.assertEqual(load_presets(Path(self.tmpdir.name) / "nope.yaml"), {})


if __name__ == "__main__":
    unittest.main()
