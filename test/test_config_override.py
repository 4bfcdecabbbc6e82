"""Tests for config override behavior with defaults."""

import sys
import tempfile
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from ConfDesk.config import load_config_with_defaults


_BASE_YAML = """
log:
  level: INFO
  to_file: true
  dir: log

preferences:
  db_path: database/preferences.db
  page_size_options: [8, 12, 20, 50]
  default_page_size: 8
  default_locale: en

cache:
  participation_ttl: 300

output:
  base_dir: output
  proceedings:
    template_dir: template/proceedings
"""


class TestConfigOverride(unittest.TestCase):
    def test_override_merges_with_defaults(self) -> None:
        override_yaml = """
log:
  level: DEBUG

preferences:
  default_locale: uk

output:
  certificate:
    font: fonts/DejaVuSans.ttf
"""
        with tempfile.TemporaryDirectory() as tmp:
            override_path = Path(tmp) / "override.yml"
            override_path.write_text(override_yaml, encoding="utf-8")

            cfg = load_config_with_defaults(override_path, _defaults_text=_BASE_YAML)

        self.assertEqual(cfg.runtime.level, "DEBUG")
        self.assertEqual(cfg.preferences.default_locale, "uk")
        self.assertEqual(cfg.preferences.default_page_size, 8)
        self.assertEqual(cfg.output.base_dir, "output")
        self.assertEqual(cfg.output.proceedings_template_dir, "template/proceedings")
        self.assertEqual(cfg.output.certificate_font, "fonts/DejaVuSans.ttf")

    def test_empty_override_uses_defaults(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            override_path = Path(tmp) / "override.yml"
            override_path.write_text("{}", encoding="utf-8")

            cfg = load_config_with_defaults(override_path, _defaults_text=_BASE_YAML)

        self.assertEqual(cfg.runtime.level, "INFO")
        self.assertEqual(cfg.preferences.default_locale, "en")
        self.assertEqual(cfg.cache.participation_ttl, 300)

    def test_override_list_replaces_default_list(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            override_path = Path(tmp) / "override.yml"
            override_path.write_text(
                "preferences:\n  page_size_options: [10, 25]\n  default_page_size: 10\n",
                encoding="utf-8",
            )
            cfg = load_config_with_defaults(override_path, _defaults_text=_BASE_YAML)

        self.assertEqual(cfg.preferences.page_size_options, (10, 25))


if __name__ == "__main__":
    unittest.main()
