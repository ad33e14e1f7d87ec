import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

try:
    import tomllib
except ImportError:
    import tomli as tomllib

from pyarraycmp.core.comparator import Comparator
from pyarraycmp.core.config import Config, parse_bool
from pyarraycmp.core.errors import ConfigError


class ConfigTestCase(unittest.TestCase):
    """Runs each test in an empty working directory with a private user config path."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp_path = Path(self._tmp.name)
        self._old_cwd = os.getcwd()
        os.chdir(self.tmp_path)

        self.user_config = self.tmp_path / "home" / "config.toml"
        self._patchers = [
            patch("pyarraycmp.core.config.USER_CONFIG_PATH", self.user_config),
            patch.dict(os.environ, {}, clear=False),
        ]
        for patcher in self._patchers:
            patcher.start()
        for name in list(os.environ):
            if name.startswith("ARRAYCMP_"):
                del os.environ[name]

    def tearDown(self):
        for patcher in reversed(self._patchers):
            patcher.stop()
        os.chdir(self._old_cwd)
        self._tmp.cleanup()

    def write(self, path: Path, text: str) -> Path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path


class TestConfigLoading(ConfigTestCase):

    def test_defaults(self):
        config = Config()
        self.assertEqual(config.get("separator"), "\x07")
        self.assertTrue(config.get("whitespace_significant"))
        self.assertTrue(config.get("case_significant"))
        self.assertFalse(config.get("default_full"))
        self.assertEqual(config.skip_positions(), {})

    def test_defaults_are_not_shared(self):
        config = Config()
        config.set("skip.1", True)
        self.assertEqual(Config().get("skip"), {})

    def test_explicit_file(self):
        path = self.write(self.tmp_path / "custom.toml", (
            'separator = "|"\n'
            'case_significant = false\n'
            '[skip]\n'
            '"2" = true\n'
            '4 = 1\n'
        ))
        config = Config(config_path=path)
        self.assertEqual(config.get("separator"), "|")
        self.assertFalse(config.get("case_significant"))
        self.assertEqual(config.skip_positions(), {2: True, 4: 1})

    def test_project_file_then_user_file(self):
        self.write(self.tmp_path / "arraycmp.toml", 'separator = ","\ndefault_full = true\n')
        self.write(self.user_config, 'separator = ";"\n')
        config = Config()
        self.assertEqual(config.get("separator"), ";")
        self.assertTrue(config.get("default_full"))

    def test_malformed_file_is_skipped(self):
        path = self.write(self.tmp_path / "broken.toml", "separator = \n")
        with self.assertLogs("pyarraycmp.core.config", level="WARNING"):
            config = Config(config_path=path)
        self.assertEqual(config.get("separator"), "\x07")

    def test_environment_overrides_files(self):
        path = self.write(self.tmp_path / "custom.toml", 'whitespace_significant = true\n')
        env = {
            "ARRAYCMP_WHITESPACE_SIGNIFICANT": "no",
            "ARRAYCMP_DEFAULT_FULL": "yes",
            "ARRAYCMP_SEPARATOR": "|",
            "ARRAYCMP_SKIP": "1, 3",
            "ARRAYCMP_LOG_LEVEL": "debug",
        }
        with patch.dict(os.environ, env):
            config = Config(config_path=path)
        self.assertFalse(config.get("whitespace_significant"))
        self.assertTrue(config.get("default_full"))
        self.assertEqual(config.get("separator"), "|")
        self.assertEqual(config.skip_positions(), {1: True, 3: True})
        self.assertEqual(config.get("log_level"), "DEBUG")

    def test_invalid_skip_in_environment_is_ignored(self):
        with patch.dict(os.environ, {"ARRAYCMP_SKIP": "2,x"}):
            with self.assertLogs("pyarraycmp.core.config", level="WARNING"):
                config = Config()
        self.assertEqual(config.skip_positions(), {2: True})

    def test_get_missing_key(self):
        config = Config()
        self.assertIsNone(config.get("nope"))
        self.assertEqual(config.get("separator.deeper", "fallback"), "fallback")


class TestSkipPositions(ConfigTestCase):

    def test_non_integer_key(self):
        config = Config()
        config.set("skip", {"first": True})
        with self.assertRaises(ConfigError):
            config.skip_positions()

    def test_negative_key(self):
        config = Config()
        config.set("skip", {"-1": True})
        with self.assertRaises(ConfigError):
            config.skip_positions()

    def test_not_a_table(self):
        config = Config()
        config.set("skip", [1, 2])
        with self.assertRaises(ConfigError):
            config.skip_positions()


class TestTypedAccessors(ConfigTestCase):

    def test_string_boolean_in_file_is_rejected(self):
        path = self.write(self.tmp_path / "custom.toml", 'whitespace_significant = "false"\n')
        config = Config(config_path=path)
        with self.assertRaises(ConfigError):
            config.get_bool("whitespace_significant", True)
        with self.assertRaises(ConfigError):
            Comparator.from_config(config)

    def test_integer_separator_in_file_is_rejected(self):
        path = self.write(self.tmp_path / "custom.toml", "separator = 5\n")
        with self.assertRaises(ConfigError):
            Comparator.from_config(Config(config_path=path))

    def test_typed_values(self):
        path = self.write(self.tmp_path / "custom.toml", 'separator = "|"\ndefault_full = true\n')
        config = Config(config_path=path)
        self.assertEqual(config.get_str("separator", "\x07"), "|")
        self.assertIs(config.get_bool("default_full", False), True)
        self.assertIs(config.get_bool("case_significant", True), True)

    def test_parse_bool(self):
        for text in ("true", "Yes", "ON", "1"):
            self.assertTrue(parse_bool(text))
        for text in ("false", "no", "off", "0"):
            self.assertFalse(parse_bool(text))


class TestSaveAndReset(ConfigTestCase):

    def test_save_writes_only_changed_values(self):
        config = Config()
        config.set("case_significant", False)
        config.save_user_config()

        with open(self.user_config, "rb") as f:
            saved = tomllib.load(f)
        self.assertEqual(saved, {"case_significant": False})
        self.assertFalse(Config().get("case_significant"))

    def test_save_keeps_existing_user_values(self):
        self.write(self.user_config, 'separator = "|"\n')
        config = Config()
        config.set("skip.3", True)
        config.save_user_config()

        with open(self.user_config, "rb") as f:
            saved = tomllib.load(f)
        self.assertEqual(saved["separator"], "|")
        self.assertEqual(saved["skip"], {"3": True})

    def test_reset(self):
        config = Config()
        self.assertFalse(config.reset_user_config())
        config.set("default_full", True)
        config.save_user_config()
        self.assertTrue(config.reset_user_config())
        self.assertFalse(self.user_config.exists())


if __name__ == '__main__':
    unittest.main()
