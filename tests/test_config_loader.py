import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from vc_release_notes.config.loader import DEFAULTS, ConfigError, load_config


class TestConfigLoader(unittest.TestCase):
    """Tests for the configuration loader."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.config_dir = Path(self._tmp.name)
        patcher = patch("vc_release_notes.config.loader._get_config_directory", return_value=self.config_dir)
        patcher.start()
        self.addCleanup(patcher.stop)
        env = patch.dict(os.environ, {}, clear=False)
        env.start()
        self.addCleanup(env.stop)
        os.environ.pop("GITHUB_TOKEN", None)

    def write(self, data) -> None:
        text = data if isinstance(data, str) else json.dumps(data)
        (self.config_dir / "config.json").write_text(text, encoding="utf-8")

    def test_missing_file_uses_defaults(self) -> None:
        self.assertEqual(load_config(), DEFAULTS)

    def test_load_config_success(self) -> None:
        self.write({
            "remote": "upstream",
            "api_url": "https://ghe.example.com/api/v3",
            "request_timeout": 5.5,
            "github_token": "from-file",
        })
        result = load_config()
        self.assertEqual(result["remote"], "upstream")
        self.assertEqual(result["api_url"], "https://ghe.example.com/api/v3")
        self.assertEqual(result["request_timeout"], 5.5)
        self.assertEqual(result["github_token"], "from-file")

    def test_partial_file_keeps_defaults(self) -> None:
        self.write({"remote": "upstream", "unknown": 1})
        result = load_config()
        self.assertEqual(result["remote"], "upstream")
        self.assertEqual(result["api_url"], DEFAULTS["api_url"])
        self.assertNotIn("unknown", result)

    def test_environment_token_wins(self) -> None:
        self.write({"github_token": "from-file"})
        os.environ["GITHUB_TOKEN"] = "from-env"
        self.assertEqual(load_config()["github_token"], "from-env")

    def test_load_config_invalid_json(self) -> None:
        self.write("{invalid}")
        with self.assertRaises(ConfigError):
            load_config()

    def test_not_an_object(self) -> None:
        self.write([1, 2])
        with self.assertRaises(ConfigError):
            load_config()

    def test_wrong_types(self) -> None:
        cases = [
            {"remote": 1},
            {"api_url": ["x"]},
            {"request_timeout": "10"},
            {"request_timeout": True},
            {"github_token": 123},
        ]
        for data in cases:
            with self.subTest(data=data):
                self.write(data)
                with self.assertRaises(ConfigError):
                    load_config()


if __name__ == "__main__":
    unittest.main()
