import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from sfmodkit.game import data
from sfmodkit.game.environment import ToolConfig, ToolContext
from sfmodkit.helpers.errors import FileLoggingSetupError


class TestToolConfig(unittest.TestCase):
    def test_defaults(self):
        config = ToolConfig()
        self.assertIsNone(config.data_folder)
        self.assertEqual(config.official_plugins, set(data.OFFICIAL_PLUGINS))

    def test_extra_values(self):
        config = ToolConfig(extra_official_plugins="MyCreation.esm", extra_candidate_paths=None,
                            unknown_key=1)
        self.assertIn("MyCreation.esm", config.official_plugins)
        self.assertIn("Starfield.esm", config.official_plugins)
        self.assertEqual(config.extra_candidate_paths, [])


class TestToolContext(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def write_config(self, content: str) -> str:
        path = self.root / "sfmodkit.yaml"
        path.write_text(content, encoding="utf-8")
        return str(path)

    def test_load_config(self):
        context = ToolContext(self.write_config(
            "data_folder: D:\\Starfield\\Data\n"
            "extra_candidate_paths:\n  - G:\\Games\\Starfield\\Starfield.exe\n"))
        config = context.load_config()
        self.assertEqual(config.data_folder, "D:\\Starfield\\Data")
        self.assertEqual(config.extra_candidate_paths, ["G:\\Games\\Starfield\\Starfield.exe"])

    def test_invalid_config_falls_back_to_defaults(self):
        cases = {
            "broken yaml": "data_folder: [unclosed\n",
            "not a mapping": "- one\n- two\n",
            "wrong type": "extra_official_plugins: {a: 1}\n",
        }
        for case, content in cases.items():
            with self.subTest(case=case):
                context = ToolContext(self.write_config(content))
                with self.assertLogs("sfmodkit", level="WARNING"):
                    config = context.load_config()
                self.assertEqual(config, ToolConfig())

    def test_missing_explicit_config(self):
        context = ToolContext(str(self.root / "absent.yaml"))
        with self.assertLogs("sfmodkit", level="WARNING"):
            self.assertEqual(context.load_config(), ToolConfig())

    def test_log_file_receives_errors_only(self):
        context = ToolContext()
        context.setup_loggers(str(self.root))
        try:
            context.logger.debug("debug details")
            context.logger.error("something failed")
        finally:
            context.close_loggers()

        log_text = Path(context.log_path).read_text(encoding="utf-8")
        self.assertEqual(Path(context.log_path).name, data.LOG_FILE_NAME)
        self.assertIn("ERROR", log_text)
        self.assertIn("something failed", log_text)
        self.assertNotIn("debug details", log_text)

    def test_log_file_is_appended(self):
        for message in ("first run", "second run"):
            context = ToolContext()
            context.setup_loggers(str(self.root))
            context.logger.error(message)
            context.close_loggers()

        log_text = (self.root / data.LOG_FILE_NAME).read_text(encoding="utf-8")
        self.assertIn("first run", log_text)
        self.assertIn("second run", log_text)

    def test_debug_logs_everything(self):
        context = ToolContext(debug=True)
        context.setup_loggers(str(self.root))
        try:
            context.logger.debug("debug details")
        finally:
            context.close_loggers()
        self.assertIn("debug details", (self.root / data.LOG_FILE_NAME).read_text(encoding="utf-8"))

    @unittest.skipIf(sys.platform == "win32", "config lives next to the executable on Windows")
    def test_local_config_path_follows_xdg(self):
        with mock.patch.dict(os.environ, {"XDG_CONFIG_HOME": str(self.root)}):
            self.assertEqual(ToolContext.get_local_config_path(), os.path.join(str(self.root), "sfmodkit"))
        with mock.patch.dict(os.environ, {"XDG_CONFIG_HOME": "", "HOME": str(self.root)}):
            self.assertEqual(ToolContext.get_local_config_path(),
                             os.path.join(str(self.root), ".config", "sfmodkit"))

    def test_unwritable_log_location(self):
        blocker = self.root / "blocker"
        blocker.write_text("x")
        context = ToolContext()
        with self.assertRaises(FileLoggingSetupError):
            context.setup_loggers(str(blocker / "logs"))
        context.close_loggers()


if __name__ == "__main__":
    unittest.main()
