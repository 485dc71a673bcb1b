import io
import os
import sys
import tempfile
import unittest
from unittest import mock

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from zaicore.assistant import Assistant
from zaicore.config import LOG_FILE
from zaicore.logui import configure_log_file, get_log_file


class TestAssistant(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        configure_log_file(None)

    def tearDown(self):
        configure_log_file(None)
        self.tmp.cleanup()

    def test_log_file_defaults_to_base_dir(self):
        Assistant(base_dir=self.tmp.name, environ={})
        self.assertEqual(get_log_file(), os.path.join(self.tmp.name, LOG_FILE))

    def test_run_reads_until_eof(self):
        assistant = Assistant(base_dir=self.tmp.name, environ={})
        stream = io.StringIO("посчитать 2+2\n\nпривет\n")
        with mock.patch("builtins.print"):
            assistant.run(stream=stream)
        history = assistant.router.state().history
        self.assertEqual([h.command for h in history], ["посчитать 2+2", "привет"])

    def test_safe_process_command_survives_crash(self):
        assistant = Assistant(base_dir=self.tmp.name, environ={})
        with mock.patch.object(assistant.router, "execute", side_effect=RuntimeError("boom")):
            self.assertIsNone(assistant._safe_process_command("привет"))

    def test_settings_file_read_from_base_dir(self):
        with open(os.path.join(self.tmp.name, "appsettings.json"), "w", encoding="utf-8") as f:
            f.write('{"AI": {"Model": "x/y"}}')
        assistant = Assistant(base_dir=self.tmp.name, environ={})
        self.assertEqual(assistant.router.config.model, "x/y")


if __name__ == "__main__":
    unittest.main()
