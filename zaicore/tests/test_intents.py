import os
import sys
import unittest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from zaicore.intents import Intent, classify, classify_intent


class TestIntentTable(unittest.TestCase):
    def test_prefix_intents(self):
        cases = {
            "открыть сайт google.com": Intent.OPEN_SITE,
            "open site example.org": Intent.OPEN_SITE,
            "посчитать 2+2": Intent.CALCULATE,
            "calc 1+1": Intent.CALCULATE,
            "=2*3": Intent.CALCULATE,
            "setkey sk-1": Intent.SET_API_KEY,
            "apikey sk-1": Intent.SET_API_KEY,
            "setmodel x/y": Intent.SET_MODEL,
            "showconfig": Intent.SHOW_CONFIG,
            "создать файл a.txt": Intent.CREATE_FILE,
            "create file a.txt": Intent.CREATE_FILE,
            "setcontext 5": Intent.SET_CONTEXT_LENGTH,
            "удалить a.txt": Intent.DELETE,
            "rm a.txt": Intent.DELETE,
            "delete a.txt": Intent.DELETE,
            "dir C:\\": Intent.LIST_DIRECTORY,
            "ls /tmp": Intent.LIST_DIRECTORY,
            "читать a.txt": Intent.READ_FILE,
            "cat a.txt": Intent.READ_FILE,
            "спроси как дела": Intent.ASK_AI,
            "? как дела": Intent.ASK_AI,
        }
        for text, intent in cases.items():
            self.assertEqual(classify_intent(text), intent, text)

    def test_exact_phrases(self):
        self.assertEqual(classify_intent("привет"), Intent.GREETING)
        self.assertEqual(classify_intent("  TIME "), Intent.TIME)
        self.assertEqual(classify_intent("очистить"), Intent.CLEAR_OUTPUT)
        self.assertEqual(classify_intent("forget"), Intent.FORGET_CONTEXT)
        self.assertEqual(classify_intent("помощь"), Intent.HELP)

    def test_case_insensitive_and_deterministic(self):
        for text in ("ПОСЧИТАТЬ 2+2", "Посчитать 2+2", "посчитать 2+2"):
            self.assertEqual(classify_intent(text), Intent.CALCULATE)
            self.assertEqual(classify_intent(text), classify_intent(text))

    def test_documented_overlaps(self):
        self.assertEqual(classify_intent("calculate 2+2"), Intent.CALCULATE)
        self.assertEqual(classify_intent("rmdir foo"), Intent.DELETE)
        self.assertEqual(classify_intent("directory"), Intent.LIST_DIRECTORY)
        self.assertEqual(classify_intent("catalog"), Intent.READ_FILE)
        self.assertEqual(classify_intent("timeout"), Intent.UNKNOWN)
        self.assertEqual(classify_intent("hello there"), Intent.UNKNOWN)

    def test_arguments(self):
        self.assertEqual(classify("открыть сайт  google.com").argument, "google.com")
        self.assertEqual(classify("calculate 2 + 2").argument, "2 + 2")
        self.assertEqual(classify("=2*(3+4)").argument, "2*(3+4)")
        self.assertEqual(classify("?  как дела").argument, "как дела")
        self.assertEqual(classify("create file a.txt hello world").argument, "a.txt hello world")
        self.assertEqual(classify("ls").argument, "")
        self.assertEqual(classify("спросить погоду").argument, "погоду")

    def test_argument_keeps_original_case(self):
        cmd = classify("SETMODEL OpenAI/GPT-4")
        self.assertEqual(cmd.intent, Intent.SET_MODEL)
        self.assertEqual(cmd.argument, "OpenAI/GPT-4")

    def test_unknown(self):
        cmd = classify("сделай что-нибудь")
        self.assertEqual(cmd.intent, Intent.UNKNOWN)
        self.assertIsNone(cmd.prefix)


if __name__ == "__main__":
    unittest.main()
