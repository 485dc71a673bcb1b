import json
import os
import sys
import tempfile
import threading
import unittest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from zaicore.cache import ResponseCache, normalize_key


class TestResponseCache(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "cache.json")

    def tearDown(self):
        self.tmp.cleanup()

    def test_missing_file_is_empty(self):
        cache = ResponseCache(self.path)
        self.assertEqual(len(cache), 0)
        self.assertIsNone(cache.get("anything"))

    def test_lookup_ignores_case_and_whitespace(self):
        cache = ResponseCache(self.path)
        cache.set("Hello", "world")
        self.assertEqual(cache.get("hello"), "world")
        self.assertEqual(cache.get("  HELLO  "), "world")
        self.assertIn("hElLo", cache)
        self.assertEqual(len(cache), 1)

    def test_first_spelling_is_kept_on_overwrite(self):
        cache = ResponseCache(self.path)
        cache.set("Hello", "a")
        cache.set("  HELLO ", "b")
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        self.assertEqual(data, {"Hello": "b"})

    def test_persisted_between_instances(self):
        ResponseCache(self.path).set("Какая погода?", "Солнечно")
        again = ResponseCache(self.path)
        self.assertEqual(again.get("какая погода?"), "Солнечно")

    def test_non_ascii_written_verbatim(self):
        ResponseCache(self.path).set("привет", "мир")
        with open(self.path, "r", encoding="utf-8") as f:
            raw = f.read()
        self.assertIn("привет", raw)
        self.assertIn("мир", raw)

    def test_corrupt_file_starts_empty(self):
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("{not json")
        cache = ResponseCache(self.path)
        self.assertEqual(len(cache), 0)
        cache.set("q", "a")
        self.assertEqual(ResponseCache(self.path).get("q"), "a")

    def test_non_object_file_ignored(self):
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(["a", "b"], f)
        self.assertEqual(len(ResponseCache(self.path)), 0)

    def test_concurrent_writers(self):
        cache = ResponseCache(self.path)
        threads = [
            threading.Thread(target=cache.set, args=(f"q{i}", f"a{i}"))
            for i in range(20)
        ]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        for i in range(20):
            self.assertEqual(cache.get(f"q{i}"), f"a{i}")
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        self.assertEqual(len(data), 20)
        self.assertEqual(len(ResponseCache(self.path)), 20)

    def test_normalize_key(self):
        self.assertEqual(normalize_key("  ПрИвЕт "), "привет")
        self.assertEqual(normalize_key(None), "")


if __name__ == "__main__":
    unittest.main()
