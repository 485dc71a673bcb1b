import os
import sys
import tempfile
import unittest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from zaicore.errors import FileSystemError
from zaicore.files import (
    KIND_DIR,
    KIND_FILE,
    create_file,
    decode_escapes,
    delete_path,
    format_entries,
    list_directory,
    path_kind,
    read_file,
)


class TestDecodeEscapes(unittest.TestCase):
    def test_common_sequences(self):
        self.assertEqual(decode_escapes("a\\nb"), "a\nb")
        self.assertEqual(decode_escapes("a\\tb"), "a\tb")
        self.assertEqual(decode_escapes("\\\\"), "\\")
        self.assertEqual(decode_escapes('\\"q\\"'), '"q"')

    def test_unicode_escape(self):
        self.assertEqual(decode_escapes("\\u0041\\x42"), "AB")

    def test_plain_text_untouched(self):
        self.assertEqual(decode_escapes("привет мир"), "привет мир")
        self.assertEqual(decode_escapes(""), "")


class TestFileActions(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.dir = self.tmp.name

    def tearDown(self):
        self.tmp.cleanup()

    def test_create_and_read(self):
        path = os.path.join(self.dir, "a.txt")
        create_file(path, "строка 1\nстрока 2")
        self.assertEqual(path_kind(path), KIND_FILE)
        self.assertEqual(read_file(path), "строка 1\nстрока 2")

    def test_create_overwrites(self):
        path = os.path.join(self.dir, "a.txt")
        create_file(path, "old")
        create_file(path, "new")
        self.assertEqual(read_file(path), "new")

    def test_create_in_missing_folder(self):
        with self.assertRaises(FileSystemError):
            create_file(os.path.join(self.dir, "nope", "a.txt"), "x")

    def test_list_sorted(self):
        os.mkdir(os.path.join(self.dir, "b"))
        create_file(os.path.join(self.dir, "A.txt"))
        create_file(os.path.join(self.dir, "c.txt"))
        entries = list_directory(self.dir)
        self.assertEqual(entries, [("A.txt", False), ("b", True), ("c.txt", False)])
        self.assertEqual(format_entries(entries)[1], "📁 b")
        self.assertEqual(format_entries(entries)[0], "📄 A.txt")

    def test_list_missing(self):
        with self.assertRaises(FileSystemError):
            list_directory(os.path.join(self.dir, "missing"))

    def test_delete_file_and_folder(self):
        f = os.path.join(self.dir, "a.txt")
        create_file(f, "x")
        d = os.path.join(self.dir, "sub")
        os.makedirs(os.path.join(d, "deeper"))
        create_file(os.path.join(d, "deeper", "b.txt"), "y")

        self.assertEqual(delete_path(f), KIND_FILE)
        self.assertEqual(delete_path(d), KIND_DIR)
        self.assertIsNone(path_kind(f))
        self.assertIsNone(path_kind(d))

    def test_delete_missing(self):
        with self.assertRaises(FileSystemError):
            delete_path(os.path.join(self.dir, "missing"))


if __name__ == "__main__":
    unittest.main()
