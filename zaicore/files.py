import os
import re
import shutil

from .errors import FileSystemError

KIND_FILE = "file"
KIND_DIR = "dir"

ICON_DIR = "📁"
ICON_FILE = "📄"

_SIMPLE_ESCAPES = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "f": "\f",
    "v": "\v",
    "a": "\a",
    "e": "\x1b",
    "0": "\0",
}

_ESCAPE_RE = re.compile(r"\\(u[0-9a-fA-F]{4}|x[0-9a-fA-F]{2}|.)", re.DOTALL)


def _unescape(m: re.Match) -> str:
    seq = m.group(1)
    if len(seq) > 1:
        return chr(int(seq[1:], 16))
    return _SIMPLE_ESCAPES.get(seq, seq)


def decode_escapes(text: str) -> str:
    """Turn literal escape sequences such as ``\\n`` into real characters.

    Non-ASCII text passes through untouched; any other escaped character
    stands for itself (``\\\\`` -> ``\\``, ``\\"`` -> ``"``).
    """
    if not text or "\\" not in text:
        return text or ""
    return _ESCAPE_RE.sub(_unescape, text)


def path_kind(path: str) -> str | None:
    if os.path.isfile(path):
        return KIND_FILE
    if os.path.isdir(path):
        return KIND_DIR
    return None


def create_file(path: str, content: str = ""):
    try:
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
    except OSError as e:
        raise FileSystemError(e.strerror or str(e), path=path) from e


def read_file(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return f.read()
    except OSError as e:
        raise FileSystemError(e.strerror or str(e), path=path) from e


def list_directory(path: str) -> list[tuple[str, bool]]:
    if not os.path.isdir(path):
        raise FileSystemError("not found", path=path)
    try:
        with os.scandir(path) as it:
            entries = [(entry.name, entry.is_dir()) for entry in it]
    except OSError as e:
        raise FileSystemError(e.strerror or str(e), path=path) from e
    return sorted(entries, key=lambda e: e[0].lower())


def format_entries(entries: list[tuple[str, bool]]) -> list[str]:
    return [f"{ICON_DIR if is_dir else ICON_FILE} {name}" for name, is_dir in entries]


def delete_path(path: str) -> str:
    kind = path_kind(path)
    if kind is None:
        raise FileSystemError("not found", path=path)
    try:
        if kind == KIND_FILE:
            os.remove(path)
        else:
            shutil.rmtree(path)
    except OSError as e:
        raise FileSystemError(e.strerror or str(e), path=path) from e
    return kind
