"""Ordered intent table for typed commands.

Rules are tried top to bottom with a plain ``startswith`` on the lower-cased,
trimmed text, so the order below decides every overlap:

* ``calc`` also catches ``calculate ...``; ``=`` is a one-character prefix
  and never collides with a word.
* ``rm`` catches ``rmdir ...`` (DELETE), ``dir`` catches ``directory``,
  ``ls`` catches ``lsof``, ``cat`` catches ``catalog``.
* DELETE sits above LIST_DIRECTORY so ``delete`` never lists anything.
* SET_API_KEY, SET_MODEL, SET_CONTEXT_LENGTH share no common prefix.
* Exact phrases (greeting, time, ...) are looked up only after every prefix
  failed, so ``timeout`` is UNKNOWN rather than TIME.
"""

from dataclasses import dataclass
from enum import Enum


class Intent(str, Enum):
    OPEN_SITE = "open_site"
    CALCULATE = "calculate"
    SET_API_KEY = "set_api_key"
    SET_MODEL = "set_model"
    SHOW_CONFIG = "show_config"
    CREATE_FILE = "create_file"
    SET_CONTEXT_LENGTH = "set_context_length"
    DELETE = "delete"
    LIST_DIRECTORY = "list_directory"
    READ_FILE = "read_file"
    ASK_AI = "ask_ai"
    GREETING = "greeting"
    TIME = "time"
    CLEAR_OUTPUT = "clear_output"
    FORGET_CONTEXT = "forget_context"
    HELP = "help"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class IntentRule:
    intent: Intent
    prefixes: tuple[str, ...]
    # number of words that make up the verb, e.g. 2 for "открыть сайт"
    verb_words: int = 1

    def matches(self, lowered: str) -> str | None:
        for prefix in self.prefixes:
            if lowered.startswith(prefix):
                return prefix
        return None


INTENT_RULES: list[IntentRule] = [
    IntentRule(Intent.OPEN_SITE, ("открыть сайт", "open site"), verb_words=2),
    IntentRule(Intent.CALCULATE, ("посчитать", "calc", "=")),
    IntentRule(Intent.SET_API_KEY, ("setkey", "apikey")),
    IntentRule(Intent.SET_MODEL, ("setmodel",)),
    IntentRule(Intent.SHOW_CONFIG, ("showconfig",)),
    IntentRule(Intent.CREATE_FILE, ("создать файл", "create file"), verb_words=2),
    IntentRule(Intent.SET_CONTEXT_LENGTH, ("setcontext",)),
    IntentRule(Intent.DELETE, ("удалить", "rm", "delete")),
    IntentRule(Intent.LIST_DIRECTORY, ("dir", "ls")),
    IntentRule(Intent.READ_FILE, ("читать", "cat")),
    IntentRule(Intent.ASK_AI, ("спроси", "?")),
]

EXACT_PHRASES: dict[str, Intent] = {
    "привет": Intent.GREETING,
    "hello": Intent.GREETING,
    "время": Intent.TIME,
    "time": Intent.TIME,
    "очистить": Intent.CLEAR_OUTPUT,
    "clear": Intent.CLEAR_OUTPUT,
    "забыть": Intent.FORGET_CONTEXT,
    "forget": Intent.FORGET_CONTEXT,
    "помощь": Intent.HELP,
    "help": Intent.HELP,
}

# prefixes that take the rest of the text right after the symbol
SYMBOL_PREFIXES = {"=", "?"}


@dataclass(frozen=True)
class ClassifiedCommand:
    intent: Intent
    raw: str
    prefix: str | None = None
    argument: str = ""


def normalize_command(text: str) -> str:
    return (text or "").strip().lower()


def split_argument(raw: str, verb_words: int) -> str:
    parts = (raw or "").strip().split(None, verb_words)
    if len(parts) <= verb_words:
        return ""
    return parts[verb_words].strip()


def classify(text: str) -> ClassifiedCommand:
    raw = (text or "").strip()
    lowered = normalize_command(raw)

    for rule in INTENT_RULES:
        prefix = rule.matches(lowered)
        if prefix is None:
            continue
        if prefix in SYMBOL_PREFIXES:
            argument = raw[len(prefix):].strip()
        else:
            argument = split_argument(raw, rule.verb_words)
        return ClassifiedCommand(intent=rule.intent, raw=raw, prefix=prefix, argument=argument)

    intent = EXACT_PHRASES.get(lowered, Intent.UNKNOWN)
    return ClassifiedCommand(intent=intent, raw=raw)


def classify_intent(text: str) -> Intent:
    return classify(text).intent
