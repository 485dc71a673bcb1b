"""Round trip to an OpenAI-compatible chat completions endpoint.

``AIGateway.ask`` never raises: configuration, network and parse failures
all come back as text the router can show as-is.
"""

import json
import os
from datetime import datetime

import requests

from .cache import ResponseCache
from .config import AIConfig, SYSTEM_PROMPT
from .context import ConversationTurn
from .errors import ConfigurationError, NetworkError, ParseError, ZaiError
from .logui import debug, info, warn, error

SOURCE_MESSAGE = "choices[0].message.content"
SOURCE_TEXT = "choices[0].text"
SOURCE_FIRST_STRING = "first_string"
SOURCE_RAW = "raw"

MISSING_KEY_TEXT = "Ошибка: API ключ OpenRouter не настроен. Установите OPENROUTER_API_KEY или используйте setkey <key>"


def _as_message(turn) -> dict:
    if isinstance(turn, ConversationTurn):
        return turn.as_message()
    if isinstance(turn, dict):
        return {"role": turn["role"], "content": turn["content"]}
    role, content = turn
    return {"role": role, "content": content}


def build_messages(question: str, context_turns=None, system_prompt: str = SYSTEM_PROMPT) -> list[dict]:
    messages = [{"role": "system", "content": system_prompt}]
    for turn in context_turns or []:
        messages.append(_as_message(turn))
    messages.append({"role": "user", "content": question})
    return messages


def build_payload(question: str, context_turns, config: AIConfig) -> dict:
    return {
        "model": config.model,
        "messages": build_messages(question, context_turns),
        "temperature": config.temperature,
        "max_tokens": config.max_tokens,
    }


def first_string(value) -> str | None:
    """Depth-first search for the first non-empty string, in document order."""
    # explicit stack: nesting depth is controlled by the remote server
    stack = [value]
    while stack:
        node = stack.pop()
        if isinstance(node, str):
            if node:
                return node
        elif isinstance(node, dict):
            stack.extend(reversed(list(node.values())))
        elif isinstance(node, list):
            stack.extend(reversed(node))
    return None


def extract_answer(body: str) -> tuple[str, str]:
    """Return ``(text, source)`` for a response body.

    Raises ParseError when the body is not JSON at all.
    """
    try:
        root = json.loads(body)
    except (ValueError, RecursionError) as e:
        raise ParseError(f"response is not JSON: {e}") from e

    choices = root.get("choices") if isinstance(root, dict) else None
    if isinstance(choices, list) and choices and isinstance(choices[0], dict):
        first = choices[0]
        message = first.get("message")
        if isinstance(message, dict):
            content = message.get("content")
            if isinstance(content, str) and content:
                return content.strip(), SOURCE_MESSAGE
        text = first.get("text")
        if isinstance(text, str) and text:
            return text.strip(), SOURCE_TEXT

    fallback = first_string(root)
    if fallback:
        return fallback.strip(), SOURCE_FIRST_STRING

    return body, SOURCE_RAW


def _decode_body(resp) -> str:
    content = resp.content or b""
    if isinstance(content, str):
        return content
    try:
        return content.decode(resp.encoding or "utf-8", errors="replace")
    except LookupError:
        # unknown charset in Content-Type
        return content.decode("utf-8", errors="replace")


class AIGateway:
    def __init__(self, cache: ResponseCache, dump_dir: str | None = None):
        self.cache = cache
        self.dump_dir = dump_dir

    def ask(self, question: str, context_turns, config: AIConfig) -> str:
        key = (question or "").strip()
        cached = self.cache.get(key)
        if cached is not None:
            info(f"Cache hit for: {key}")
            return cached

        try:
            body = self._post(key, context_turns, config)
        except ConfigurationError:
            error("OpenRouter API key not set")
            return MISSING_KEY_TEXT
        except NetworkError as e:
            if e.status_code is not None:
                return f"Ошибка от API: {e.status_code} {e.body}"
            return f"Ошибка сети: {e}"
        except ZaiError as e:
            error(f"AI request failed: {e}")
            return f"Ошибка: {e}"

        try:
            text, source = extract_answer(body)
        except ParseError as e:
            error(f"Failed to parse AI response: {e}")
            self._dump_raw(body)
            return body

        self.cache.set(key, text)
        info(f"AI response cached for: {key} ({source})")
        return text

    def _post(self, question: str, context_turns, config: AIConfig) -> str:
        if not config.has_api_key:
            raise ConfigurationError("API key is not set")

        payload = build_payload(question, context_turns, config)
        url = config.completions_url
        info(f"Using model: {config.model}")
        info(f"AI request: {question}")
        debug(f"Request URI: {url}")

        try:
            resp = requests.post(
                url,
                json=payload,
                headers={"Authorization": f"Bearer {config.api_key}"},
                timeout=config.timeout,
            )
        except requests.exceptions.RequestException as e:
            error(f"AI connection error: {e}")
            raise NetworkError(str(e)) from e

        body = _decode_body(resp)
        if not 200 <= resp.status_code < 300:
            error(f"AI response error: {resp.status_code} - {body}")
            raise NetworkError(f"HTTP {resp.status_code}", status_code=resp.status_code, body=body)

        debug(f"AI raw response: {body}")
        return body

    def _dump_raw(self, body: str):
        if not self.dump_dir:
            return
        try:
            name = f"raw_response_{datetime.now():%Y%m%d_%H%M%S}.txt"
            path = os.path.join(self.dump_dir, name)
            with open(path, "w", encoding="utf-8") as f:
                f.write(body)
            info(f"Raw response written to: {path}")
        except OSError as e:
            warn(f"Could not write raw response: {e}")
