import json
import os
from dataclasses import dataclass

from .logui import warn

API_HOST = "127.0.0.1"
API_PORT = 8008

SETTINGS_FILE = "appsettings.json"
CACHE_FILE = "cache.json"
LOG_FILE = "zai.log"

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "z-ai/glm-4.5-air:free"
DEFAULT_TEMPERATURE = 0.7
DEFAULT_MAX_TOKENS = 1000

DEFAULT_CONTEXT_TURNS = 10

COMMAND_MARKER = "COMMAND:"

CONFIRM_YES = {"да", "yes"}

WELCOME_TEXT = "Привет! Я виртуальный помощник. Введите команду для выполнения."

SYSTEM_PROMPT = (
    "Ты - ИИ ассистент, встроенный в приложение на рабочем столе. Отвечай коротко и по делу. "
    "Не используй форматирование текста в md формате, но структурируй свой ответ без форматирования. "
    "Если пользователь просит тебя выполнить действие, связанное с файловой системой "
    "(создать, прочитать, удалить, показать содержимое папки) или открыть сайт, "
    "сформулируй соответствующую команду и верни ТОЛЬКО эту команду в формате 'COMMAND: <команда>'. "
    "Например, если просят 'создай файл test.txt с текстом hello', верни 'COMMAND: создать файл test.txt hello'. "
    "Если просят 'что в папке C:\\Users?', верни 'COMMAND: dir C:\\Users'. "
    "Если пользователь просит открыть сайт по названию, угадай наиболее вероятный URL. "
    "Например, на запрос 'открой ютуб' верни 'COMMAND: открыть сайт youtube.com', "
    "на запрос 'открой вк' верни 'COMMAND: открыть сайт vk.com'. "
    "Если нужно сгенерировать содержимое для файла, сгенерируй его и подставь в команду 'создать файл'. "
    "В остальных случаях отвечай как обычно."
)

AVAILABLE_COMMANDS = [
    "спроси <вопрос> - задать вопрос ассистенту",
    "? <вопрос> - короткий вариант для вопроса",
    "открыть сайт <url> - открывает сайт по названию или url",
    "посчитать <выражение> - вычислить арифметическое выражение (например: посчитать 2+2)",
    "= <выражение> - быстрый подсчёт (например: =2*(3+4))",
    "время - показывает текущее время",
    "привет - выводит приветствие",
    "setkey <key> - установить API ключ OpenRouter (временно)",
    "setmodel <model> - установить модель ИИ (временно)",
    "showconfig - показать текущую конфигурацию ИИ",
    "создать файл <путь> [содержимое] - создает файл с текстом",
    "setcontext <value> - установить длину контекста (количество сообщений)",
    "dir <путь> - показать содержимое папки",
    "читать <путь> - прочитать содержимое файла",
    "очистить - очищает вывод и сбрасывает диалог с ИИ",
    "забыть - сбрасывает диалог с ИИ",
    "удалить <путь> - удалить файл или папку (с подтверждением)",
    "rm <путь> - удалить файл или папку (с подтверждением)",
    "помощь - показать список команд",
]


@dataclass(frozen=True)
class AIConfig:
    base_url: str = DEFAULT_BASE_URL
    api_key: str = ""
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    max_tokens: int = DEFAULT_MAX_TOKENS
    timeout: float | None = None

    @property
    def has_api_key(self) -> bool:
        return bool((self.api_key or "").strip())

    @property
    def completions_url(self) -> str:
        return self.base_url.rstrip("/") + "/chat/completions"

    def __repr__(self):
        # keep the key out of logs and tracebacks
        key = "set" if self.has_api_key else "unset"
        return (
            f"AIConfig(base_url={self.base_url!r}, api_key=<{key}>, model={self.model!r}, "
            f"temperature={self.temperature!r}, max_tokens={self.max_tokens!r}, timeout={self.timeout!r})"
        )


def _read_settings_section(path: str) -> dict:
    if not os.path.exists(path):
        return {}
    try:
        with open(path, "r", encoding="utf-8-sig") as f:
            cfg = json.load(f)
    except Exception as e:
        warn(f"{os.path.basename(path)} ignored: {e}")
        return {}
    section = cfg.get("AI") if isinstance(cfg, dict) else None
    return section if isinstance(section, dict) else {}


def load_ai_config(base_dir: str | None = None, environ=None) -> AIConfig:
    env = os.environ if environ is None else environ
    values = {
        "base_url": DEFAULT_BASE_URL,
        "api_key": "",
        "model": DEFAULT_MODEL,
        "temperature": DEFAULT_TEMPERATURE,
        "max_tokens": DEFAULT_MAX_TOKENS,
        "timeout": None,
    }

    if base_dir:
        ai = _read_settings_section(os.path.join(base_dir, SETTINGS_FILE))
        for key, name in (("ApiKey", "api_key"), ("Model", "model"), ("BaseUrl", "base_url")):
            v = ai.get(key)
            if isinstance(v, str):
                values[name] = v
        t = ai.get("Temperature")
        if isinstance(t, (int, float)) and not isinstance(t, bool):
            values["temperature"] = float(t)
        mt = ai.get("MaxTokens")
        if isinstance(mt, int) and not isinstance(mt, bool):
            values["max_tokens"] = mt

    if env.get("OPENROUTER_API_KEY"):
        values["api_key"] = env["OPENROUTER_API_KEY"]
    if env.get("OPENROUTER_MODEL"):
        values["model"] = env["OPENROUTER_MODEL"]
    if env.get("OPENROUTER_BASE_URL"):
        values["base_url"] = env["OPENROUTER_BASE_URL"]

    raw_timeout = (env.get("ZAI_HTTP_TIMEOUT") or "").strip()
    if raw_timeout:
        try:
            values["timeout"] = float(raw_timeout) if float(raw_timeout) > 0 else None
        except ValueError:
            warn(f"ZAI_HTTP_TIMEOUT ignored: {raw_timeout!r}")

    return AIConfig(**values)
