import threading
import webbrowser
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Callable

from .calc import calculate
from .config import AIConfig, AVAILABLE_COMMANDS, COMMAND_MARKER, DEFAULT_CONTEXT_TURNS, WELCOME_TEXT
from .confirmation import ConfirmationStateMachine
from .context import ConversationContext, ConversationTurn, ROLE_ASSISTANT, ROLE_USER
from .errors import FileSystemError, ValidationError
from .files import (
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
from .intents import ClassifiedCommand, Intent, classify
from .logui import debug, info, warn, error


@dataclass(frozen=True)
class HistoryEntry:
    timestamp: datetime
    command: str
    result: str

    def format(self) -> str:
        return f"[{self.timestamp:%H:%M:%S}] > {self.command} -> {self.result}"


@dataclass(frozen=True)
class RouterState:
    output: str
    input_text: str
    pending_confirmation: str | None
    history: tuple[HistoryEntry, ...]
    conversation: tuple[ConversationTurn, ...]
    deferred: bool = False
    context_length: int = DEFAULT_CONTEXT_TURNS

    def history_lines(self) -> list[str]:
        # newest first, the way the window lists them
        return [entry.format() for entry in reversed(self.history)]


@dataclass
class Outcome:
    output: str
    defer: bool = False
    next_input: str | None = None
    record: bool = True


def extract_proposal(answer: str) -> str | None:
    text = (answer or "").lstrip()
    if text[:len(COMMAND_MARKER)].upper() != COMMAND_MARKER:
        return None
    rest = text[len(COMMAND_MARKER):].strip()
    if not rest:
        return None
    return rest.splitlines()[0].strip() or None


def parse_context_length(text: str) -> int:
    try:
        value = int((text or "").strip())
    except ValueError as e:
        raise ValidationError(f"not a number: {text!r}") from e
    return value if value > 0 else 1


class CommandRouter:
    def __init__(
        self,
        gateway,
        config: AIConfig,
        context: ConversationContext | None = None,
        confirmation: ConfirmationStateMachine | None = None,
        open_url: Callable[[str], object] | None = None,
        clock: Callable[[], datetime] | None = None,
    ):
        self.gateway = gateway
        self.config = config
        self.context = context if context is not None else ConversationContext(max_turns=DEFAULT_CONTEXT_TURNS)
        self.confirmation = confirmation if confirmation is not None else ConfirmationStateMachine()
        self.open_url = open_url or webbrowser.open
        self.clock = clock or datetime.now

        self.output = WELCOME_TEXT
        self.input_text = ""
        self.history: list[HistoryEntry] = []
        self._deferred = False
        self._lock = threading.RLock()

        self._handlers = {
            Intent.OPEN_SITE: self._open_site,
            Intent.CALCULATE: self._calculate,
            Intent.SET_API_KEY: self._set_api_key,
            Intent.SET_MODEL: self._set_model,
            Intent.SHOW_CONFIG: self._show_config,
            Intent.CREATE_FILE: self._create_file,
            Intent.SET_CONTEXT_LENGTH: self._set_context_length,
            Intent.DELETE: self._delete,
            Intent.LIST_DIRECTORY: self._list_directory,
            Intent.READ_FILE: self._read_file,
            Intent.ASK_AI: self._ask_ai,
            Intent.GREETING: self._greeting,
            Intent.TIME: self._time,
            Intent.CLEAR_OUTPUT: self._clear_output,
            Intent.FORGET_CONTEXT: self._forget_context,
            Intent.HELP: self._help,
            Intent.UNKNOWN: self._unknown,
        }

    def state(self) -> RouterState:
        pending = self.confirmation.pending
        return RouterState(
            output=self.output,
            input_text=self.input_text,
            pending_confirmation=pending.target_path if pending else None,
            history=tuple(self.history),
            conversation=self.context.turns,
            deferred=self._deferred,
            context_length=self.context.max_turns,
        )

    def run_preset(self, text: str) -> RouterState:
        with self._lock:
            self.input_text = text or ""
            return self.execute(text)

    def execute(self, raw_text: str) -> RouterState:
        with self._lock:
            if not (raw_text or "").strip():
                return self.state()

            self.input_text = raw_text

            if self.confirmation.is_awaiting():
                outcome = self._resolve_confirmation(raw_text)
                self._finish(self._display_command(classify(raw_text)), outcome)
                return self.state()

            cmd = classify(raw_text)
            shown = self._display_command(cmd)
            info(f"Command: {shown} -> {cmd.intent.value}")
            try:
                outcome = self._handlers[cmd.intent](cmd)
            except Exception as e:
                error(f"Command failed: {e}")
                outcome = Outcome(f"Произошла ошибка: {e}")
            self._finish(shown, outcome)
            return self.state()

    def _finish(self, command_text: str, outcome: Outcome):
        self.output = outcome.output
        if outcome.record:
            self.history.append(HistoryEntry(self.clock(), command_text, outcome.output))
        self._deferred = outcome.defer
        if outcome.defer:
            if outcome.next_input is not None:
                self.input_text = outcome.next_input
        else:
            self.input_text = ""

    def _display_command(self, cmd: ClassifiedCommand) -> str:
        if cmd.intent == Intent.SET_API_KEY and cmd.argument:
            return cmd.raw[: len(cmd.raw) - len(cmd.argument)] + "***"
        return cmd.raw

    def _resolve_confirmation(self, answer: str) -> Outcome:
        decision = self.confirmation.resolve(answer)
        if not decision.confirmed:
            info(f"Deletion cancelled: {decision.target_path}")
            return Outcome("Удаление отменено.")

        path = decision.target_path
        try:
            kind = delete_path(path)
        except FileSystemError as e:
            error(f"Delete failed for {path}: {e}")
            return Outcome(f"Ошибка при удалении: {e}")
        info(f"Deleted {kind}: {path}")
        if kind == KIND_DIR:
            return Outcome(f"Папка удалена: {path}")
        return Outcome(f"Файл удален: {path}")

    def _open_site(self, cmd: ClassifiedCommand) -> Outcome:
        url = cmd.argument
        if not url:
            return Outcome("Укажите URL после команды, например: открыть сайт google.com")
        if not url.lower().startswith(("http://", "https://")):
            url = "https://" + url
        try:
            self.open_url(url)
        except Exception as e:
            error(f"Failed to open {url}: {e}")
            return Outcome(f"Не удалось открыть сайт: {e}")
        return Outcome(f"Открываю сайт: {url}")

    def _calculate(self, cmd: ClassifiedCommand) -> Outcome:
        expr = cmd.argument
        if not expr:
            return Outcome("Укажите выражение для вычисления, например: посчитать 2+2")
        try:
            return Outcome(calculate(expr))
        except ValidationError as e:
            return Outcome(f"Ошибка вычисления выражения: {e}")

    def _set_api_key(self, cmd: ClassifiedCommand) -> Outcome:
        key = cmd.argument
        if not key:
            return Outcome("Укажите ключ после команды: setkey SK-...")
        self.config = replace(self.config, api_key=key)
        return Outcome("API ключ установлен (в этом сеансе).")

    def _set_model(self, cmd: ClassifiedCommand) -> Outcome:
        model = cmd.argument
        if not model:
            return Outcome("Укажите название модели после команды: setmodel openai/gpt-4")
        self.config = replace(self.config, model=model)
        return Outcome(f"Модель установлена: {model} (в этом сеансе).")

    def _show_config(self, cmd: ClassifiedCommand) -> Outcome:
        masked = "(установлен)" if self.config.has_api_key else "(не установлен)"
        return Outcome(f"Модель: {self.config.model}\nAPI ключ: {masked}\nБаза: {self.config.base_url}")

    def _create_file(self, cmd: ClassifiedCommand) -> Outcome:
        parts = cmd.argument.split(None, 1)
        if not parts:
            return Outcome("Укажите путь к файлу, например: создать файл C:\\Users\\User\\Desktop\\test.txt Привет, мир!")
        path = parts[0]
        content = decode_escapes(parts[1]) if len(parts) > 1 else ""
        try:
            create_file(path, content)
        except FileSystemError as e:
            error(f"Create file failed for {path}: {e}")
            return Outcome(f"Ошибка при создании файла: {e}")
        return Outcome(f"Файл успешно создан: {path}")

    def _set_context_length(self, cmd: ClassifiedCommand) -> Outcome:
        try:
            value = parse_context_length(cmd.argument)
        except ValidationError as e:
            debug(f"setcontext rejected: {e}")
            return Outcome("Укажите корректное числовое значение, например: setcontext 10")
        self.context.set_max_turns(value)
        return Outcome(f"Длина контекста установлена в {self.context.max_turns} сообщений.")

    def _delete(self, cmd: ClassifiedCommand) -> Outcome:
        path = cmd.argument
        if not path:
            return Outcome("Укажите путь к файлу или папке для удаления.")
        if path_kind(path) is None:
            return Outcome(f"Файл или папка не найден: {path}")
        self.confirmation.arm(path)
        info(f"Deletion awaiting confirmation: {path}")
        return Outcome(
            f"Вы уверены, что хотите удалить '{path}'? Введите 'да' для подтверждения.",
            defer=True,
            record=False,
        )

    def _list_directory(self, cmd: ClassifiedCommand) -> Outcome:
        path = cmd.argument or "."
        if path_kind(path) != KIND_DIR:
            return Outcome(f"Папка не найдена: {path}")
        try:
            entries = list_directory(path)
        except FileSystemError as e:
            return Outcome(f"Ошибка доступа к папке: {e}")
        if not entries:
            return Outcome(f"Папка '{path}' пуста.")
        return Outcome(f"Содержимое папки '{path}':\n" + "\n".join(format_entries(entries)))

    def _read_file(self, cmd: ClassifiedCommand) -> Outcome:
        path = cmd.argument
        if not path:
            return Outcome("Укажите путь к файлу, например: читать C:\\file.txt")
        if path_kind(path) != KIND_FILE:
            return Outcome(f"Ошибка при чтении файла: файл не найден: {path}")
        try:
            return Outcome(read_file(path))
        except FileSystemError as e:
            return Outcome(f"Ошибка при чтении файла: {e}")

    def _ask_ai(self, cmd: ClassifiedCommand) -> Outcome:
        question = cmd.argument
        if not question:
            return Outcome("Задайте вопрос после команды, например: спроси какая погода?")

        window = self.context.window()
        try:
            answer = self.gateway.ask(question, window, self.config)
        except Exception as e:
            error(f"AI call failed: {e}")
            return Outcome(f"Ошибка при обращении к ИИ: {e}")

        self.context.add(ROLE_USER, question)
        self.context.add(ROLE_ASSISTANT, answer)

        proposal = extract_proposal(answer)
        if proposal is None:
            return Outcome(answer)

        info(f"AI proposed command: {proposal}")
        if classify(proposal).intent == Intent.UNKNOWN:
            warn(f"Proposed command is not recognized: {proposal}")
        return Outcome(
            f"ИИ предлагает команду. Нажмите 'Выполнить', чтобы запустить:\n\n{proposal}",
            defer=True,
            next_input=proposal,
        )

    def _greeting(self, cmd: ClassifiedCommand) -> Outcome:
        return Outcome("Привет! Чем могу помочь?")

    def _time(self, cmd: ClassifiedCommand) -> Outcome:
        return Outcome(f"Текущее время: {self.clock():%H:%M:%S}")

    def _clear_output(self, cmd: ClassifiedCommand) -> Outcome:
        self.history.clear()
        self.context.clear()
        return Outcome("")

    def _forget_context(self, cmd: ClassifiedCommand) -> Outcome:
        self.context.clear()
        return Outcome("Диалог с ИИ сброшен.")

    def _help(self, cmd: ClassifiedCommand) -> Outcome:
        return Outcome("Доступные команды:\n" + "\n".join(AVAILABLE_COMMANDS))

    def _unknown(self, cmd: ClassifiedCommand) -> Outcome:
        return Outcome("Извините, я не знаю такой команды. Введите 'помощь', чтобы увидеть список команд.")
