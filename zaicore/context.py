from dataclasses import dataclass

from .config import DEFAULT_CONTEXT_TURNS

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"
ROLES = {ROLE_USER, ROLE_ASSISTANT}


@dataclass(frozen=True)
class ConversationTurn:
    role: str
    content: str

    def as_message(self) -> dict:
        return {"role": self.role, "content": self.content}


class ConversationContext:
    def __init__(self, max_turns: int = DEFAULT_CONTEXT_TURNS):
        self.max_turns = max(1, int(max_turns))
        self._turns: list[ConversationTurn] = []

    def append(self, turn: ConversationTurn):
        if turn.role not in ROLES:
            raise ValueError(f"unknown role: {turn.role!r}")
        self._turns.append(turn)

    def add(self, role: str, content: str):
        self.append(ConversationTurn(role=role, content=content))

    def clear(self):
        self._turns.clear()

    def set_max_turns(self, value: int) -> int:
        self.max_turns = max(1, int(value))
        return self.max_turns

    def window(self, max_turns: int | None = None) -> list[ConversationTurn]:
        n = self.max_turns if max_turns is None else max(1, int(max_turns))
        return list(self._turns[-n:])

    @property
    def turns(self) -> tuple[ConversationTurn, ...]:
        return tuple(self._turns)

    def __len__(self) -> int:
        return len(self._turns)
