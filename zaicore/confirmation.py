from dataclasses import dataclass, field
import time

from .config import CONFIRM_YES


STATE_IDLE = "IDLE"
STATE_AWAITING = "AWAITING_CONFIRMATION"


@dataclass(frozen=True)
class PendingConfirmation:
    target_path: str
    created_at: float = field(default_factory=time.time)


@dataclass(frozen=True)
class ConfirmationDecision:
    target_path: str
    confirmed: bool


def is_affirmative(text: str) -> bool:
    t = " ".join((text or "").strip().lower().split())
    return t in CONFIRM_YES


class ConfirmationStateMachine:
    """Holds at most one deletion waiting for a yes/no answer.

    There is no timeout: once armed, the next answer resolves it whatever
    that answer is.
    """

    def __init__(self):
        self._pending: PendingConfirmation | None = None

    @property
    def state(self) -> str:
        return STATE_AWAITING if self._pending is not None else STATE_IDLE

    @property
    def pending(self) -> PendingConfirmation | None:
        return self._pending

    def is_awaiting(self) -> bool:
        return self._pending is not None

    def arm(self, target_path: str) -> PendingConfirmation:
        self._pending = PendingConfirmation(target_path=target_path)
        return self._pending

    def resolve(self, answer: str) -> ConfirmationDecision | None:
        pending = self._pending
        if pending is None:
            return None
        # cleared before the caller acts on it so a failing delete can't leave it armed
        self._pending = None
        return ConfirmationDecision(target_path=pending.target_path, confirmed=is_affirmative(answer))

    def clear(self):
        self._pending = None
