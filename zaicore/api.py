from fastapi import FastAPI
from pydantic import BaseModel

from .config import AVAILABLE_COMMANDS
from .router import RouterState


class ExecuteRequest(BaseModel):
    text: str


class HistoryItem(BaseModel):
    timestamp: str
    command: str
    result: str
    line: str


class TurnItem(BaseModel):
    role: str
    content: str


class StateResponse(BaseModel):
    output: str
    input_text: str
    pending_confirmation: str | None = None
    deferred: bool = False
    context_length: int
    history: list[HistoryItem]
    conversation: list[TurnItem]


def state_to_response(state: RouterState) -> StateResponse:
    return StateResponse(
        output=state.output,
        input_text=state.input_text,
        pending_confirmation=state.pending_confirmation,
        deferred=state.deferred,
        context_length=state.context_length,
        history=[
            HistoryItem(
                timestamp=h.timestamp.strftime("%H:%M:%S"),
                command=h.command,
                result=h.result,
                line=h.format(),
            )
            for h in state.history
        ],
        conversation=[TurnItem(role=t.role, content=t.content) for t in state.conversation],
    )


def create_app(assistant) -> FastAPI:
    app = FastAPI(title="ZAI Command API (Local)")

    # sync endpoints run in the threadpool; the router lock keeps one command in flight
    @app.get("/health")
    def health():
        config = assistant.router.config
        return {
            "status": "ok",
            "model": config.model,
            "api_key_set": config.has_api_key,
            "cache_size": len(assistant.cache),
        }

    @app.get("/commands")
    def commands():
        return {"commands": list(AVAILABLE_COMMANDS)}

    @app.get("/state", response_model=StateResponse)
    def state():
        return state_to_response(assistant.router.state())

    @app.post("/execute", response_model=StateResponse)
    def execute(req: ExecuteRequest):
        return state_to_response(assistant.process_command(req.text))

    return app
