import os
import sys

from .cache import ResponseCache
from .config import CACHE_FILE, LOG_FILE, load_ai_config
from .gateway import AIGateway
from .logui import (
    ui_state,
    ui_command,
    ui_output,
    configure_log_file,
    get_log_file,
    info,
    error,
    UI_MODE,
    LOG_LEVEL,
)
from .router import CommandRouter, RouterState


class Assistant:
    """Wires config, cache, gateway and router together for one process."""

    def __init__(self, base_dir: str | None = None, open_url=None, environ=None):
        if base_dir:
            self.base_dir = os.path.abspath(base_dir)
        else:
            self.base_dir = os.path.dirname(os.path.abspath(__file__))

        if get_log_file() is None:
            configure_log_file(os.path.join(self.base_dir, LOG_FILE))

        self.cache = ResponseCache(os.path.join(self.base_dir, CACHE_FILE))
        self.gateway = AIGateway(self.cache, dump_dir=self.base_dir)
        self.router = CommandRouter(
            self.gateway,
            load_ai_config(self.base_dir, environ=environ),
            open_url=open_url,
        )

    def process_command(self, text: str) -> RouterState:
        ui_state("EXECUTING")
        state = self.router.execute(text)
        ui_output(state.output)

        if state.deferred:
            # refill the input box with the proposal or the pending delete
            ui_command(state.input_text)
        if state.pending_confirmation:
            ui_state("CONFIRM")
        else:
            ui_state("IDLE")
        return state

    def _safe_process_command(self, text: str) -> RouterState | None:
        try:
            return self.process_command(text)
        except Exception as e:
            ui_state("ERROR")
            error(f"Command failed: {e}")
            ui_state("IDLE")
            return None

    def run(self, stream=None):
        stream = stream or sys.stdin
        info("ZAI start")
        info(f"Mode: {'UI bridge' if UI_MODE else 'Console'} | log={LOG_LEVEL}")
        info(f"Model: {self.router.config.model} | cache entries: {len(self.cache)}")

        ui_state("STARTING")
        ui_output(self.router.state().output)
        ui_state("IDLE")

        try:
            while True:
                if not UI_MODE:
                    print("> ", end="", flush=True)
                line = stream.readline()
                if not line:
                    break
                text = line.rstrip("\r\n")
                if not text.strip():
                    continue
                self._safe_process_command(text)
        except KeyboardInterrupt:
            info("Shutdown: Ctrl+C")
        except Exception as e:
            ui_state("ERROR")
            error(f"Fatal: {e}")
        finally:
            ui_state("IDLE")
            info("ZAI stopped")
