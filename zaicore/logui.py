import os
import sys
import threading
from datetime import datetime

UI_MODE = "--ui" in sys.argv

def ui_state(name: str):
    if UI_MODE:
        print(f"STATE:{name}", flush=True)

def ui_command(text: str):
    if UI_MODE:
        # the UI puts this text back into its input field
        print(f"COMMAND:{' '.join((text or '').split())}", flush=True)

def ui_output(text: str):
    if UI_MODE:
        # one line per result; the UI unescapes \n
        body = (text or "").replace("\\", "\\\\").replace("\r\n", "\n").replace("\n", "\\n")
        print(f"OUTPUT:{body}", flush=True)
    else:
        print(text or "", flush=True)


LOG_LEVEL = os.environ.get("ZAI_LOG", "INFO").upper()
LEVELS = {"DEBUG": 10, "INFO": 20, "WARN": 30, "ERROR": 40}

_file_lock = threading.Lock()
_log_file = os.environ.get("ZAI_LOG_FILE") or None


def configure_log_file(path: str | None):
    global _log_file
    _log_file = path


def get_log_file() -> str | None:
    return _log_file


def _ts():
    return datetime.now().strftime("%H:%M:%S")

def _write_file(level: str, msg: str):
    path = _log_file
    if not path:
        return
    line = f"[{datetime.now():%Y-%m-%d %H:%M:%S}] {level}: {msg}\n"
    try:
        with _file_lock:
            with open(path, "a", encoding="utf-8") as f:
                f.write(line)
    except Exception:
        pass

def log(level: str, msg: str):
    if LEVELS.get(level, 20) >= LEVELS.get(LOG_LEVEL, 20):
        try:
            print(f"{_ts()} [{level:<5}] {msg}", flush=True)
        except Exception:
            pass
    if LEVELS.get(level, 20) >= LEVELS["INFO"]:
        _write_file(level, msg)

def debug(msg):
    log("DEBUG", msg)

def info(msg):
    log("INFO", msg)

def warn(msg):
    log("WARN", msg)

def error(msg):
    log("ERROR", msg)
