import os
import sys

import uvicorn

from zaicore.api import create_app
from zaicore.assistant import Assistant
from zaicore.config import API_HOST, API_PORT
from zaicore.logui import ui_state, info, error, UI_MODE


def main():
    base_dir = os.path.dirname(os.path.abspath(__file__))
    try:
        ui_state("STARTING")
        assistant = Assistant(base_dir=base_dir)
        if "--api" in sys.argv:
            info(f"API: http://{API_HOST}:{API_PORT}")
            uvicorn.run(create_app(assistant), host=API_HOST, port=API_PORT)
        else:
            assistant.run()
    except Exception as e:
        ui_state("ERROR")
        error(f"Failed to start: {e}")
        if not UI_MODE:
            input("Press Enter to exit...")
        sys.exit(1)


if __name__ == "__main__":
    main()
