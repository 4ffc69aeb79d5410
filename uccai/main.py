"""UCCAI process entry point.

RUN_MODE=integrated (default) serves the API and the chat UI from one
uvicorn server on PORT. RUN_MODE=separate starts the API on PORT and the UI
on UI_PORT as two child processes, with the UI pointed at the API.
"""

import logging
import os
import subprocess
import sys
import time

from dotenv import load_dotenv

from uccai.config import ServerConfig, get_server_config

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def run_integrated(config: ServerConfig) -> None:
    """Mount the NiceGUI page on the API app and serve both on one port."""
    import uvicorn
    from nicegui import ui

    from uccai.api.app import create_app
    from uccai.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    app = create_app(config)
    ui.run_with(
        app,
        title="UCCAI",
        favicon="✨",
        storage_secret=config.storage_secret,
    )

    logger.info(f"Chat UI at {config.ui_url}, API docs at {config.api_url}/docs")
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


def separate_commands(config: ServerConfig) -> list[list[str]]:
    """Commands for the API and UI child processes."""
    api = [
        sys.executable,
        "-m",
        "uvicorn",
        "uccai.api.app:app",
        "--host",
        config.host,
        "--port",
        str(config.port),
        "--log-level",
        config.log_level.lower(),
    ]
    ui = [sys.executable, "-m", "uccai.ui.chat_page"]
    return [api, ui]


def run_separate(config: ServerConfig) -> None:
    """Run the API and the UI as two child processes until either exits."""
    # The UI child talks to this API
    env = {**os.environ, "API_BASE_URL": os.getenv("API_BASE_URL") or config.api_url}
    procs = [subprocess.Popen(cmd, env=env) for cmd in separate_commands(config)]
    logger.info(f"API at {config.api_url}, chat UI at {config.ui_url}")

    try:
        while all(proc.poll() is None for proc in procs):
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Shutting down servers...")
    finally:
        for proc in procs:
            if proc.poll() is None:
                proc.terminate()
        for proc in procs:
            proc.wait()


def main() -> None:
    load_dotenv()
    config = get_server_config()
    configure_logging(config.log_level)
    logger.info(f"Starting UCCAI in {config.run_mode} mode")

    if config.run_mode == "separate":
        run_separate(config)
    else:
        run_integrated(config)


if __name__ == "__main__":
    main()
