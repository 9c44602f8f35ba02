"""Palette Chat launcher.

Two run modes, picked with ``RUN_MODE``:

- ``integrated`` (default): one uvicorn server on ``PORT`` carries the
  ``/chat`` API and the NiceGUI page.
- ``separate``: the API runs on ``PORT`` and the NiceGUI page on ``UI_PORT``,
  each in its own process.

The UI finds the API through ``API_BASE_URL``, which defaults to
``http://localhost:<PORT>`` in both modes.
"""

import logging
import os
import subprocess
import sys
import time
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

load_dotenv()

logger = logging.getLogger(__name__)

RunMode = Literal["integrated", "separate"]


class ServerConfig(BaseModel):
    """Process-level settings read from the environment."""

    model_config = ConfigDict(validate_default=True)

    run_mode: RunMode = Field(
        default_factory=lambda: os.getenv("RUN_MODE", "integrated").strip().lower()
    )
    host: str = Field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = Field(default_factory=lambda: int(os.getenv("PORT", "8000")), ge=1, le=65535)
    ui_port: int = Field(
        default_factory=lambda: int(os.getenv("UI_PORT", "8080")), ge=1, le=65535
    )
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def api_url(self) -> str:
        """Base URL the UI should call."""
        return os.getenv("API_BASE_URL") or f"http://localhost:{self.port}"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )


def api_command(config: ServerConfig) -> list[str]:
    """uvicorn command line for the API process in separate mode."""
    return [
        sys.executable,
        "-m",
        "uvicorn",
        "palette_chat.api.app:app",
        "--host",
        config.host,
        "--port",
        str(config.port),
        "--log-level",
        config.log_level.lower(),
    ]


def ui_command() -> list[str]:
    return [sys.executable, "-m", "palette_chat.ui.chat_page"]


def child_env(config: ServerConfig) -> dict[str, str]:
    """Environment for child processes, with the API location pinned."""
    env = dict(os.environ)
    env["API_BASE_URL"] = config.api_url
    env["UI_PORT"] = str(config.ui_port)
    return env


def run_integrated(config: ServerConfig) -> None:
    """Serve the API and the chat page from one uvicorn process."""
    import uvicorn
    from nicegui import ui

    from palette_chat.api.app import create_app
    from palette_chat.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    os.environ.setdefault("API_BASE_URL", config.api_url)

    app = create_app()
    ui.run_with(app, title="Palette Chat", favicon="🎨")

    logger.info(f"Chat UI and API on http://localhost:{config.port}/ (docs at /docs)")

    uvicorn.run(
        app,
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
    )


def run_separate(config: ServerConfig) -> None:
    """Run the API and the chat page as two child processes.

    Stops both as soon as either exits.
    """
    env = child_env(config)
    logger.info(f"API on http://localhost:{config.port}")
    logger.info(f"Chat UI on http://localhost:{config.ui_port} (calling {env['API_BASE_URL']})")

    processes = [
        subprocess.Popen(api_command(config), env=env),
        subprocess.Popen(ui_command(), env=env),
    ]
    try:
        while all(proc.poll() is None for proc in processes):
            time.sleep(1)
    except KeyboardInterrupt:
        logger.info("Shutting down servers...")
    finally:
        for proc in processes:
            if proc.poll() is None:
                proc.terminate()
        for proc in processes:
            proc.wait()


def main() -> None:
    config = ServerConfig()
    configure_logging(config.log_level)
    logger.info(f"Starting Palette Chat in {config.run_mode} mode")

    if config.run_mode == "separate":
        run_separate(config)
    else:
        run_integrated(config)


if __name__ == "__main__":
    main()
