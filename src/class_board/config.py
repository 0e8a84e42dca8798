"""
Runtime configuration.

Settings come from environment variables; the auth token may also be
provided as a secret file. Configuration problems raise 'ConfigError', which
the controller treats as fatal to the session.

Environment:
    CLASS_BOARD_APP_ID          tenant id used in every store path (default 'default-app-id')
    CLASS_BOARD_BACKEND         store backend, currently only 'memory'
    CLASS_BOARD_BACKEND_CONFIG  JSON object passed to the backend (default '{}')
    CLASS_BOARD_AUTH_TOKEN      optional sign-in token, or /secrets/CLASS_BOARD_AUTH_TOKEN
    CLASS_BOARD_LOG_LEVEL       loguru level (default 'INFO')
"""

import json
import os
import sys
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from loguru import logger
from pydantic import BaseModel, Field

from class_board.errors import ConfigError

SECRETS_DIR = Path("/secrets")
DEFAULT_APP_ID = "default-app-id"


class BoardConfig(BaseModel):
    app_id: str = DEFAULT_APP_ID
    backend: str = "memory"
    backend_config: dict[str, Any] = Field(default_factory=dict)
    auth_token: str | None = None
    log_level: str = "INFO"


def _get_secret(name: str, environ: Mapping[str, str], secrets_dir: Path = SECRETS_DIR) -> str | None:
    """Load an optional secret from '<secrets_dir>/<name>', falling back to the environment."""
    secret_file = secrets_dir / name
    if secret_file.exists():
        return secret_file.read_text().strip() or None
    return environ.get(name) or None


def _parse_backend_config(raw: str) -> dict[str, Any]:
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"CLASS_BOARD_BACKEND_CONFIG is not valid JSON: {exc}") from exc
    if not isinstance(parsed, dict):
        raise ConfigError("CLASS_BOARD_BACKEND_CONFIG must be a JSON object")
    return parsed


def load_config(environ: Mapping[str, str] | None = None, secrets_dir: Path = SECRETS_DIR) -> BoardConfig:
    environ = os.environ if environ is None else environ
    return BoardConfig(
        app_id=environ.get("CLASS_BOARD_APP_ID") or DEFAULT_APP_ID,
        backend=(environ.get("CLASS_BOARD_BACKEND") or "memory").lower().strip(),
        backend_config=_parse_backend_config(environ.get("CLASS_BOARD_BACKEND_CONFIG") or "{}"),
        auth_token=_get_secret("CLASS_BOARD_AUTH_TOKEN", environ, secrets_dir),
        log_level=(environ.get("CLASS_BOARD_LOG_LEVEL") or "INFO").upper(),
    )


def configure_logging(level: str = "INFO") -> None:
    """Replace every loguru sink with a single stderr sink at 'level'."""
    logger.remove()
    try:
        logger.add(sys.stderr, level=level)
    except ValueError as exc:
        logger.add(sys.stderr, level="INFO")
        raise ConfigError(f"CLASS_BOARD_LOG_LEVEL {level!r} is not a log level") from exc
