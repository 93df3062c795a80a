from __future__ import annotations

import logging
import os
import random
from dataclasses import dataclass
from typing import List, Optional


_TRUTHY_VALUES = {"1", "true", "yes", "on"}
_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3001
DEFAULT_CLIENT_ORIGIN = "http://localhost:8000"
DEFAULT_SOCKET_PATH = "/ws"
DEFAULT_LOG_LEVEL = "INFO"

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def _runtime_error(code: str, detail: str) -> RuntimeError:
    return RuntimeError(f"{code}: {detail}")


def _env_truthy(var_name: str) -> bool:
    raw = os.getenv(var_name)
    if not isinstance(raw, str):
        return False
    return raw.strip().lower() in _TRUTHY_VALUES


def _env_str(var_name: str, default: str) -> str:
    raw = os.getenv(var_name)
    if not isinstance(raw, str) or raw.strip() == "":
        return default
    return raw.strip()


def _env_int(var_name: str) -> Optional[int]:
    raw = os.getenv(var_name)
    if not isinstance(raw, str) or raw.strip() == "":
        return None
    try:
        return int(raw.strip())
    except ValueError as exc:
        raise _runtime_error("RUNTIME_SETTINGS_V1_INVALID", f"{var_name} must be an integer") from exc


@dataclass(frozen=True)
class RuntimeSettingsV1:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    client_origin: str = DEFAULT_CLIENT_ORIGIN
    socket_path: str = DEFAULT_SOCKET_PATH
    dev_cors: bool = False
    log_level: str = DEFAULT_LOG_LEVEL
    wall_seed: Optional[int] = None

    def allow_origins(self) -> List[str]:
        origins = [self.client_origin]
        if self.dev_cors:
            dev_ports = range(8000, 8011)
            origins += [f"http://127.0.0.1:{port}" for port in dev_ports]
            origins += [f"http://localhost:{port}" for port in dev_ports]
        return sorted(set(origins))

    def make_rng(self) -> random.Random:
        return random.Random(self.wall_seed)


def load_runtime_settings() -> RuntimeSettingsV1:
    port = _env_int("NUMBERBLOCKS_PORT")
    if port is None:
        port = DEFAULT_PORT
    if port < 1 or port > 65535:
        raise _runtime_error("RUNTIME_SETTINGS_V1_INVALID", "NUMBERBLOCKS_PORT must be within 1..65535")

    socket_path = _env_str("NUMBERBLOCKS_SOCKET_PATH", DEFAULT_SOCKET_PATH)
    if not socket_path.startswith("/"):
        raise _runtime_error("RUNTIME_SETTINGS_V1_INVALID", "NUMBERBLOCKS_SOCKET_PATH must start with '/'")

    log_level = _env_str("NUMBERBLOCKS_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()
    if log_level not in _LOG_LEVELS:
        raise _runtime_error("RUNTIME_SETTINGS_V1_INVALID", f"NUMBERBLOCKS_LOG_LEVEL must be one of {sorted(_LOG_LEVELS)}")

    return RuntimeSettingsV1(
        host=_env_str("NUMBERBLOCKS_HOST", DEFAULT_HOST),
        port=port,
        client_origin=_env_str("NUMBERBLOCKS_CLIENT_ORIGIN", DEFAULT_CLIENT_ORIGIN),
        socket_path=socket_path,
        dev_cors=_env_truthy("NUMBERBLOCKS_DEV_CORS"),
        log_level=log_level,
        wall_seed=_env_int("NUMBERBLOCKS_WALL_SEED"),
    )


def configure_logging(level: str = DEFAULT_LOG_LEVEL) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
