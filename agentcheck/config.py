"""
Startup configuration for the agent-check sidecar.

All settings come from the environment (optionally seeded from .acenv files,
see ``agentcheck.env_loader``). Only the two channel ports are required.
"""

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from agentcheck.exceptions import ConfigError
from agentcheck.state import OperationalState


# Variable name -> message printed when it is absent.
_REQUIRED_PORTS = {
    "AC_LISTEN_PORT": "AC LISTEN PORT not set",
    "AC_TALK_PORT": "AC TALK PORT not set",
}

# The report channel faces the load balancer; the control channel stays local.
DEFAULT_LISTEN_HOST = ""
DEFAULT_TALK_HOST = "localhost"


@dataclass(frozen=True)
class AgentConfig:
    """Resolved settings for both channels."""

    listen_host: str
    listen_port: int
    talk_host: str
    talk_port: int
    initial_state: OperationalState = OperationalState.UP
    client_timeout: Optional[float] = None
    log_level: str = "INFO"

    @property
    def report_address(self) -> tuple[str, int]:
        return (self.listen_host, self.listen_port)

    @property
    def control_address(self) -> tuple[str, int]:
        return (self.talk_host, self.talk_port)


def _parse_port(key: str, raw: str) -> int:
    try:
        port = int(raw.strip())
    except ValueError:
        raise ConfigError(f"Invalid int value for {key}: {raw}")
    if not 1 <= port <= 65535:
        raise ConfigError(f"{key} must be within 1..65535, got {port}")
    return port


def _parse_timeout(raw: Optional[str]) -> Optional[float]:
    if raw is None or not raw.strip():
        return None
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"Invalid float value for AC_CLIENT_TIMEOUT: {raw}")
    if value <= 0:
        raise ConfigError("AC_CLIENT_TIMEOUT must be positive")
    return value


def _parse_initial_state(raw: Optional[str]) -> OperationalState:
    if raw is None or not raw.strip():
        return OperationalState.UP
    try:
        return OperationalState(raw.strip().upper())
    except ValueError:
        raise ConfigError(f"AC_INITIAL_STATE must be one of {OperationalState.names()}, got {raw!r}")


def _parse_log_level(raw: Optional[str]) -> str:
    level = (raw or "INFO").strip().upper()
    if not isinstance(logging.getLevelName(level), int):
        raise ConfigError(f"Unknown AC_LOG_LEVEL: {raw}")
    return level


def load_config(environ: Optional[Mapping[str, str]] = None) -> AgentConfig:
    """Build an ``AgentConfig`` from ``environ`` (defaults to ``os.environ``).

    Raises ``ConfigError`` when a required port is missing or any value fails
    to parse.
    """

    env = os.environ if environ is None else environ

    ports: dict[str, int] = {}
    for key, missing_message in _REQUIRED_PORTS.items():
        raw = env.get(key, "")
        if raw == "":
            raise ConfigError(missing_message)
        ports[key] = _parse_port(key, raw)

    return AgentConfig(
        listen_host=env.get("AC_LISTEN_HOST", DEFAULT_LISTEN_HOST),
        listen_port=ports["AC_LISTEN_PORT"],
        talk_host=env.get("AC_TALK_HOST", DEFAULT_TALK_HOST),
        talk_port=ports["AC_TALK_PORT"],
        initial_state=_parse_initial_state(env.get("AC_INITIAL_STATE")),
        client_timeout=_parse_timeout(env.get("AC_CLIENT_TIMEOUT")),
        log_level=_parse_log_level(env.get("AC_LOG_LEVEL")),
    )
