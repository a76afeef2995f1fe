"""Small client helpers speaking both agent-check protocols."""

from __future__ import annotations

import socket

DEFAULT_TIMEOUT_S = 5.0


def _read_reply(s: socket.socket) -> str:
    data = b""
    while True:
        chunk = s.recv(4096)
        if not chunk:
            break
        data += chunk
        if b"\n" in data:
            break
    return data.decode("utf-8", errors="replace")


def query_report(host: str, port: int, *, timeout: float = DEFAULT_TIMEOUT_S) -> str:
    """Return the raw report line, e.g. ``"UP 87% \\n"``."""
    with socket.create_connection((host, port), timeout=timeout) as s:
        return _read_reply(s)


def send_state(host: str, port: int, state: str, *, timeout: float = DEFAULT_TIMEOUT_S) -> str:
    """Send ``state`` on the control channel and return the raw reply line."""
    with socket.create_connection((host, port), timeout=timeout) as s:
        s.sendall(state.encode("utf-8") + b"\n")
        return _read_reply(s)


def parse_report(line: str) -> tuple[str, int]:
    """Split ``"<STATE> <IDLE>% \\n"`` into its parts."""
    state, idle = line.split()
    if not idle.endswith("%"):
        raise ValueError(f"malformed report line: {line!r}")
    return state, int(idle[:-1])
