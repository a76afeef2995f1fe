"""Per-connection handlers for the report and control channels.

Both handlers own the connection they are given and always close it.
"""

from __future__ import annotations

import socket
from typing import Protocol

from agentcheck.logging_utils import METRICS, get_logger
from agentcheck.state import NOT_SET, StateStore


_logger = get_logger()

_RECV_CHUNK = 4096


class IdleSampler(Protocol):
    def sample_idle_percent(self) -> int: ...


def format_report(state: str, idle: int) -> bytes:
    return f"{state} {idle}% \n".encode("utf-8")


def handle_report(conn: socket.socket, addr: tuple, store: StateStore, sampler: IdleSampler) -> None:
    """Write ``"<STATE> <IDLE>% \\n"`` and close; client input is never read."""

    with conn:
        # Sample outside the store lock; the state is read afterwards.
        idle = sampler.sample_idle_percent()
        state = store.get()
        try:
            conn.sendall(format_report(state, idle))
        except OSError as exc:
            _logger.debug(
                "report write failed",
                extra={"channel": "report", "peer": addr[0], "error": str(exc)},
            )
            return
        METRICS.counter("reports_served").inc()


def read_line(conn: socket.socket) -> bytes | None:
    """Read up to and excluding the first newline.

    Returns None when the stream ends (or errors) before a newline arrives.
    Bytes after the newline are discarded.
    """

    buf = bytearray()
    while True:
        try:
            chunk = conn.recv(_RECV_CHUNK)
        except OSError:
            return None
        if not chunk:
            return None
        idx = chunk.find(b"\n")
        if idx >= 0:
            buf += chunk[:idx]
            return bytes(buf)
        buf += chunk


def handle_control(conn: socket.socket, addr: tuple, store: StateStore) -> None:
    """Apply one line as the new state, reply with the outcome and close."""

    peer = addr[0]
    with conn:
        line = read_line(conn)
        if line is None:
            METRICS.counter("control_aborted").inc()
            _logger.debug("control connection closed before newline", extra={"channel": "control", "peer": peer})
            return

        candidate = line.decode("utf-8", errors="replace")
        result = store.set(candidate)
        if result == NOT_SET:
            METRICS.counter("control_rejected").inc()
            _logger.info("state not set", extra={"channel": "control", "peer": peer, "candidate": candidate})
        else:
            METRICS.counter("control_applied").inc()
            _logger.info("state set", extra={"channel": "control", "peer": peer, "state": result.rsplit(" ", 1)[0]})

        try:
            conn.sendall((result + "\n").encode("utf-8"))
        except OSError as exc:
            _logger.debug(
                "control write failed",
                extra={"channel": "control", "peer": peer, "error": str(exc)},
            )
